# tests/test_waveform_decoder.py
# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

from pytwfl.lib.constants import MAX_CAPTURE_BYTES, SAMPLE_HEADROOM
from pytwfl.waveform.errors import (
    DecodeErrorKind,
    EmptyDataRegionError,
    EmptyFileError,
    FileTooLargeError,
    MalformedHeaderError,
    WaveformDecodeError,
)
from pytwfl.waveform.parser.model.waveform_record import Phase, WaveformRecord
from pytwfl.waveform.parser.sample_codec import SampleEncoding
from pytwfl.waveform.parser.waveform_file import WaveformDecoder, WaveformFile

SMALL_MATRIX = np.array(
    [
        [0, 1, -1],
        [100, -100, 2047],
        [-2048, 5, 6],
        [7, 8, 9],
    ],
    dtype=np.int64,
)


@pytest.mark.waveform
def test_header_fields_reproduced_exactly(make_capture) -> None:
    """
    Verify Every Header Field Is Decoded As Written.
    """
    record = WaveformDecoder.decode(make_capture(SMALL_MATRIX))
    hdr = record.waveform_header

    assert (hdr.station, hdr.line) == (7, 12)
    assert (hdr.year, hdr.month, hdr.day) == (2024, 5, 17)
    assert (hdr.hour, hdr.minute, hdr.second) == (10, 30, 45)
    assert hdr.micro_second == "123456"
    assert hdr.gps_frequency == "50.0"
    assert (hdr.gps_flag, hdr.break_flag, hdr.startup_type) == (1, 0, 3)
    assert hdr.startup_value_1 == pytest.approx(1.5)
    assert hdr.startup_value_2 == pytest.approx(2.5)
    assert hdr.startup_value_3 == pytest.approx(3.5)


@pytest.mark.waveform
def test_text_fields_keep_placeholders_and_empty_numeric_reads_zero(make_capture) -> None:
    """
    Text Fields Keep Non-Numeric Placeholders; An Empty Numeric Field Reads As 0.
    """
    fields = ["7", "12", "2024", "5", "17", "10", "30", "45",
              "**", "--", "", "0", "3", "1.5", "", "3.5"]
    hdr = WaveformDecoder.decode(make_capture(SMALL_MATRIX, fields=fields)).waveform_header

    assert hdr.micro_second == "**"
    assert hdr.gps_frequency == "--"
    assert hdr.gps_flag == 0
    assert hdr.startup_value_2 == 0.0


@pytest.mark.waveform
def test_samples_and_layout(make_capture) -> None:
    """
    Validate Sample Values, Capacity n + 150, Read-Only Buffers And Encoding.
    """
    record = WaveformDecoder.decode(make_capture(SMALL_MATRIX))

    assert record.data_length == 4
    assert record.encoding is SampleEncoding.TWELVE_BIT_PACKED

    for column, phase in enumerate(Phase):
        buf = record.samples(phase)
        assert buf.shape == (4 + SAMPLE_HEADROOM,)
        assert buf.flags.writeable is False
        np.testing.assert_array_equal(record.valid_samples(phase), SMALL_MATRIX[:, column].astype(np.float64))


@pytest.mark.waveform
def test_trailing_partial_sample_is_ignored(make_capture) -> None:
    record = WaveformDecoder.decode(make_capture(SMALL_MATRIX, trailing=b"\x01\x02\x03"))
    assert record.data_length == 4


@pytest.mark.waveform
def test_encoding_boundary_32768_vs_32769(make_header) -> None:
    """
    Identical (0x01, 0x00) Byte Pairs Decode As 12-Bit Below 32769 Samples And As int16 From 32769.
    """
    pair = b"\x01\x00"

    twelve = WaveformDecoder.decode(make_header() + pair * 3 * 32768)
    sixteen = WaveformDecoder.decode(make_header() + pair * 3 * 32769)

    assert twelve.data_length == 32768
    assert twelve.encoding is SampleEncoding.TWELVE_BIT_PACKED
    assert twelve.valid_samples(Phase.A)[0] == -2047.0

    assert sixteen.data_length == 32769
    assert sixteen.encoding is SampleEncoding.INT16_LE
    assert sixteen.valid_samples(Phase.C)[-1] == 1.0


@pytest.mark.waveform
def test_int16_values_decode_little_endian(make_header) -> None:
    n = 32769
    values = np.zeros((n, 3), dtype=np.int64)
    values[0] = [1, -1, -32768]
    values[-1] = [32767, 0, -2]
    buf = make_header() + values.astype("<i2").tobytes()

    record = WaveformDecoder.decode(buf)

    assert list(record.valid_samples(Phase.A)[[0, -1]]) == [1.0, 32767.0]
    assert list(record.valid_samples(Phase.B)[[0, -1]]) == [-1.0, 0.0]
    assert list(record.valid_samples(Phase.C)[[0, -1]]) == [-32768.0, -2.0]


@pytest.mark.waveform
def test_buffer_at_size_ceiling_is_accepted(make_header) -> None:
    header = make_header()
    buf = header + b"\x00" * (MAX_CAPTURE_BYTES - len(header))
    record = WaveformDecoder.decode(buf)
    assert record.data_length == (MAX_CAPTURE_BYTES - len(header)) // 6


# ──────────────────────────────────────────────────────────────────────
# Error taxonomy
# ──────────────────────────────────────────────────────────────────────
@pytest.mark.waveform
def test_empty_buffer_raises_empty_file() -> None:
    with pytest.raises(EmptyFileError) as exc:
        WaveformDecoder.decode(b"")
    assert exc.value.kind is DecodeErrorKind.EMPTY_FILE


@pytest.mark.waveform
def test_oversized_buffer_checked_before_header() -> None:
    """
    A Buffer Over 512 KiB Is Rejected As FileTooLarge Even With No Header Spaces.
    """
    with pytest.raises(FileTooLargeError) as exc:
        WaveformDecoder.decode(b"x" * (MAX_CAPTURE_BYTES + 1))
    assert exc.value.kind is DecodeErrorKind.FILE_TOO_LARGE


@pytest.mark.waveform
def test_too_few_spaces_raises_malformed_header() -> None:
    with pytest.raises(MalformedHeaderError) as exc:
        WaveformDecoder.decode(b"1 2 3\n" + b"\x00" * 60)
    assert exc.value.kind is DecodeErrorKind.MALFORMED_HEADER


@pytest.mark.waveform
def test_spaces_beyond_scan_window_are_not_counted(make_capture) -> None:
    fields = ["1" * 70] + ["0"] * 15
    with pytest.raises(MalformedHeaderError):
        WaveformDecoder.decode(make_capture(SMALL_MATRIX, fields=fields))


@pytest.mark.waveform
def test_header_only_buffer_raises_malformed_header(make_header) -> None:
    """
    Data Start At Buffer End Is A Malformed Header, Not An Empty Data Region.
    """
    with pytest.raises(MalformedHeaderError):
        WaveformDecoder.decode(make_header())


@pytest.mark.waveform
def test_partial_sample_region_raises_empty_data_region(make_header) -> None:
    with pytest.raises(EmptyDataRegionError) as exc:
        WaveformDecoder.decode(make_header() + b"\x00" * 5)
    assert exc.value.kind is DecodeErrorKind.EMPTY_DATA_REGION


@pytest.mark.waveform
def test_non_numeric_field_raises_malformed_header(make_capture) -> None:
    fields = ["abc"] + ["0"] * 15
    with pytest.raises(MalformedHeaderError, match="station"):
        WaveformDecoder.decode(make_capture(SMALL_MATRIX, fields=fields))


@pytest.mark.waveform
def test_decode_errors_are_value_errors_with_source_name() -> None:
    with pytest.raises(WaveformDecodeError) as exc:
        WaveformDecoder.decode(b"", source_name="fault.all")
    assert isinstance(exc.value, ValueError)
    assert exc.value.source_name == "fault.all"
    assert "fault.all" in str(exc.value)


# ──────────────────────────────────────────────────────────────────────
# Path-based decode and serialization
# ──────────────────────────────────────────────────────────────────────
@pytest.mark.waveform
def test_from_path_records_source_name(tmp_path: Path, make_capture) -> None:
    path = tmp_path / "20240517_103045.all"
    path.write_bytes(make_capture(SMALL_MATRIX))

    wf = WaveformFile.from_path(path)

    assert wf.source_name == "20240517_103045.all"
    assert wf.to_model().source_name == "20240517_103045.all"
    assert WaveformDecoder.decode_path(path).data_length == 4


@pytest.mark.waveform
def test_decode_path_missing_file_raises_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        WaveformDecoder.decode_path(tmp_path / "missing.all")


@pytest.mark.waveform
def test_to_dict_emits_valid_samples_only(make_capture) -> None:
    wf = WaveformFile(make_capture(SMALL_MATRIX))
    out = wf.to_dict()

    assert out["data_length"] == 4
    assert out["phase_a"] == [0.0, 100.0, -2048.0, 7.0]
    assert len(out["phase_c"]) == 4
    assert out["waveform_header"]["station"] == 7
    assert '"phase_b"' in wf.to_json()


@pytest.mark.waveform
def test_header_exposes_offsets_and_header_only_dict(make_capture) -> None:
    wf = WaveformFile(make_capture(SMALL_MATRIX))

    assert len(wf.delimiters) == 16
    assert wf.data_start == wf.delimiters[-1] + 2
    assert "data" not in wf.getWaveformHeader(header_only=True)
    assert wf.getWaveformHeader()["data"] == bytes(wf.waveform_data).hex()


@pytest.mark.waveform
def test_record_rejects_wrong_capacity(make_capture) -> None:
    record = WaveformDecoder.decode(make_capture(SMALL_MATRIX))
    short = np.zeros(4, dtype=np.float64)

    with pytest.raises(ValidationError):
        WaveformRecord(
            waveform_header=record.waveform_header,
            data_length=4,
            encoding=record.encoding,
            phase_a=short,
            phase_b=record.phase_b,
            phase_c=record.phase_c,
        )
