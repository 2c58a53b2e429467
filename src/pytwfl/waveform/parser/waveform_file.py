# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
from pathlib import Path

from pytwfl.lib.constants import BYTES_PER_SAMPLE
from pytwfl.lib.file_processor import FileProcessor
from pytwfl.lib.types import PathLike
from pytwfl.waveform.errors import EmptyDataRegionError, MalformedHeaderError
from pytwfl.waveform.parser.model.waveform_record import WaveformRecord
from pytwfl.waveform.parser.sample_codec import SampleCodec, SampleEncoding
from pytwfl.waveform.parser.waveform_header import WaveformHeader


class WaveformFile(WaveformHeader):
    """
    Represents one fault-recorder waveform capture (".all" file).

    The capture is a text header line followed by a sample region of 6-byte groups,
    one 2-byte value per phase (A, B, C). Sample count ``n`` is the number of complete
    groups; captures with ``n < 32769`` carry packed 12-bit codes, longer captures
    carry little-endian int16 values.

    Decoding is all-or-nothing: any failure raises a ``WaveformDecodeError`` subclass
    and no partial record is produced.
    """

    def __init__(self, binary_data: bytes | bytearray | memoryview, source_name: str | None = None) -> None:
        super().__init__(binary_data, source_name=source_name)
        self.logger = logging.getLogger(self.__class__.__name__)

        self._data_length: int
        self._encoding: SampleEncoding
        self._model: WaveformRecord

        self.__process()

    def __process(self) -> None:
        data_bytes = len(self.waveform_data)
        if data_bytes < 0:
            raise MalformedHeaderError("sample region length is negative", source_name=self.source_name)

        self._data_length = data_bytes // BYTES_PER_SAMPLE
        if self._data_length <= 0:
            raise EmptyDataRegionError(
                f"sample region of {data_bytes} bytes holds no complete {BYTES_PER_SAMPLE}-byte sample",
                source_name=self.source_name)

        self._encoding = SampleEncoding.for_sample_count(self._data_length)
        phase_a, phase_b, phase_c = SampleCodec.decode_phases(self.waveform_data, self._data_length, self._encoding)

        self._model = WaveformRecord(
            waveform_header =   self.getWaveformHeaderParameterModel(),
            data_length     =   self._data_length,
            encoding        =   self._encoding,
            phase_a         =   phase_a,
            phase_b         =   phase_b,
            phase_c         =   phase_c,
            source_name     =   self.source_name,
        )

        self.logger.debug("Decoded %s: n=%d, encoding=%s, trailing_bytes=%d",
                          self.source_name or "<buffer>", self._data_length, self._encoding.value,
                          data_bytes - self._data_length * BYTES_PER_SAMPLE)

    @property
    def data_length(self) -> int:
        return self._data_length

    @property
    def encoding(self) -> SampleEncoding:
        return self._encoding

    def to_model(self) -> WaveformRecord:
        return self._model

    def to_dict(self) -> dict:
        """
        Returns a dictionary with the header and the valid samples of each phase.
        """
        return self.to_model().to_dict()

    def to_json(self, indent: int = 2) -> str:
        """
        Returns a JSON-formatted string with the header and the valid samples of each phase.
        """
        return self.to_model().to_json(indent=indent)

    @classmethod
    def from_path(cls, path: PathLike) -> WaveformFile:
        """
        Read a capture file in full and decode it.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        WaveformDecodeError
            If the file content is not a valid capture.
        """
        fp = FileProcessor(path)
        return cls(fp.read_file(), source_name=Path(path).name)


class WaveformDecoder:
    """Stateless entry point: bytes (or a path) in, ``WaveformRecord`` out."""

    @staticmethod
    def decode(buffer: bytes | bytearray | memoryview, source_name: str | None = None) -> WaveformRecord:
        return WaveformFile(buffer, source_name=source_name).to_model()

    @staticmethod
    def decode_path(path: PathLike) -> WaveformRecord:
        return WaveformFile.from_path(path).to_model()
