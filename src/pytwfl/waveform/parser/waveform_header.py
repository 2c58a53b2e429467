# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
from typing import Any, Literal

from pytwfl.lib.constants import (
    HEADER_LINE_ENDING_BYTES,
    HEADER_SCAN_WINDOW,
    HEADER_SPACE_COUNT,
    MAX_CAPTURE_BYTES,
)
from pytwfl.lib.types import ByteOffset
from pytwfl.waveform.errors import (
    EmptyFileError,
    FileTooLargeError,
    MalformedHeaderError,
)
from pytwfl.waveform.parser.header_cursor import HeaderCursor
from pytwfl.waveform.parser.model.waveform_record import WaveformHeaderParameters

FieldKind = Literal["int", "float", "text"]

# Left-to-right header layout: field i spans [pos[i-1], pos[i]) with whitespace stripped, field 0 starts at offset 0.
HEADER_FIELDS: tuple[tuple[str, FieldKind], ...] = (
    ("station",         "int"),
    ("line",            "int"),
    ("year",            "int"),
    ("month",           "int"),
    ("day",             "int"),
    ("hour",            "int"),
    ("minute",          "int"),
    ("second",          "int"),
    ("micro_second",    "text"),
    ("gps_frequency",   "text"),
    ("gps_flag",        "int"),
    ("break_flag",      "int"),
    ("startup_type",    "int"),
    ("startup_value_1", "float"),
    ("startup_value_2", "float"),
    ("startup_value_3", "float"),
)


class WaveformHeader:
    """
    Parser for the text header of a waveform capture buffer.

    Format
    ------
    - Bytes ``[0, 80)`` (or up to end of buffer) hold one ASCII line of 16
      space-delimited fields, see ``HEADER_FIELDS``.
    - The line is taken to end with a 2-byte terminator counted from the 16th
      space, so the sample region starts at ``pos[15] + 2``.

    Checks, in order
    ----------------
    1. Empty buffer                            -> ``EmptyFileError``
    2. Buffer larger than 512 KiB              -> ``FileTooLargeError``
    3. Fewer than 16 spaces in the scan window -> ``MalformedHeaderError``
    4. Sample region starts at or past the end -> ``MalformedHeaderError``
    """

    def __init__(self, byte_array: bytes | bytearray | memoryview, source_name: str | None = None) -> None:
        """
        Initialize and parse a waveform header from raw bytes.

        Args
        ----
        byte_array : bytes
            Whole capture buffer, starting at the header line.
        source_name : str | None
            File name used in log lines and error messages.
        """
        self.logger: logging.Logger = logging.getLogger(self.__class__.__name__)

        self._source_name: str | None                   = source_name
        self._delimiters: tuple[ByteOffset, ...]        = ()
        self._data_start: ByteOffset                    = ByteOffset(0)
        self._parameters: WaveformHeaderParameters
        self.waveform_data: memoryview                  = memoryview(b"")

        self.__parse_header(byte_array)

    def __parse_header(self, byte_array: bytes | bytearray | memoryview) -> None:
        if not isinstance(byte_array, (bytes, bytearray, memoryview)):
            raise TypeError("byte_array must be bytes-like")

        size = len(byte_array)
        if size == 0:
            raise EmptyFileError("capture buffer is empty", source_name=self._source_name)
        if size > MAX_CAPTURE_BYTES:
            raise FileTooLargeError(
                f"capture buffer is {size} bytes (> {MAX_CAPTURE_BYTES})", source_name=self._source_name)

        cursor = HeaderCursor(byte_array, source_name=self._source_name)
        pos = cursor.find_delimiters(HEADER_SPACE_COUNT, HEADER_SCAN_WINDOW)

        data_start = pos[-1] + HEADER_LINE_ENDING_BYTES
        if data_start >= size:
            raise MalformedHeaderError(
                f"sample region starts at {data_start}, beyond buffer length {size}",
                source_name=self._source_name)

        values: dict[str, Any] = {}
        start = 0
        for (name, kind), end in zip(HEADER_FIELDS, pos):
            if kind == "int":
                values[name] = cursor.int_field(start, end, name)
            elif kind == "float":
                values[name] = cursor.float_field(start, end, name)
            else:
                values[name] = cursor.text(start, end)
            start = end

        self._delimiters = pos
        self._data_start = ByteOffset(data_start)
        self._parameters = WaveformHeaderParameters(**values)
        self.waveform_data = memoryview(byte_array)[data_start:]

        self.logger.debug("Header parsed: station=%d, line=%d, data_start=%d, data_bytes=%d",
                          self._parameters.station, self._parameters.line,
                          data_start, len(self.waveform_data))

    @property
    def data_start(self) -> ByteOffset:
        """Offset of the first sample byte."""
        return self._data_start

    @property
    def delimiters(self) -> tuple[ByteOffset, ...]:
        """Offsets of the 16 header spaces."""
        return self._delimiters

    @property
    def source_name(self) -> str | None:
        return self._source_name

    def getWaveformHeaderParameterModel(self) -> WaveformHeaderParameters:
        """
        Retrieve the parsed header fields.

        Returns
        -------
        WaveformHeaderParameters
            Model containing typed header fields.
        """
        return self._parameters

    def getWaveformHeader(self, header_only: bool = False) -> dict[str, Any]:
        """
        Serialize the header to a dictionary.

        Parameters
        ----------
        header_only : bool, optional
            If True, omit the raw sample region. Defaults to False.
        """
        out: dict[str, Any] = {"waveform_header": self._parameters.model_dump()}
        if not header_only:
            out["data"] = self.waveform_data.hex()
        return out
