# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging

from pytwfl.lib.constants import (
    HEADER_DELIMITER,
    HEADER_SCAN_WINDOW,
    HEADER_SPACE_COUNT,
    HEADER_WHITESPACE,
)
from pytwfl.lib.types import ByteOffset
from pytwfl.waveform.errors import MalformedHeaderError


class HeaderCursor:
    """
    Bounds-checked view over the leading text line of a waveform capture buffer.

    The header line is a run of space-delimited ASCII fields. The cursor locates the
    delimiter positions inside a fixed scan window and hands out trimmed field text
    for any ``[start, end)`` range, clamping every access to the buffer so that no
    offset arithmetic can read past either end.

    Parameters
    ----------
    buffer : bytes | bytearray | memoryview
        Raw capture bytes, starting at offset 0 of the file.
    source_name : str | None
        File name used to annotate errors.
    """

    def __init__(self, buffer: bytes | bytearray | memoryview, source_name: str | None = None) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self._view: memoryview = memoryview(buffer).cast("B")
        self._source_name = source_name

    def __len__(self) -> int:
        return len(self._view)

    def find_delimiters(self,
                        count: int = HEADER_SPACE_COUNT,
                        window: int = HEADER_SCAN_WINDOW) -> tuple[ByteOffset, ...]:
        """
        Return the offsets of the first ``count`` space bytes within ``window``.

        Raises
        ------
        MalformedHeaderError
            If fewer than ``count`` spaces occur in the first ``min(window, len)`` bytes.
        """
        if count <= 0 or window <= 0:
            raise ValueError("count and window must be positive")

        limit = min(window, len(self._view))
        positions: list[ByteOffset] = []
        for offset in range(limit):
            if self._view[offset] == HEADER_DELIMITER:
                positions.append(ByteOffset(offset))
                if len(positions) == count:
                    break

        if len(positions) < count:
            raise MalformedHeaderError(
                f"header delimiters: expected {count} spaces in first {limit} bytes, found {len(positions)}",
                source_name=self._source_name)

        self.logger.debug("Header delimiters at %s", positions)
        return tuple(positions)

    def raw(self, start: int, end: int) -> bytes:
        """Bytes in ``[start, end)`` clamped to the buffer; empty when the range is inverted."""
        begin = max(0, start)
        stop = min(len(self._view), end)
        if stop <= begin:
            return b""
        return self._view[begin:stop].tobytes()

    def text(self, start: int, end: int) -> str:
        """ASCII text in ``[start, end)`` with spaces, tabs, CR and LF trimmed from both ends."""
        field = self.raw(start, end).strip(HEADER_WHITESPACE)
        return field.decode("ascii", errors="replace")

    def int_field(self, start: int, end: int, name: str) -> int:
        """Base-10 integer in ``[start, end)``; an empty field reads as 0."""
        text = self.text(start, end)
        if text == "":
            return 0
        try:
            return int(text, 10)
        except ValueError as e:
            raise MalformedHeaderError(
                f"header field '{name}' is not an integer: {text!r}",
                source_name=self._source_name) from e

    def float_field(self, start: int, end: int, name: str) -> float:
        """Floating-point number in ``[start, end)``; an empty field reads as 0.0."""
        text = self.text(start, end)
        if text == "":
            return 0.0
        try:
            return float(text)
        except ValueError as e:
            raise MalformedHeaderError(
                f"header field '{name}' is not a number: {text!r}",
                source_name=self._source_name) from e
