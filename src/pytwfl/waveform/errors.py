# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from pytwfl.lib.types import StringEnum


class DecodeErrorKind(StringEnum):
    """Closed set of reasons a waveform capture buffer cannot be decoded."""
    EMPTY_FILE          = "EmptyFile"
    FILE_TOO_LARGE      = "FileTooLarge"
    MALFORMED_HEADER    = "MalformedHeader"
    EMPTY_DATA_REGION   = "EmptyDataRegion"


class WaveformDecodeError(ValueError):
    """
    Permanent per-file decode failure.

    The buffer itself is malformed, so re-parsing it will not succeed. Callers
    branch on ``kind`` (or on the concrete subclass) rather than the message.

    Attributes
    ----------
    kind : DecodeErrorKind
        Tag identifying the failure.
    source_name : str | None
        File name of the offending capture, when known.
    """

    kind: DecodeErrorKind = DecodeErrorKind.MALFORMED_HEADER

    def __init__(self, message: str, *, source_name: str | None = None) -> None:
        self.source_name = source_name
        if source_name:
            message = f"{message} (file={source_name})"
        super().__init__(message)


class EmptyFileError(WaveformDecodeError):
    """Buffer length is zero."""
    kind = DecodeErrorKind.EMPTY_FILE


class FileTooLargeError(WaveformDecodeError):
    """Buffer exceeds the 512 KiB capture ceiling."""
    kind = DecodeErrorKind.FILE_TOO_LARGE


class MalformedHeaderError(WaveformDecodeError):
    """Header text is missing delimiters, holds a non-numeric field, or overruns the buffer."""
    kind = DecodeErrorKind.MALFORMED_HEADER


class EmptyDataRegionError(WaveformDecodeError):
    """Sample region holds no complete 6-byte sample."""
    kind = DecodeErrorKind.EMPTY_DATA_REGION


__all__ = [
    "DecodeErrorKind",
    "WaveformDecodeError",
    "EmptyFileError",
    "FileTooLargeError",
    "MalformedHeaderError",
    "EmptyDataRegionError",
]
