# tests/conftest.py
# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence

import numpy as np
import pytest

from pytwfl.config.log_config import LoggerConfigurator

# station line year month day hour minute second us gps_freq gps_flag break start_type v1 v2 v3
DEFAULT_HEADER_FIELDS: tuple[str, ...] = (
    "7", "12", "2024", "5", "17", "10", "30", "45",
    "123456", "50.0", "1", "0", "3", "1.5", "2.5", "3.5",
)

CaptureBuilder = Callable[..., bytes]


def header_bytes(fields: Sequence[str] = DEFAULT_HEADER_FIELDS) -> bytes:
    """
    Header line with a space after each of the 16 fields and one terminator byte,
    so the sample region begins exactly two bytes past the 16th space.
    """
    assert len(fields) == 16
    return (" ".join(fields) + " ").encode("ascii") + b"\n"


def encode_region(matrix: np.ndarray, twelve_bit: bool) -> bytes:
    """
    Encode an (n, 3) matrix of integer sample values as a capture sample region.

    12-bit values use ``low = code & 0x0F`` and ``high = code >> 4`` with
    ``code = value + 0x800``, which decodes back to ``value``.
    """
    m = np.asarray(matrix, dtype=np.int64)
    if twelve_bit:
        code = m + 0x800
        out = np.empty(m.shape + (2,), dtype=np.uint8)
        out[..., 0] = code & 0x0F
        out[..., 1] = code >> 4
        return out.tobytes()
    return m.astype("<i2").tobytes()


@pytest.fixture()
def make_capture() -> CaptureBuilder:
    """
    Build a synthetic capture buffer.

    Call as ``make_capture(matrix, fields=..., twelve_bit=None, trailing=b"")``.
    ``twelve_bit`` defaults to the encoding the decoder selects for ``len(matrix)``.
    """
    def _build(matrix: np.ndarray,
               fields: Sequence[str] = DEFAULT_HEADER_FIELDS,
               twelve_bit: bool | None = None,
               trailing: bytes = b"") -> bytes:
        n = int(np.asarray(matrix).shape[0])
        use_twelve = (n < 32769) if twelve_bit is None else twelve_bit
        return header_bytes(fields) + encode_region(matrix, use_twelve) + trailing

    return _build


def alternating_noise(n: int) -> np.ndarray:
    """0, 1, 0, 1, ... : every first difference has magnitude exactly 1."""
    return (np.arange(n) % 2).astype(np.float64)


def stepped_signal(n: int, steps: Sequence[tuple[int, float]]) -> np.ndarray:
    """Alternating noise floor with level steps ``(index, amplitude)`` added from ``index`` onwards."""
    x = alternating_noise(n)
    for index, amplitude in steps:
        x[index:] += amplitude
    return x


@pytest.fixture()
def make_signal() -> Callable[..., np.ndarray]:
    """Factory for ``stepped_signal(n, steps)``."""
    return stepped_signal


@pytest.fixture()
def reset_logging() -> Iterator[None]:
    """Remove any file or console handler a test installed on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    LoggerConfigurator.reset()
    root.setLevel(level)


@pytest.fixture()
def make_header() -> Callable[..., bytes]:
    """Factory for ``header_bytes(fields)``."""
    return header_bytes
