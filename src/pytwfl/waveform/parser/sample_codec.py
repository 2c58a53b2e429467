# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging

import numpy as np

from pytwfl.lib.constants import (
    BYTES_PER_PHASE_VALUE,
    BYTES_PER_SAMPLE,
    INT16_MIN_SAMPLE_COUNT,
    PHASE_COUNT,
    SAMPLE_HEADROOM,
    TWELVE_BIT_HIGH_SHIFT,
    TWELVE_BIT_OFFSET,
)
from pytwfl.lib.types import NDArrayF64, NDArrayI32, StringEnum

logger = logging.getLogger(__name__)


class SampleEncoding(StringEnum):
    """Per-file encoding of each 2-byte phase value, selected by sample count."""
    TWELVE_BIT_PACKED   = "12bit"
    INT16_LE            = "int16le"

    @classmethod
    def for_sample_count(cls, sample_count: int) -> SampleEncoding:
        """Captures below 32769 samples use the packed 12-bit code, longer ones use int16."""
        if sample_count < INT16_MIN_SAMPLE_COUNT:
            return cls.TWELVE_BIT_PACKED
        return cls.INT16_LE


class SampleCodec:
    """
    Decoder for the three-phase sample region of a waveform capture.

    Layout
    ------
    The region is a run of 6-byte groups: phase A (2 bytes), phase B (2 bytes),
    phase C (2 bytes). Trailing bytes that do not form a full group are ignored.

    Encodings
    ---------
    - ``TWELVE_BIT_PACKED``: with ``low`` the first byte of a pair and ``high`` the second,
      ``value = ((high << 4) | low) - 0x800``. The OR overlaps the low nibble of ``high``
      with the upper nibble of ``low``; this is the recorder's format and is kept bit for bit.
    - ``INT16_LE``: little-endian two's complement 16-bit integer.
    """

    @staticmethod
    def decode_twelve_bit(low: int, high: int) -> int:
        """Decode one packed 12-bit phase value from its two bytes."""
        return ((high << TWELVE_BIT_HIGH_SHIFT) | low) - TWELVE_BIT_OFFSET

    @staticmethod
    def decode_int16_le(low: int, high: int) -> int:
        """Decode one little-endian signed 16-bit phase value from its two bytes."""
        return int.from_bytes(bytes((low, high)), byteorder="little", signed=True)

    @staticmethod
    def decode_matrix(region: bytes | bytearray | memoryview,
                      sample_count: int,
                      encoding: SampleEncoding) -> NDArrayF64:
        """
        Decode ``sample_count`` samples into an ``(sample_count, 3)`` float64 matrix.

        Args:
            region: Sample-region bytes, starting at the first 6-byte group.
            sample_count: Number of complete groups to decode.
            encoding: Phase value encoding for the whole file.

        Returns:
            Matrix whose columns are phases A, B and C.
        """
        if sample_count <= 0:
            raise ValueError("sample_count must be positive")
        need = sample_count * BYTES_PER_SAMPLE
        if len(region) < need:
            raise ValueError(f"sample region holds {len(region)} bytes, need {need}")

        if encoding is SampleEncoding.INT16_LE:
            values = np.frombuffer(region, dtype="<i2", count=sample_count * PHASE_COUNT)
            matrix = values.reshape(sample_count, PHASE_COUNT).astype(np.float64)
        else:
            raw = np.frombuffer(region, dtype=np.uint8, count=need)
            pairs = raw.reshape(sample_count, PHASE_COUNT, BYTES_PER_PHASE_VALUE).astype(np.int32)
            low, high = pairs[:, :, 0], pairs[:, :, 1]
            codes: NDArrayI32 = ((high << TWELVE_BIT_HIGH_SHIFT) | low) - TWELVE_BIT_OFFSET
            matrix = codes.astype(np.float64)

        logger.debug("Decoded %d samples x %d phases (%s)", sample_count, PHASE_COUNT, encoding.value)
        return matrix

    @staticmethod
    def decode_phases(region: bytes | bytearray | memoryview,
                      sample_count: int,
                      encoding: SampleEncoding) -> tuple[NDArrayF64, NDArrayF64, NDArrayF64]:
        """
        Decode the region into three read-only phase buffers of capacity ``sample_count + 150``.

        Only indices ``[0, sample_count)`` carry samples; the headroom past them is
        reserved for downstream lookahead and holds no meaningful data.
        """
        matrix = SampleCodec.decode_matrix(region, sample_count, encoding)
        capacity = sample_count + SAMPLE_HEADROOM

        phases: list[NDArrayF64] = []
        for column in range(PHASE_COUNT):
            buf = np.zeros(capacity, dtype=np.float64)
            buf[:sample_count] = matrix[:, column]
            buf.flags.writeable = False
            phases.append(buf)

        return phases[0], phases[1], phases[2]
