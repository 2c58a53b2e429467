# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from typing import Final, cast

from pytwfl.lib.types import SampleCount

# ────────────────────────────────────────────────────────────────────────────────
# Waveform capture buffer layout
# ────────────────────────────────────────────────────────────────────────────────
MAX_CAPTURE_BYTES: Final[int]           = 512 * 1024
HEADER_SCAN_WINDOW: Final[int]          = 80
HEADER_SPACE_COUNT: Final[int]          = 16
HEADER_LINE_ENDING_BYTES: Final[int]    = 2            # sample region starts 2 bytes past the 16th space
HEADER_WHITESPACE: Final[bytes]         = b" \t\r\n"
HEADER_DELIMITER: Final[int]            = 0x20          # ASCII space

PHASE_COUNT: Final[int]                 = 3
BYTES_PER_PHASE_VALUE: Final[int]       = 2
BYTES_PER_SAMPLE: Final[int]            = PHASE_COUNT * BYTES_PER_PHASE_VALUE

SAMPLE_HEADROOM: Final[int]             = 150
INT16_MIN_SAMPLE_COUNT: Final[SampleCount] = cast(SampleCount, 32769)
TWELVE_BIT_OFFSET: Final[int]           = 0x800
TWELVE_BIT_HIGH_SHIFT: Final[int]       = 4

# ────────────────────────────────────────────────────────────────────────────────
# Wave-head detection
# ────────────────────────────────────────────────────────────────────────────────
MIN_DETECTION_SAMPLES: Final[int]       = 10
BASELINE_DIVISOR: Final[int]            = 10
BASELINE_MIN_SAMPLES: Final[int]        = 50
BASELINE_MAX_SAMPLES: Final[int]        = 1000
MIN_GAP_PERCENT: Final[int]             = 2            # reflected wave at least 2% of n after t1

# Demo defaults (100 kHz sampling, ~2e5 km/s propagation)
DEFAULT_SAMPLING_INTERVAL_MS: Final[float]  = 0.01
DEFAULT_WAVE_SPEED_KM_PER_MS: Final[float]  = 200.0
DEFAULT_LINE_LENGTH_KM: Final[float]        = 300.0
DEFAULT_FIRST_WAVE_SIGMA: Final[float]      = 6.0
DEFAULT_SECOND_WAVE_SIGMA: Final[float]     = 5.0
DEFAULT_MIN_SAMPLES_BETWEEN_WAVES: Final[int] = 500

# ────────────────────────────────────────────────────────────────────────────────
# Reporting
# ────────────────────────────────────────────────────────────────────────────────
REPORT_DECIMALS: Final[int]             = 6
DEFAULT_END_A_LABEL: Final[str]         = "A"
DEFAULT_END_B_LABEL: Final[str]         = "B"

__all__ = [
    "MAX_CAPTURE_BYTES", "HEADER_SCAN_WINDOW", "HEADER_SPACE_COUNT",
    "HEADER_LINE_ENDING_BYTES", "HEADER_WHITESPACE", "HEADER_DELIMITER",
    "PHASE_COUNT", "BYTES_PER_PHASE_VALUE", "BYTES_PER_SAMPLE",
    "SAMPLE_HEADROOM", "INT16_MIN_SAMPLE_COUNT", "TWELVE_BIT_OFFSET", "TWELVE_BIT_HIGH_SHIFT",
    "MIN_DETECTION_SAMPLES", "BASELINE_DIVISOR", "BASELINE_MIN_SAMPLES", "BASELINE_MAX_SAMPLES",
    "MIN_GAP_PERCENT",
    "DEFAULT_SAMPLING_INTERVAL_MS", "DEFAULT_WAVE_SPEED_KM_PER_MS", "DEFAULT_LINE_LENGTH_KM",
    "DEFAULT_FIRST_WAVE_SIGMA", "DEFAULT_SECOND_WAVE_SIGMA", "DEFAULT_MIN_SAMPLES_BETWEEN_WAVES",
    "REPORT_DECIMALS", "DEFAULT_END_A_LABEL", "DEFAULT_END_B_LABEL",
]
