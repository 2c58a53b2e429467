# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from pytwfl.lib.constants import (
    DEFAULT_FIRST_WAVE_SIGMA,
    DEFAULT_LINE_LENGTH_KM,
    DEFAULT_MIN_SAMPLES_BETWEEN_WAVES,
    DEFAULT_SAMPLING_INTERVAL_MS,
    DEFAULT_SECOND_WAVE_SIGMA,
    DEFAULT_WAVE_SPEED_KM_PER_MS,
    REPORT_DECIMALS,
)
from pytwfl.lib.types import StringEnum
from pytwfl.waveform.parser.model.waveform_record import Phase


class DetectionConfig(BaseModel):
    """Parameters shared by wave-head detection and single-ended location."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    sampling_interval_ms: float     = Field(DEFAULT_SAMPLING_INTERVAL_MS, gt=0.0, description="Sampling interval Δt (ms); scales sample index to time")
    wave_speed_km_per_ms: float     = Field(DEFAULT_WAVE_SPEED_KM_PER_MS, gt=0.0, description="Traveling-wave propagation speed v (km/ms)")
    line_length_km: float           = Field(DEFAULT_LINE_LENGTH_KM, gt=0.0, description="Total line length (km), echoed for reference")
    first_wave_sigma: float         = Field(DEFAULT_FIRST_WAVE_SIGMA, gt=0.0, description="Noise multiplier for the incident-wave threshold")
    second_wave_sigma: float        = Field(DEFAULT_SECOND_WAVE_SIGMA, gt=0.0, description="Noise multiplier for the reflected-wave threshold")
    min_samples_between_waves: int  = Field(DEFAULT_MIN_SAMPLES_BETWEEN_WAVES, ge=0, description="Minimum index gap between incident and reflected waves (or 2% of n, whichever is larger)")

    @classmethod
    def default(cls) -> DetectionConfig:
        """Demo configuration: 100 kHz sampling, 200 km/ms, 300 km line, sigma 6/5, gap 500."""
        return cls()


class DetectionResult(BaseModel):
    """Wave heads found on one phase and the resulting single-ended distance."""
    model_config = ConfigDict(frozen=True)

    phase: Phase                = Field(..., description="Phase the samples came from")
    first_wave_index: int       = Field(..., ge=0, description="Incident-wave sample index t1")
    second_wave_index: int      = Field(..., ge=0, description="Reflected-wave sample index t2")
    first_wave_time_ms: float   = Field(..., description="Incident-wave time (ms)")
    second_wave_time_ms: float  = Field(..., description="Reflected-wave time (ms)")
    distance_km: float          = Field(..., ge=0.0, description="Distance from the measuring end (km)")
    config: DetectionConfig     = Field(..., description="Configuration used for detection")
    source_name: str | None     = Field(default=None, description="Source capture file name, when known")

    def summary_lines(self) -> list[str]:
        d = REPORT_DECIMALS
        cfg = self.config
        return [
            f"file           = {self.source_name or '-'}",
            f"phase          = {self.phase.value}",
            f"incident t1    = sample {self.first_wave_index}, time {self.first_wave_time_ms:.{d}f} ms",
            f"reflected t2   = sample {self.second_wave_index}, time {self.second_wave_time_ms:.{d}f} ms",
            f"distance       = {self.distance_km:.{d}f} km from measuring end",
            f"assumptions    = v {cfg.wave_speed_km_per_ms:.{d}f} km/ms, "
            f"dt {cfg.sampling_interval_ms:.{d}f} ms, line ~{cfg.line_length_km:.2f} km",
        ]


class UndetectedReason(StringEnum):
    """Why no wave-head pair could be identified. Not an error."""
    INSUFFICIENT_SAMPLES    = "InsufficientSamples"
    NO_INCIDENT_WAVE        = "NoIncidentWave"
    NO_REFLECTED_WAVE       = "NoReflectedWave"


class Detected(BaseModel):
    """Outcome variant carrying a detection result."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["detected"]   = "detected"
    result: DetectionResult     = Field(..., description="Detected wave heads and distance")

    @property
    def is_detected(self) -> bool:
        return True


class Undetected(BaseModel):
    """Outcome variant for data where wave heads could not be identified."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["undetected"] = "undetected"
    reason: UndetectedReason    = Field(..., description="Why detection did not produce a result")
    phase: Phase                = Field(..., description="Phase that was examined")

    @property
    def is_detected(self) -> bool:
        return False


DetectionOutcome: TypeAlias = Detected | Undetected
