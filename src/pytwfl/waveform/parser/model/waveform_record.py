# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from pytwfl.lib.constants import SAMPLE_HEADROOM
from pytwfl.lib.types import FloatSeries, LineId, NDArrayF64, StationId, StringEnum
from pytwfl.waveform.parser.sample_codec import SampleEncoding


class Phase(StringEnum):
    """Conductor of a three-phase line."""
    A = "A"
    B = "B"
    C = "C"


class WaveformHeaderParameters(BaseModel):
    """Typed fields parsed from the leading text line of a waveform capture."""
    model_config = ConfigDict(frozen=True)

    station: StationId      = Field(..., description="Recorder station number")
    line: LineId            = Field(..., description="Monitored line number")
    year: int               = Field(..., description="Capture year")
    month: int              = Field(..., description="Capture month")
    day: int                = Field(..., description="Capture day")
    hour: int               = Field(..., description="Capture hour")
    minute: int             = Field(..., description="Capture minute")
    second: int             = Field(..., description="Capture second")
    micro_second: str       = Field(default="", description="Sub-second field, trimmed text (may hold placeholders)")
    gps_frequency: str      = Field(default="", description="GPS frequency field, trimmed text (may hold placeholders)")
    gps_flag: int           = Field(..., description="GPS lock flag")
    break_flag: int         = Field(..., description="Breaker trip flag")
    startup_type: int       = Field(..., description="Recorder startup (trigger) type")
    startup_value_1: float  = Field(..., description="First startup threshold value")
    startup_value_2: float  = Field(..., description="Second startup threshold value")
    startup_value_3: float  = Field(..., description="Third startup threshold value")


class WaveformRecord(BaseModel):
    """
    One decoded waveform capture: header plus three synchronized phase sequences.

    Notes
    -----
    - ``data_length`` is the number of valid samples ``n``; each phase buffer has
      capacity ``n + 150`` and only ``[0, n)`` holds samples.
    - Phase buffers are read-only numpy arrays; the record is frozen.
    - Serialization emits the valid samples only.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    waveform_header: WaveformHeaderParameters = Field(..., description="Parsed header fields")
    data_length: int                          = Field(..., gt=0, description="Number of valid samples per phase")
    encoding: SampleEncoding                  = Field(..., description="Phase value encoding selected by sample count")
    phase_a: NDArrayF64                       = Field(..., description="Phase A samples (capacity n + 150)")
    phase_b: NDArrayF64                       = Field(..., description="Phase B samples (capacity n + 150)")
    phase_c: NDArrayF64                       = Field(..., description="Phase C samples (capacity n + 150)")
    source_name: str | None                   = Field(default=None, description="Source file name, when decoded from a path")

    @model_validator(mode="after")
    def _check_phase_capacity(self) -> WaveformRecord:
        capacity = self.data_length + SAMPLE_HEADROOM
        for phase in Phase:
            size = int(self.samples(phase).shape[0])
            if size != capacity:
                raise ValueError(f"phase {phase.value} capacity {size} != data_length + {SAMPLE_HEADROOM} ({capacity})")
        return self

    @field_serializer("phase_a", "phase_b", "phase_c")
    def _ser_phase(self, value: NDArrayF64) -> FloatSeries:
        return value[: self.data_length].tolist()

    def samples(self, phase: Phase) -> NDArrayF64:
        """Full-capacity buffer for ``phase`` (valid samples followed by headroom)."""
        phase = Phase(phase)
        if phase is Phase.B:
            return self.phase_b
        if phase is Phase.C:
            return self.phase_c
        return self.phase_a

    def valid_samples(self, phase: Phase) -> NDArrayF64:
        """View of the ``n`` valid samples for ``phase``."""
        return self.samples(phase)[: self.data_length]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent)
