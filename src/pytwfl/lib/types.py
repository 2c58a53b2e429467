# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import NewType, TypeAlias

import numpy as np
from numpy.typing import NDArray

ExitCode = NewType("ExitCode", int)

# Enum String Type
class StringEnum(str, Enum):
    """Py3.10-compatible StrEnum shim."""
    pass

# ────────────────────────────────────────────────────────────────────────────────
# Core numerics
# ────────────────────────────────────────────────────────────────────────────────
Number       = int | float | np.number
ArrayLikeF64 = Sequence[float] | NDArray[np.float64]

# Canonical ndarray outputs (internal processing should normalize to these)
NDArrayF64: TypeAlias   = NDArray[np.float64]
NDArrayI32: TypeAlias   = NDArray[np.int32]
NDArrayU8: TypeAlias    = NDArray[np.uint8]

FloatSeries: TypeAlias  = list[float]

# ────────────────────────────────────────────────────────────────────────────────
# Paths / filesystem
# ────────────────────────────────────────────────────────────────────────────────
PathLike    = str | Path
FileNameStr = NewType("FileNameStr", str)

# ────────────────────────────────────────────────────────────────────────────────
# Unit-tagged NewTypes (scalars only; runtime = underlying type)
# ────────────────────────────────────────────────────────────────────────────────
# Time / index
SampleIndex   = NewType("SampleIndex", int)
SampleCount   = NewType("SampleCount", int)
TimeMs        = NewType("TimeMs", float)

# Line geometry / propagation
DistanceKm    = NewType("DistanceKm", float)
SpeedKmPerMs  = NewType("SpeedKmPerMs", float)

# Recorder identifiers
StationId     = NewType("StationId", int)
LineId        = NewType("LineId", int)

# Byte offsets inside a capture buffer
ByteOffset    = NewType("ByteOffset", int)
