# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from pytwfl.lib.constants import DEFAULT_END_A_LABEL, DEFAULT_END_B_LABEL, REPORT_DECIMALS
from pytwfl.lib.types import DistanceKm, SampleIndex, SpeedKmPerMs, TimeMs

LOG = logging.getLogger(__name__)

NO_DISTANCE_KM: DistanceKm = DistanceKm(0.0)
ROUND_TRIP_DIVISOR: float = 2.0


class DistanceEstimate(BaseModel):
    """Double-ended fault location: distance from each named end of the line."""
    model_config = ConfigDict(frozen=True)

    line_length_km: float       = Field(..., gt=0.0, description="Total line length L (km)")
    distance_from_a_km: float   = Field(..., ge=0.0, description="Fault distance from end A (km)")
    distance_from_b_km: float   = Field(..., ge=0.0, description="Fault distance from end B (km), always L - d_A")
    end_a: str                  = Field(default=DEFAULT_END_A_LABEL, description="Label of end A (station name)")
    end_b: str                  = Field(default=DEFAULT_END_B_LABEL, description="Label of end B (station name)")

    @model_validator(mode="after")
    def _check_within_line(self) -> DistanceEstimate:
        if self.distance_from_a_km > self.line_length_km:
            raise ValueError("distance_from_a_km exceeds line_length_km")
        return self

    def summary_lines(self) -> list[str]:
        d = REPORT_DECIMALS
        return [
            f"line length    = {self.line_length_km:.{d}f} km ({self.end_a} <-> {self.end_b})",
            f"fault location = {self.distance_from_a_km:.{d}f} km from {self.end_a}"
            f"  ({self.distance_from_b_km:.{d}f} km from {self.end_b})",
        ]


class FaultLocation:
    """
    Traveling-wave fault-location formulas.

    Double-ended (arrival times at both ends, line length L, speed v)
        tA = d / v
        tB = (L - d) / v
        =>  d_A = (L + v * (tA - tB)) / 2, clamped to [0, L];  d_B = L - d_A

    Single-ended (incident t1 and reflected t2 at one end)
        d = v * (t2 - t1) / 2,  or 0.0 when t2 <= t1

    Units: km, ms, km/ms. All methods are pure.
    """

    @staticmethod
    def double_end_by_times(line_length_km: float,
                            wave_speed_km_per_ms: float,
                            t_a_ms: float,
                            t_b_ms: float,
                            end_a: str = DEFAULT_END_A_LABEL,
                            end_b: str = DEFAULT_END_B_LABEL) -> DistanceEstimate:
        """
        Locate a fault from arrival times at both line ends.

        The raw estimate is clamped to ``[0, L]``: noise can push it past either end,
        and a clamped value stays physically meaningful. Errors at the line ends are
        absorbed silently.

        Raises
        ------
        ValueError
            If ``line_length_km <= 0`` or ``wave_speed_km_per_ms <= 0``.
        """
        if line_length_km <= 0.0:
            raise ValueError("line_length_km must be > 0")
        if wave_speed_km_per_ms <= 0.0:
            raise ValueError("wave_speed_km_per_ms must be > 0")

        L = float(line_length_km)
        v = float(wave_speed_km_per_ms)
        raw = (L + v * (float(t_a_ms) - float(t_b_ms))) / ROUND_TRIP_DIVISOR
        d_from_a = min(max(raw, 0.0), L)

        if d_from_a != raw:
            LOG.debug("double_end_by_times: raw d_A=%.6f km clamped to %.6f km (L=%.6f)", raw, d_from_a, L)

        return DistanceEstimate(
            line_length_km      =   L,
            distance_from_a_km  =   d_from_a,
            distance_from_b_km  =   L - d_from_a,
            end_a               =   end_a,
            end_b               =   end_b,
        )

    @staticmethod
    def single_end_by_two_wave_times(wave_speed_km_per_ms: float, t1_ms: float, t2_ms: float) -> DistanceKm:
        """
        Locate a fault from incident and reflected wave times at one end.

        Returns 0.0 when ``t2 <= t1``. The same value is returned for a fault at the
        measuring end, so 0.0 does not by itself mean the input was invalid.
        """
        dt = float(t2_ms) - float(t1_ms)
        if dt <= 0.0:
            LOG.debug("single_end_by_two_wave_times: dt=%.6f ms <= 0, no distance", dt)
            return NO_DISTANCE_KM
        return DistanceKm(float(wave_speed_km_per_ms) * dt / ROUND_TRIP_DIVISOR)

    @staticmethod
    def sample_index_to_time_ms(sample_index: SampleIndex | int, sampling_interval_ms: float) -> TimeMs:
        """Time of a 0-based sample index: ``index * Δt`` (ms)."""
        return TimeMs(int(sample_index) * float(sampling_interval_ms))

    @staticmethod
    def simulate_arrival_times(line_length_km: float,
                               wave_speed_km_per_ms: SpeedKmPerMs | float,
                               fault_from_a_km: float,
                               noise_ms: float = 0.0,
                               rng: np.random.Generator | None = None) -> tuple[TimeMs, TimeMs]:
        """
        Synthesize double-ended arrival times for a fault at a known position.

        Parameters
        ----------
        line_length_km : float
            Total line length L (km).
        wave_speed_km_per_ms : float
            Propagation speed v (km/ms).
        fault_from_a_km : float
            Fault position d measured from end A, ``0 <= d <= L``.
        noise_ms : float
            Half-width of the uniform timing noise added to each arrival time.
        rng : numpy.random.Generator | None
            Noise source; a fresh default generator when None.

        Returns
        -------
        tuple[TimeMs, TimeMs]
            ``(tA, tB)`` with ``tA = d / v`` and ``tB = (L - d) / v`` plus noise.
        """
        if line_length_km <= 0.0:
            raise ValueError("line_length_km must be > 0")
        if wave_speed_km_per_ms <= 0.0:
            raise ValueError("wave_speed_km_per_ms must be > 0")
        if not (0.0 <= fault_from_a_km <= line_length_km):
            raise ValueError("fault_from_a_km must lie within [0, line_length_km]")
        if noise_ms < 0.0:
            raise ValueError("noise_ms must be >= 0")

        v = float(wave_speed_km_per_ms)
        t_a = float(fault_from_a_km) / v
        t_b = (float(line_length_km) - float(fault_from_a_km)) / v

        if noise_ms > 0.0:
            gen = rng if rng is not None else np.random.default_rng()
            jitter = gen.uniform(-noise_ms, noise_ms, size=2)
            t_a += float(jitter[0])
            t_b += float(jitter[1])

        LOG.debug("simulate_arrival_times: d=%.6f km, tA=%.9f ms, tB=%.9f ms", fault_from_a_km, t_a, t_b)
        return TimeMs(t_a), TimeMs(t_b)
