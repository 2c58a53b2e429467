# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging
from collections.abc import Sequence
from math import sqrt

import numpy as np

from pytwfl.analysis.fault_location import FaultLocation
from pytwfl.analysis.model.detection import (
    Detected,
    DetectionConfig,
    DetectionOutcome,
    DetectionResult,
    Undetected,
    UndetectedReason,
)
from pytwfl.lib.constants import (
    BASELINE_DIVISOR,
    BASELINE_MAX_SAMPLES,
    BASELINE_MIN_SAMPLES,
    MIN_DETECTION_SAMPLES,
    MIN_GAP_PERCENT,
)
from pytwfl.lib.types import NDArrayF64, SampleCount, SampleIndex
from pytwfl.waveform.parser.model.waveform_record import Phase, WaveformRecord


class WaveHeadDetector:
    """
    Traveling-wave head detector for one phase of a fault capture.

    Steps
    -----
    1) Baseline window ``preN = clamp(n // 10, 50, 1000)``, never more than ``n``.
    2) First differences ``dx[i] = x[i] - x[i-1]`` of the demeaned signal; the noise
       floor is the RMS of ``dx`` over ``[1, preN)``.
    3) Incident wave t1: first ``i >= preN`` with ``|dx[i]| > first_wave_sigma * noise``.
    4) Reflected wave t2: index of the largest ``|dx[i]| > second_wave_sigma * noise``
       at or after ``min(n - 1, t1 + minGap)``, where ``minGap`` is the configured gap
       or 2% of ``n``, whichever is larger. ``t2`` must be strictly after ``t1``.
    5) Indices are scaled to ms and the single-ended formula gives the distance.

    Data the detector cannot resolve yields ``Undetected``, never an exception.
    """

    def __init__(self, config: DetectionConfig | None = None) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self._config: DetectionConfig = config if config is not None else DetectionConfig.default()

    @property
    def config(self) -> DetectionConfig:
        return self._config

    # ──────────────────────────────────────────────────────────────────────
    # Window helpers
    # ──────────────────────────────────────────────────────────────────────
    @staticmethod
    def baseline_window(n: SampleCount | int) -> int:
        """Size of the quiet pre-fault window used to estimate the noise floor."""
        pre_n = min(max(int(n) // BASELINE_DIVISOR, BASELINE_MIN_SAMPLES), BASELINE_MAX_SAMPLES)
        return min(pre_n, int(n))

    @staticmethod
    def min_gap(n: SampleCount | int, configured_gap: int) -> int:
        """Minimum t1 -> t2 separation: ``max(configured_gap, ceil(2% of n))``."""
        two_percent = (MIN_GAP_PERCENT * int(n) + 99) // 100
        return max(int(configured_gap), two_percent)

    # ──────────────────────────────────────────────────────────────────────
    # Detection
    # ──────────────────────────────────────────────────────────────────────
    def detect(self,
               samples: NDArrayF64 | Sequence[float],
               n: SampleCount | int,
               phase: Phase = Phase.A,
               source_name: str | None = None) -> DetectionOutcome:
        """
        Locate the incident and reflected wave heads in ``samples[0:n]``.

        Args:
            samples: Phase samples; may be longer than ``n`` (headroom is ignored).
            n: Number of valid samples.
            phase: Phase the samples belong to, echoed in the outcome.
            source_name: Capture file name, echoed in the result.

        Returns:
            ``Detected`` with a ``DetectionResult``, or ``Undetected`` with a reason.

        Raises:
            ValueError: If ``samples`` holds fewer than ``n`` values.
        """
        phase = Phase(phase)
        n = int(n)
        cfg = self._config

        if n < MIN_DETECTION_SAMPLES:
            return self._undetected(UndetectedReason.INSUFFICIENT_SAMPLES, phase, n)

        x = np.asarray(samples, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] < n:
            raise ValueError(f"samples must be 1-D with at least n={n} values")
        x = x[:n]

        pre_n = self.baseline_window(n)
        mean = float(np.mean(x[:pre_n]))

        dx = np.zeros(n, dtype=np.float64)
        dx[1:] = np.diff(x - mean)
        mag = np.abs(dx)

        noise_std = sqrt(float(np.sum(dx[1:pre_n] ** 2)) / max(1, pre_n - 1))
        threshold1 = cfg.first_wave_sigma * noise_std
        threshold2 = cfg.second_wave_sigma * noise_std

        self.logger.debug("Phase %s: n=%d, preN=%d, mean=%.6f, noise_std=%.6f, thr1=%.6f, thr2=%.6f",
                          phase.value, n, pre_n, mean, noise_std, threshold1, threshold2)

        crossings = np.flatnonzero(mag[pre_n:] > threshold1)
        if crossings.size == 0:
            return self._undetected(UndetectedReason.NO_INCIDENT_WAVE, phase, n)
        t1 = SampleIndex(pre_n + int(crossings[0]))

        gap = self.min_gap(n, cfg.min_samples_between_waves)
        search_start = min(n - 1, t1 + gap)
        window = mag[search_start:]
        candidates = np.flatnonzero(window > threshold2)
        if candidates.size == 0:
            return self._undetected(UndetectedReason.NO_REFLECTED_WAVE, phase, n)

        # argmax over the qualifying subset keeps the first index on ties
        best = candidates[int(np.argmax(window[candidates]))]
        t2 = SampleIndex(search_start + int(best))
        if t2 <= t1:
            return self._undetected(UndetectedReason.NO_REFLECTED_WAVE, phase, n)

        self.logger.debug("Phase %s: t1=%d (|dx|=%.6f), gap=%d, search_start=%d, t2=%d (|dx|=%.6f)",
                          phase.value, t1, mag[t1], gap, search_start, t2, mag[t2])

        t1_ms = FaultLocation.sample_index_to_time_ms(t1, cfg.sampling_interval_ms)
        t2_ms = FaultLocation.sample_index_to_time_ms(t2, cfg.sampling_interval_ms)
        distance = FaultLocation.single_end_by_two_wave_times(cfg.wave_speed_km_per_ms, t1_ms, t2_ms)

        return Detected(result=DetectionResult(
            phase               =   phase,
            first_wave_index    =   t1,
            second_wave_index   =   t2,
            first_wave_time_ms  =   t1_ms,
            second_wave_time_ms =   t2_ms,
            distance_km         =   distance,
            config              =   cfg,
            source_name         =   source_name,
        ))

    def detect_record(self, record: WaveformRecord, phase: Phase = Phase.A) -> DetectionOutcome:
        """Run detection on one phase of a decoded record."""
        phase = Phase(phase)
        return self.detect(record.samples(phase), record.data_length, phase, source_name=record.source_name)

    def detect_all_phases(self, record: WaveformRecord) -> dict[Phase, DetectionOutcome]:
        return {phase: self.detect_record(record, phase) for phase in Phase}

    def _undetected(self, reason: UndetectedReason, phase: Phase, n: int) -> Undetected:
        self.logger.info("Phase %s: no wave heads detected (%s, n=%d)", phase.value, reason.value, n)
        return Undetected(reason=reason, phase=phase)
