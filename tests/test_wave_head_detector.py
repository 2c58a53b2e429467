# tests/test_wave_head_detector.py
# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import logging

import numpy as np
import pytest

from pytwfl.analysis.model.detection import (
    Detected,
    DetectionConfig,
    Undetected,
    UndetectedReason,
)
from pytwfl.analysis.wave_head_detector import WaveHeadDetector
from pytwfl.waveform.parser.model.waveform_record import Phase
from pytwfl.waveform.parser.waveform_file import WaveformDecoder

N = 5000                # preN = 500, 2% of n = 100
INCIDENT = 1000
REFLECTED = 2000


@pytest.fixture()
def detector() -> WaveHeadDetector:
    return WaveHeadDetector(DetectionConfig.default())


@pytest.mark.analysis
def test_window_sizes() -> None:
    assert WaveHeadDetector.baseline_window(20) == 20
    assert WaveHeadDetector.baseline_window(300) == 50
    assert WaveHeadDetector.baseline_window(5000) == 500
    assert WaveHeadDetector.baseline_window(100_000) == 1000


@pytest.mark.analysis
def test_min_gap_is_at_least_two_percent_rounded_up() -> None:
    assert WaveHeadDetector.min_gap(100, 0) == 2
    assert WaveHeadDetector.min_gap(101, 0) == 3
    assert WaveHeadDetector.min_gap(50_000, 500) == 1000
    assert WaveHeadDetector.min_gap(5000, 500) == 500


@pytest.mark.analysis
def test_step_pair_detected(detector: WaveHeadDetector, make_signal) -> None:
    """
    A Step At k And A Larger Step Beyond k + minGap Yield t1 == k And t2 At The Larger Step.
    """
    x = make_signal(N, [(INCIDENT, 50.0), (REFLECTED, 120.0)])

    outcome = detector.detect(x, N, Phase.A)

    assert isinstance(outcome, Detected)
    assert outcome.is_detected
    res = outcome.result
    assert res.phase is Phase.A
    assert res.first_wave_index == INCIDENT
    assert res.second_wave_index == REFLECTED
    assert res.first_wave_time_ms == pytest.approx(10.0)
    assert res.second_wave_time_ms == pytest.approx(20.0)
    assert res.distance_km == pytest.approx(200.0 * 10.0 / 2.0)
    assert res.config == DetectionConfig.default()


@pytest.mark.analysis
def test_reflected_wave_is_largest_crossing_not_first(detector: WaveHeadDetector, make_signal) -> None:
    x = make_signal(N, [(INCIDENT, 50.0), (1700, 20.0), (2500, 120.0), (3000, 30.0)])

    outcome = detector.detect(x, N)

    assert outcome.is_detected
    assert outcome.result.first_wave_index == INCIDENT
    assert outcome.result.second_wave_index == 2500


@pytest.mark.analysis
def test_reflection_inside_min_gap_is_ignored(detector: WaveHeadDetector, make_signal) -> None:
    x = make_signal(N, [(INCIDENT, 50.0), (1200, 500.0)])

    outcome = detector.detect(x, N, Phase.C)

    assert isinstance(outcome, Undetected)
    assert outcome.reason is UndetectedReason.NO_REFLECTED_WAVE
    assert outcome.phase is Phase.C


@pytest.mark.analysis
def test_configured_gap_changes_search_start(make_signal) -> None:
    x = make_signal(N, [(INCIDENT, 50.0), (1200, 500.0)])
    cfg = DetectionConfig(min_samples_between_waves=100)

    outcome = WaveHeadDetector(cfg).detect(x, N)

    assert outcome.is_detected
    assert outcome.result.second_wave_index == 1200


@pytest.mark.analysis
def test_insufficient_samples(detector: WaveHeadDetector) -> None:
    outcome = detector.detect(np.zeros(9), 9)
    assert isinstance(outcome, Undetected)
    assert outcome.reason is UndetectedReason.INSUFFICIENT_SAMPLES


@pytest.mark.analysis
def test_no_incident_wave_on_noise_floor(detector: WaveHeadDetector, make_signal) -> None:
    outcome = detector.detect(make_signal(N, []), N)
    assert outcome.reason is UndetectedReason.NO_INCIDENT_WAVE


@pytest.mark.analysis
def test_short_capture_has_no_scan_region(detector: WaveHeadDetector, make_signal) -> None:
    """
    With n Below 50 The Baseline Covers Every Sample, So No Incident Wave Can Be Found.
    """
    x = make_signal(40, [(20, 100.0)])
    outcome = detector.detect(x, 40)
    assert outcome.reason is UndetectedReason.NO_INCIDENT_WAVE


@pytest.mark.analysis
def test_steps_inside_baseline_raise_the_noise_floor(detector: WaveHeadDetector, make_signal) -> None:
    x = make_signal(N, [(100, 500.0), (INCIDENT, 50.0)])
    outcome = detector.detect(x, N)
    assert outcome.reason is UndetectedReason.NO_INCIDENT_WAVE


@pytest.mark.analysis
def test_headroom_beyond_n_is_ignored(detector: WaveHeadDetector, make_signal) -> None:
    x = np.concatenate([make_signal(N, []), np.full(150, 1.0e6)])
    outcome = detector.detect(x, N)
    assert outcome.reason is UndetectedReason.NO_INCIDENT_WAVE


@pytest.mark.analysis
def test_too_few_samples_for_n_raises(detector: WaveHeadDetector) -> None:
    with pytest.raises(ValueError):
        detector.detect(np.zeros(20), 40)


@pytest.mark.analysis
def test_undetected_is_logged_at_info(detector: WaveHeadDetector, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="WaveHeadDetector"):
        detector.detect(np.zeros(5), 5, Phase.B)
    assert "InsufficientSamples" in caplog.text


@pytest.mark.analysis
def test_detect_record_and_all_phases(detector: WaveHeadDetector, make_capture, make_signal) -> None:
    """
    Only Phase B Carries Wave Heads; A And C Are Plain Noise Floors.
    """
    matrix = np.zeros((N, 3), dtype=np.int64)
    matrix[:, 0] = make_signal(N, []).astype(np.int64)
    matrix[:, 1] = make_signal(N, [(INCIDENT, 50.0), (REFLECTED, 120.0)]).astype(np.int64)
    matrix[:, 2] = make_signal(N, []).astype(np.int64)
    record = WaveformDecoder.decode(make_capture(matrix), source_name="capture.all")

    single = detector.detect_record(record, Phase.B)
    assert single.is_detected
    assert single.result.source_name == "capture.all"
    assert single.result.second_wave_index == REFLECTED

    outcomes = detector.detect_all_phases(record)
    assert list(outcomes) == [Phase.A, Phase.B, Phase.C]
    assert not outcomes[Phase.A].is_detected
    assert outcomes[Phase.B].is_detected
    assert outcomes[Phase.C].reason is UndetectedReason.NO_INCIDENT_WAVE


@pytest.mark.analysis
def test_result_summary_and_json(detector: WaveHeadDetector, make_signal) -> None:
    x = make_signal(N, [(INCIDENT, 50.0), (REFLECTED, 120.0)])
    res = detector.detect(x, N).result

    lines = res.summary_lines()
    assert any("1000.000000 km" in line for line in lines)
    assert any("sample 1000" in line for line in lines)

    payload = res.model_dump(mode="json")
    assert payload["phase"] == "A"
    assert payload["config"]["min_samples_between_waves"] == 500
