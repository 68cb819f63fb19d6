"""
Pytest configuration and shared fixtures for EKG simulator tests.
"""
import math

import pytest

from ekg_simulator.api_models import Lead, RhythmKind, SynthesisParameters


@pytest.fixture
def basic_normal_params():
    """Normal sinus rhythm at 60 bpm in lead II, where phase equals seconds."""
    return SynthesisParameters(
        heart_rate_bpm=60,
        rhythm=RhythmKind.NORMAL,
        lead=Lead.II,
        pr_interval_sec=0.16,
        qrs_width_sec=0.08,
        qt_interval_sec=0.36,
        amplitude_gain=1.0,
        add_noise=False,
    )


@pytest.fixture
def fast_normal_params():
    return SynthesisParameters(
        heart_rate_bpm=120,
        rhythm=RhythmKind.NORMAL,
        lead=Lead.II,
        pr_interval_sec=0.14,
        qrs_width_sec=0.08,
        qt_interval_sec=0.32,
    )


@pytest.fixture
def afib_params():
    return SynthesisParameters(
        heart_rate_bpm=60,
        rhythm=RhythmKind.ATRIAL_FIBRILLATION,
        lead=Lead.II,
        qrs_width_sec=0.08,
        qt_interval_sec=0.36,
    )


@pytest.fixture
def vtach_params():
    return SynthesisParameters(
        heart_rate_bpm=60,
        rhythm=RhythmKind.VENTRICULAR_TACHYCARDIA,
        lead=Lead.II,
        qrs_width_sec=0.06,  # Below the 120ms floor on purpose
        qt_interval_sec=0.36,
    )


@pytest.fixture
def expected_sample_count():
    """round(250 * max(5, 3 * 60 / bpm)), rounding halves up."""
    def _count(heart_rate_bpm, fs=250):
        return int(math.floor(fs * max(5.0, 3 * 60.0 / heart_rate_bpm) + 0.5))
    return _count


@pytest.fixture
def tolerance_config():
    """Standard tolerance values for numerical comparisons."""
    return {
        'timing_tolerance_sec': 0.004,  # one sample at 250 Hz
        'amplitude_tolerance_mv': 0.01,
        'float_tolerance': 1e-9,
    }
