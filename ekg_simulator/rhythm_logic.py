# ekg_simulator/rhythm_logic.py
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional

import numpy as np

from .api_models import Lead, MorphologyProfile, RhythmKind, SynthesisParameters
from .beat_generation import get_rhythm_generator
from .constants import (
    FS, BASELINE_MV, MIN_WINDOW_SEC, MIN_CYCLES_PER_WINDOW,
    NOISE_BASE_SCALE, NOISE_REFERENCE_RATE_BPM, NOISE_RATE_DIVISOR,
)
from .exceptions import InvalidHeartRateError
from .full_ecg.lead_scaling import LEADS, lead_normalization_gain
from .rhythm_profiles import get_profile

logger = logging.getLogger(__name__)


class Sample(NamedTuple):
    time: float
    voltage: float


@dataclass(frozen=True)
class WaveformSeries:
    """Samples for a fixed window of at least 5 s or 3 beats, at a fixed rate."""
    time_axis: np.ndarray
    voltage: np.ndarray
    rhythm: RhythmKind
    lead: Optional[Lead]
    heart_rate_bpm: float
    profile: MorphologyProfile
    points_per_cycle: int
    sample_rate_hz: int = FS

    def __len__(self) -> int:
        return len(self.voltage)

    @property
    def cycle_length_sec(self) -> float:
        return 60.0 / self.heart_rate_bpm

    @property
    def duration_sec(self) -> float:
        return len(self) / self.sample_rate_hz

    @property
    def samples(self) -> List[Sample]:
        return [Sample(float(t), float(v)) for t, v in zip(self.time_axis, self.voltage)]

    def to_points(self) -> List[Dict[str, float]]:
        return [{"time": float(t), "voltage": float(v)} for t, v in zip(self.time_axis, self.voltage)]

    @property
    def rhythm_description(self) -> str:
        lead_name = self.lead.value if self.lead is not None else "unscaled"
        return f"{self.profile.name} at {self.heart_rate_bpm:g} bpm (lead {lead_name})"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_cycle_length(heart_rate_bpm: float) -> float:
    if isinstance(heart_rate_bpm, (bool, np.bool_)):
        raise InvalidHeartRateError(heart_rate_bpm)
    try:
        rate = float(heart_rate_bpm)
    except (TypeError, ValueError):
        raise InvalidHeartRateError(heart_rate_bpm) from None
    if not (math.isfinite(rate) and rate > 0):
        raise InvalidHeartRateError(heart_rate_bpm)
    return 60.0 / rate


def calculate_points_per_cycle(heart_rate_bpm: float, fs: int = FS) -> int:
    return max(1, _round_half_up(calculate_cycle_length(heart_rate_bpm) * fs))


def calculate_sample_count(heart_rate_bpm: float, fs: int = FS) -> int:
    """round(fs * max(5, 3 * 60 / bpm)): at least 5 seconds and at least 3 beats."""
    cycle_length = calculate_cycle_length(heart_rate_bpm)
    duration_sec = max(MIN_WINDOW_SEC, MIN_CYCLES_PER_WINDOW * cycle_length)
    return _round_half_up(duration_sec * fs)


def calculate_noise_scale(heart_rate_bpm: float) -> float:
    """Noise grows with tachycardia: 0.05 * (1 + (bpm - 70) / 100)."""
    return NOISE_BASE_SCALE * (1 + (heart_rate_bpm - NOISE_REFERENCE_RATE_BPM) / NOISE_RATE_DIVISOR)


def synthesize(
    params: SynthesisParameters,
    rng: Optional[np.random.Generator] = None,
) -> WaveformSeries:
    """
    Synthesize the EKG trace for one parameter set.

    Each sample's phase within its beat is fed to the rhythm's generator;
    the result is scaled by the lead normalization gain times the amplitude
    gain, then noise is added if requested.

    Args:
        params: Synthesis parameters (read-only)
        rng: Random source for noise. A fresh unseeded generator is used when
            omitted, so noisy output differs between calls.

    Returns:
        WaveformSeries starting at t=0 with strictly increasing times

    Raises:
        InvalidHeartRateError: heart rate is zero, negative or not finite
    """
    heart_rate_bpm = params.heart_rate_bpm
    points_per_cycle = calculate_points_per_cycle(heart_rate_bpm)
    num_total_samples = calculate_sample_count(heart_rate_bpm)

    profile = get_profile(params.rhythm, params.lead, params.pr_interval_sec)
    generator = get_rhythm_generator(params.rhythm)

    sample_indices = np.arange(num_total_samples)
    full_time_axis_np = sample_indices / FS
    cycle_indices = sample_indices // points_per_cycle
    cycle_positions = (sample_indices % points_per_cycle) / points_per_cycle

    logger.debug(
        "Synthesizing %s, lead %s, %.1f bpm: %d samples, %d per cycle",
        params.rhythm.value, params.lead.value if params.lead else None,
        heart_rate_bpm, num_total_samples, points_per_cycle,
    )

    full_ecg_signal_np = BASELINE_MV + generator.generate(cycle_positions, cycle_indices, profile, params)
    full_ecg_signal_np = full_ecg_signal_np * (lead_normalization_gain(params.lead) * params.amplitude_gain)

    if params.add_noise:
        if rng is None:
            rng = np.random.default_rng()
        noise_amplitude = profile.baseline_noise * calculate_noise_scale(heart_rate_bpm)
        full_ecg_signal_np = full_ecg_signal_np + rng.uniform(-1.0, 1.0, num_total_samples) * noise_amplitude

    return WaveformSeries(
        time_axis=full_time_axis_np,
        voltage=full_ecg_signal_np,
        rhythm=params.rhythm,
        lead=params.lead,
        heart_rate_bpm=heart_rate_bpm,
        profile=profile,
        points_per_cycle=points_per_cycle,
    )


def generate_ekg_waveform(rng: Optional[np.random.Generator] = None, **kwargs) -> WaveformSeries:
    """Keyword form of synthesize(); kwargs are SynthesisParameters fields."""
    return synthesize(SynthesisParameters(**kwargs), rng=rng)


def synthesize_12_lead(
    params: SynthesisParameters,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, WaveformSeries]:
    """
    Synthesize every standard lead for the same rhythm and intervals.

    Leads are generated independently from their own amplitude profiles;
    they are not projections of a shared vector.
    """
    if rng is None and params.add_noise:
        rng = np.random.default_rng()
    return {
        lead_name: synthesize(params.model_copy(update={"lead": Lead(lead_name)}), rng=rng)
        for lead_name in LEADS
    }
