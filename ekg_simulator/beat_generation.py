# ekg_simulator/beat_generation.py
from typing import Dict, NamedTuple, Optional

import numpy as np

from .api_models import MorphologyProfile, RhythmKind, SynthesisParameters
from .constants import (
    RHYTHM_TIMING, QRS_Q_END, QRS_R_END, QRS_S_END, Q_WAVE_DEPTH, R_WAVE_EXPONENT,
    S_WAVE_OVERSHOOT, ST_ELEVATION_SCALE, VT_QRS_UPSTROKE_END, VT_QRS_PLATEAU_END,
    VT_UPSTROKE_EXPONENT, VT_UPSTROKE_GAIN, VT_NOTCH_FREQUENCY, VT_NOTCH_AMPLITUDE,
    VT_DESCENT_GAIN, RR_VARIATION_PER_VARIABILITY,
)
from .waveform_primitives import (
    gaussian_wave, half_sine_pulse, linear_interpolate, window_mask, window_fraction,
    fibrillatory_baseline, rr_scale_factor,
)


class BeatTiming(NamedTuple):
    """Component windows of one beat, in cycle phase units."""
    p_start: float
    p_duration: float
    qrs_start: float
    qrs_width: float
    st_duration: float
    t_duration: float

    @property
    def qrs_end(self) -> float:
        return self.qrs_start + self.qrs_width

    @property
    def t_start(self) -> float:
        return self.qrs_end + self.st_duration

    @property
    def t_end(self) -> float:
        return self.t_start + self.t_duration


def calculate_beat_timing(
    rhythm: RhythmKind,
    profile: MorphologyProfile,
    params: SynthesisParameters,
) -> BeatTiming:
    """
    Derive the P/QRS/ST/T windows from the interval targets.

    The ST segment absorbs whatever the QT target leaves after QRS and T:
    st = max(min_st, qt - qrs_width - t_duration).
    """
    timing = RHYTHM_TIMING[rhythm.value]

    qrs_width = max(timing["min_qrs_width"], params.qrs_width_sec)
    qrs_start = params.pr_interval_sec if timing["qrs_start"] is None else timing["qrs_start"]

    has_p_wave = timing["p_start"] is not None and profile.p_wave.present
    p_start = timing["p_start"] if has_p_wave else 0.0
    p_duration = profile.p_wave.duration if has_p_wave else 0.0

    t_duration = timing["t_duration"]
    st_duration = max(timing["min_st_duration"], params.qt_interval_sec - qrs_width - t_duration)

    return BeatTiming(
        p_start=p_start,
        p_duration=p_duration,
        qrs_start=qrs_start,
        qrs_width=qrs_width,
        st_duration=st_duration,
        t_duration=t_duration,
    )


# --- Shared Morphology Pieces ---

def apply_four_phase_qrs(value, positions, qrs_start, qrs_width, amplitude):
    """
    Q-R-S-return QRS complex, added onto the accumulated value in place.

    Phases by fraction of QRS width: [0,0.2) Q ramp down to -0.2A,
    [0.2,0.4) R power-curve rise, [0.4,0.7) S descent overshooting baseline,
    [0.7,1.0) ramp from full amplitude back to baseline under a taper that
    also scales whatever was already accumulated at that instant.
    """
    in_qrs = window_mask(positions, qrs_start, qrs_width)
    if not np.any(in_qrs):
        return value
    q = window_fraction(positions, qrs_start, qrs_width)

    q_phase = in_qrs & (q < QRS_Q_END)
    r_phase = in_qrs & (q >= QRS_Q_END) & (q < QRS_R_END)
    s_phase = in_qrs & (q >= QRS_R_END) & (q < QRS_S_END)
    return_phase = in_qrs & (q >= QRS_S_END)

    value[q_phase] += linear_interpolate(0.0, -Q_WAVE_DEPTH * amplitude, q[q_phase] / QRS_Q_END)

    r_fraction = (q[r_phase] - QRS_Q_END) / (QRS_R_END - QRS_Q_END)
    value[r_phase] += amplitude * np.power(r_fraction, R_WAVE_EXPONENT)

    s_fraction = (q[s_phase] - QRS_R_END) / (QRS_S_END - QRS_R_END)
    value[s_phase] += amplitude * (1 - s_fraction * S_WAVE_OVERSHOOT)

    return_fraction = (q[return_phase] - QRS_S_END) / (1.0 - QRS_S_END)
    taper = np.maximum(0.0, 1 - return_fraction)
    value[return_phase] = (value[return_phase] + linear_interpolate(amplitude, 0.0, return_fraction)) * taper

    return value


def add_t_wave(value, positions, timing: BeatTiming, amplitude, rhythm_timing: Dict):
    """Asymmetric Gaussian T-wave over [t_start, t_end)."""
    in_t = window_mask(positions, timing.t_start, timing.t_duration)
    if np.any(in_t):
        t_fraction = window_fraction(positions[in_t], timing.t_start, timing.t_duration)
        value[in_t] += rhythm_timing["t_gain"] * amplitude * gaussian_wave(
            t_fraction, rhythm_timing["t_center"], 1.0, rhythm_timing["t_width"]
        )
    return value


def add_st_segment(value, positions, timing: BeatTiming, offset):
    in_st = window_mask(positions, timing.qrs_end, timing.st_duration)
    value[in_st] += offset
    return value


# --- Rhythm Generators ---

class RhythmGenerator:
    """
    Point-value generator for one rhythm.

    generate() maps cycle phase (and beat index) to the voltage contribution
    of that instant, before lead normalization and noise.
    """
    rhythm: RhythmKind = RhythmKind.NORMAL

    @property
    def timing_table(self) -> Dict:
        return RHYTHM_TIMING[self.rhythm.value]

    def beat_timing(self, profile: MorphologyProfile, params: SynthesisParameters) -> BeatTiming:
        return calculate_beat_timing(self.rhythm, profile, params)

    def generate(self, phase, cycle_index, profile: MorphologyProfile, params: SynthesisParameters):
        is_scalar = np.ndim(phase) == 0
        positions = np.atleast_1d(np.asarray(phase, dtype=float))
        cycles = np.broadcast_to(np.atleast_1d(np.asarray(cycle_index)), positions.shape)
        value = self._generate(positions, cycles, profile, params)
        return float(value[0]) if is_scalar else value

    def _generate(self, positions, cycles, profile, params) -> np.ndarray:
        raise NotImplementedError


class NormalSinusGenerator(RhythmGenerator):
    rhythm = RhythmKind.NORMAL

    def _generate(self, positions, cycles, profile, params):
        timing = self.beat_timing(profile, params)
        value = np.zeros_like(positions)

        # P wave - smooth half-sine for atrial depolarization
        if profile.p_wave.present and timing.p_duration > 0:
            in_p = window_mask(positions, timing.p_start, timing.p_duration)
            value[in_p] += half_sine_pulse(
                window_fraction(positions[in_p], timing.p_start, timing.p_duration),
                profile.p_wave.amplitude,
            )

        value = apply_four_phase_qrs(value, positions, timing.qrs_start, timing.qrs_width,
                                     profile.qrs_complex.amplitude)
        value = add_st_segment(value, positions, timing, profile.st_elevation * ST_ELEVATION_SCALE)
        if profile.t_wave.present:
            value = add_t_wave(value, positions, timing, profile.t_wave.amplitude, self.timing_table)
        return value


class AtrialFibrillationGenerator(RhythmGenerator):
    rhythm = RhythmKind.ATRIAL_FIBRILLATION

    def adjusted_positions(self, positions, cycles, profile):
        """Stretch each beat by its RR scale so QRS placement wanders beat to beat."""
        variation_factor = profile.rate_variability * RR_VARIATION_PER_VARIABILITY
        return np.mod(positions * rr_scale_factor(cycles, variation_factor), 1.0)

    def _generate(self, positions, cycles, profile, params):
        timing = self.beat_timing(profile, params)

        # No P waves: fibrillatory baseline follows the unadjusted phase
        value = fibrillatory_baseline(positions)

        adjusted = self.adjusted_positions(positions, cycles, profile)
        value = apply_four_phase_qrs(value, adjusted, timing.qrs_start, timing.qrs_width,
                                     profile.qrs_complex.amplitude)
        value = add_st_segment(value, adjusted, timing, profile.st_elevation * ST_ELEVATION_SCALE)
        if profile.t_wave.present:
            value = add_t_wave(value, adjusted, timing, profile.t_wave.amplitude, self.timing_table)
        return value


class VentricularTachycardiaGenerator(RhythmGenerator):
    rhythm = RhythmKind.VENTRICULAR_TACHYCARDIA

    def _generate(self, positions, cycles, profile, params):
        timing = self.beat_timing(profile, params)
        amplitude = profile.qrs_complex.amplitude
        value = np.zeros_like(positions)

        # Wide, bizarre QRS
        in_qrs = window_mask(positions, timing.qrs_start, timing.qrs_width)
        q = window_fraction(positions, timing.qrs_start, timing.qrs_width)
        upstroke = in_qrs & (q < VT_QRS_UPSTROKE_END)
        plateau = in_qrs & (q >= VT_QRS_UPSTROKE_END) & (q < VT_QRS_PLATEAU_END)
        descent = in_qrs & (q >= VT_QRS_PLATEAU_END)

        value[upstroke] += amplitude * VT_UPSTROKE_GAIN * np.power(q[upstroke] / VT_QRS_UPSTROKE_END, VT_UPSTROKE_EXPONENT)

        plateau_fraction = (q[plateau] - VT_QRS_UPSTROKE_END) / (VT_QRS_PLATEAU_END - VT_QRS_UPSTROKE_END)
        notch = np.sin(q[plateau] * VT_NOTCH_FREQUENCY) * VT_NOTCH_AMPLITUDE
        value[plateau] += amplitude * (1.0 - plateau_fraction) + notch

        descent_fraction = (q[descent] - VT_QRS_PLATEAU_END) / (1.0 - VT_QRS_PLATEAU_END)
        value[descent] += linear_interpolate(amplitude * VT_DESCENT_GAIN, 0.0, descent_fraction)

        value = add_st_segment(value, positions, timing, self.timing_table["st_offset"])
        if profile.t_wave.present:
            value = add_t_wave(value, positions, timing, profile.t_wave.amplitude, self.timing_table)
        return value


RHYTHM_GENERATORS: Dict[RhythmKind, RhythmGenerator] = {
    RhythmKind.NORMAL: NormalSinusGenerator(),
    RhythmKind.ATRIAL_FIBRILLATION: AtrialFibrillationGenerator(),
    RhythmKind.VENTRICULAR_TACHYCARDIA: VentricularTachycardiaGenerator(),
}


def get_rhythm_generator(rhythm: Optional[RhythmKind]) -> RhythmGenerator:
    return RHYTHM_GENERATORS.get(rhythm, RHYTHM_GENERATORS[RhythmKind.NORMAL])
