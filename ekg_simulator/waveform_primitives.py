# ekg_simulator/waveform_primitives.py
import numpy as np

from .constants import FIBRILLATORY_WAVE_TERMS, RR_JITTER_MULTIPLIERS


# --- Waveform Primitives ---
def gaussian_wave(t_points, center, amplitude, width_std_dev):
    if width_std_dev <= 1e-9: return np.zeros_like(np.asarray(t_points, dtype=float))
    t_points = np.asarray(t_points, dtype=float)
    return amplitude * np.exp(-((t_points - center)**2) / (2 * width_std_dev**2))


def half_sine_pulse(fraction, amplitude):
    """Half-period sine bump over fraction 0..1, zero at both ends."""
    return amplitude * np.sin(np.pi * np.asarray(fraction, dtype=float))


def linear_interpolate(start_value, end_value, fraction):
    fraction = np.asarray(fraction, dtype=float)
    return start_value + (end_value - start_value) * fraction


def window_mask(positions, start, duration):
    """Boolean mask for the half-open window [start, start + duration)."""
    positions = np.asarray(positions, dtype=float)
    return (positions >= start) & (positions < start + duration)


def window_fraction(positions, start, duration):
    """Position inside a window as a fraction of its duration (unclipped)."""
    if duration <= 1e-9:
        return np.zeros_like(np.asarray(positions, dtype=float))
    return (np.asarray(positions, dtype=float) - start) / duration


# --- Atrial Fibrillation Helpers ---
def fibrillatory_baseline(phase):
    """
    Chaotic-looking atrial activity built from a fixed sum of sines.

    Args:
        phase: Cycle phase (scalar or array, 0-1)

    Returns:
        Baseline voltage in mV, same shape as phase
    """
    phase = np.asarray(phase, dtype=float)
    f_wave_signal = np.zeros_like(phase)
    for frequency, amplitude in FIBRILLATORY_WAVE_TERMS:
        f_wave_signal = f_wave_signal + np.sin(phase * frequency) * amplitude
    return f_wave_signal


def rr_variation(cycle_index):
    """Deterministic pseudo-random value in [-1, 1] for each beat index."""
    c = np.asarray(cycle_index, dtype=float)
    m1, m2, m3 = RR_JITTER_MULTIPLIERS
    return np.sin(c * m1) * np.cos(c * m2) * np.sin(c * m3)


def rr_scale_factor(cycle_index, variation_factor):
    """
    Per-beat RR scale, 1 / (1 + variation * factor).

    Reproducible: depends only on the beat index, never on a random source.
    """
    return 1.0 / (1.0 + rr_variation(cycle_index) * variation_factor)
