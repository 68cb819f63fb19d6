# ekg_simulator/full_ecg/lead_scaling.py
from typing import List, Optional, Tuple, Union

import numpy as np

from ..api_models import Lead
from ..constants import LEAD_NORMALIZATION_GAINS, DEFAULT_LEAD_NORMALIZATION_GAIN

# Deflections this close in height count as the same peak
PEAK_TIE_TOLERANCE_MV = 1e-9

# Each lead is an independent, amplitude-scaled view of the same beat.
# There is no cardiac vector model behind them.
LEADS: List[str] = [lead.value for lead in Lead]


def lead_normalization_gain(lead: Union[Lead, str, None]) -> float:
    """
    Gain that keeps the trace height comparable across leads.
    II/V5 x1.0, V1/V2 x1.2, every other (or unknown) lead x0.9.
    """
    resolved = Lead.parse(lead)
    if resolved is None:
        return DEFAULT_LEAD_NORMALIZATION_GAIN
    return LEAD_NORMALIZATION_GAINS.get(resolved.value, DEFAULT_LEAD_NORMALIZATION_GAIN)


def _earliest_peak_index(beat_signal: np.ndarray) -> int:
    magnitude = np.abs(beat_signal)
    return int(np.argmax(magnitude >= magnitude.max() - PEAK_TIE_TOLERANCE_MV))


def beat_window(num_samples: int, points_per_cycle: int, beat_index: int = 0) -> slice:
    start = beat_index * points_per_cycle
    if points_per_cycle <= 0 or start >= num_samples:
        raise ValueError(f"Beat {beat_index} is outside a series of {num_samples} samples")
    return slice(start, min(num_samples, start + points_per_cycle))


def find_qrs_peak(
    time_axis: np.ndarray,
    signal: np.ndarray,
    points_per_cycle: int,
    beat_index: int = 0,
) -> Tuple[float, float]:
    """
    Locate the strongest deflection (largest absolute voltage) in one beat.

    The QRS return phase restarts from full amplitude, so a beat can hold two
    deflections of equal height; ties resolve to the earlier one (the R wave).

    Args:
        time_axis: Sample times in seconds
        signal: Voltage samples
        points_per_cycle: Samples per cardiac cycle
        beat_index: Which beat to inspect

    Returns:
        (time_sec, voltage) of the peak, voltage keeps its sign
    """
    time_axis = np.asarray(time_axis, dtype=float)
    signal = np.asarray(signal, dtype=float)
    window = beat_window(len(signal), points_per_cycle, beat_index)

    beat_signal = signal[window]
    peak_idx = _earliest_peak_index(beat_signal)
    return float(time_axis[window][peak_idx]), float(beat_signal[peak_idx])


def qrs_polarity(signal: np.ndarray, points_per_cycle: int, beat_index: int = 0) -> Optional[str]:
    """'positive' or 'negative' depending on the sign of the dominant deflection; None for a flat beat."""
    signal = np.asarray(signal, dtype=float)
    window = beat_window(len(signal), points_per_cycle, beat_index)
    beat_signal = signal[window]
    peak = beat_signal[_earliest_peak_index(beat_signal)]
    if abs(peak) < 1e-9:
        return None
    return "positive" if peak > 0 else "negative"
