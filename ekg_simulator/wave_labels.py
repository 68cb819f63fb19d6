# ekg_simulator/wave_labels.py
from typing import List

from .api_models import IntervalMarker, RhythmKind, SynthesisParameters, WaveLabel, WaveLabelSet
from .beat_generation import get_rhythm_generator
from .constants import (
    LABEL_HEIGHTS, AFIB_IRREGULAR_LABEL_PHASE, AFIB_FIBRILLATION_LABEL_MID, QT_MARKER_MIN_SEC,
)
from .rhythm_logic import calculate_cycle_length
from .rhythm_profiles import get_profile


def build_wave_labels(params: SynthesisParameters) -> WaveLabelSet:
    """
    Label positions for the first beat of a trace.

    Positions come from the same timing windows the generators draw, so a
    renderer can place "P", "QRS" and "T" over the deflections they name.
    """
    cycle_length = calculate_cycle_length(params.heart_rate_bpm)
    profile = get_profile(params.rhythm, params.lead, params.pr_interval_sec)
    timing = get_rhythm_generator(params.rhythm).beat_timing(profile, params)
    heights = LABEL_HEIGHTS[params.rhythm.value]

    def label(text, phase, height, kind="wave"):
        return WaveLabel(text=text, kind=kind, phase=phase, time_sec=phase * cycle_length, height_mv=height)

    def marker(text, start, end):
        return IntervalMarker(
            text=text, start_phase=start, end_phase=end,
            start_sec=start * cycle_length, end_sec=end * cycle_length,
        )

    qrs_mid = timing.qrs_start + timing.qrs_width / 2
    t_mid = timing.t_start + timing.t_duration / 2
    labels: List[WaveLabel] = []
    intervals: List[IntervalMarker] = []

    if params.rhythm == RhythmKind.NORMAL:
        if timing.p_duration > 0:
            labels.append(label("P", timing.p_start + timing.p_duration / 2, heights["P"]))
        labels.append(label("QRS", qrs_mid, heights["QRS"]))
        labels.append(label("T", t_mid, heights["T"]))
        intervals.append(marker(f"PR: {params.pr_interval_sec:g}s", timing.p_start, timing.qrs_start))
        if params.qt_interval_sec > QT_MARKER_MIN_SEC:
            intervals.append(marker(f"QT: {params.qt_interval_sec:g}s", timing.qrs_start, timing.t_end))

    elif params.rhythm == RhythmKind.ATRIAL_FIBRILLATION:
        labels.append(label("f", AFIB_FIBRILLATION_LABEL_MID, heights["f"]))
        labels.append(label("Irregular", AFIB_IRREGULAR_LABEL_PHASE, heights["f"], kind="note"))
        labels.append(label("QRS", qrs_mid, heights["QRS"]))
        labels.append(label("T", t_mid, heights["T"]))

    elif params.rhythm == RhythmKind.VENTRICULAR_TACHYCARDIA:
        labels.append(label("QRS", qrs_mid, heights["QRS"]))
        labels.append(label(f"Wide: {timing.qrs_width:.2f}s", qrs_mid, heights["QRS"], kind="note"))
        # Inverted T sits below the baseline
        labels.append(label("T", t_mid, heights["T"]))

    return WaveLabelSet(
        rhythm=params.rhythm,
        cycle_length_sec=cycle_length,
        labels=labels,
        intervals=intervals,
    )
