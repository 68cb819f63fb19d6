# ekg_simulator/rhythm_profiles.py
from typing import Dict, Optional, Union

from .api_models import Lead, MorphologyProfile, PWave, QRSComplex, RhythmKind, TWave
from .constants import RHYTHM_PROFILES


def get_profile(
    rhythm: Union[RhythmKind, str],
    lead: Union[Lead, str, None],
    pr_interval_sec: Optional[float] = None,
) -> MorphologyProfile:
    """
    Return the morphology profile for a rhythm as seen from one lead.

    Never fails: an unknown rhythm resolves to normal sinus rhythm and an
    unknown lead leaves the base amplitudes untouched.

    Args:
        rhythm: Rhythm kind or one of its aliases ("NSR", "AFib", "VTach", ...)
        lead: EKG lead, or None for the unscaled base profile
        pr_interval_sec: Accepted for normal rhythm; the synthesizer places the
            QRS from it, so it does not alter amplitudes here

    Returns:
        Frozen MorphologyProfile
    """
    rhythm_kind = RhythmKind.parse(rhythm)
    base_params, lead_overrides = RHYTHM_PROFILES[rhythm_kind.value]

    params: Dict = base_params.copy()
    resolved_lead = Lead.parse(lead)
    if resolved_lead is not None:
        params.update(lead_overrides.get(resolved_lead.value, {}))

    return _build_profile(params)


def _build_profile(params: Dict) -> MorphologyProfile:
    return MorphologyProfile(
        name=params["name"],
        description=params["description"],
        p_wave=PWave(
            amplitude=params["p_amplitude"],
            duration=params["p_duration"],
            present=params["p_present"],
        ),
        qrs_complex=QRSComplex(
            amplitude=params["qrs_amplitude"],
            duration=params["qrs_duration"],
            morphology=params["qrs_morphology"],
        ),
        t_wave=TWave(
            amplitude=params["t_amplitude"],
            duration=params["t_duration"],
            present=params["t_present"],
        ),
        baseline_noise=params["baseline_noise"],
        rate_variability=params["rate_variability"],
        st_elevation=params.get("st_elevation", 0.0),
    )


def list_rhythms() -> Dict[str, Dict[str, str]]:
    """Rhythm catalog keyed by rhythm value, with display name and description."""
    return {
        rhythm_key: {"name": base["name"], "description": base["description"]}
        for rhythm_key, (base, _) in RHYTHM_PROFILES.items()
    }
