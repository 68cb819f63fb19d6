# ekg_simulator/api_models.py
import logging
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_HEART_RATE_BPM, DEFAULT_PR_INTERVAL_SEC, DEFAULT_QRS_WIDTH_SEC,
    DEFAULT_QT_INTERVAL_SEC, DEFAULT_AMPLITUDE_GAIN,
    HEART_RATE_RANGE_BPM, PR_INTERVAL_RANGE_SEC, QRS_WIDTH_RANGE_SEC,
    QT_INTERVAL_RANGE_SEC, AMPLITUDE_GAIN_RANGE,
)

logger = logging.getLogger(__name__)


class RhythmKind(str, Enum):
    NORMAL = "normal"
    ATRIAL_FIBRILLATION = "afib"
    VENTRICULAR_TACHYCARDIA = "vtach"

    @classmethod
    def parse(cls, value) -> "RhythmKind":
        """
        Resolve a rhythm name, accepting the short names used by the UI
        ("NSR", "AFib", "VTach"). Unknown values fall back to NORMAL.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower() if value is not None else ""
        rhythm = _RHYTHM_ALIASES.get(key)
        if rhythm is None:
            logger.warning("Unknown rhythm %r, falling back to normal sinus rhythm", value)
            return cls.NORMAL
        return rhythm


_RHYTHM_ALIASES = {
    "normal": RhythmKind.NORMAL,
    "nsr": RhythmKind.NORMAL,
    "sinus": RhythmKind.NORMAL,
    "afib": RhythmKind.ATRIAL_FIBRILLATION,
    "atrial_fibrillation": RhythmKind.ATRIAL_FIBRILLATION,
    "vtach": RhythmKind.VENTRICULAR_TACHYCARDIA,
    "vt": RhythmKind.VENTRICULAR_TACHYCARDIA,
    "ventricular_tachycardia": RhythmKind.VENTRICULAR_TACHYCARDIA,
}


class Lead(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    aVR = "aVR"
    aVL = "aVL"
    aVF = "aVF"
    V1 = "V1"
    V2 = "V2"
    V3 = "V3"
    V4 = "V4"
    V5 = "V5"
    V6 = "V6"

    @classmethod
    def parse(cls, value) -> Optional["Lead"]:
        """Case-insensitive lookup; returns None for unknown leads."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        key = str(value).strip().lower()
        for lead in cls:
            if lead.value.lower() == key:
                return lead
        return None


# --- Morphology Profile ---

class PWave(BaseModel):
    model_config = ConfigDict(frozen=True)

    amplitude: float
    duration: float = Field(ge=0)
    present: bool


class QRSComplex(BaseModel):
    model_config = ConfigDict(frozen=True)

    amplitude: float
    duration: float = Field(ge=0)
    morphology: Literal["normal", "wide"] = "normal"


class TWave(BaseModel):
    model_config = ConfigDict(frozen=True)

    amplitude: float
    duration: float = Field(ge=0)
    present: bool


class MorphologyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    p_wave: PWave
    qrs_complex: QRSComplex
    t_wave: TWave
    baseline_noise: float = Field(ge=0, description="Relative baseline noise scale.")
    rate_variability: float = Field(ge=0, le=1, description="Beat-to-beat timing irregularity scale.")
    st_elevation: float = Field(0.0, description="ST segment offset, scaled by 0.05 when drawn.")


# --- Synthesis Parameters ---

class SynthesisParameters(BaseModel):
    """
    Input bundle for one synthesis call. Only the heart rate is guarded here;
    the UI ranges are enforced by WaveformRequest.
    """
    model_config = ConfigDict(frozen=True)

    heart_rate_bpm: float = Field(DEFAULT_HEART_RATE_BPM, gt=0, description="Heart rate in beats per minute.")
    rhythm: RhythmKind = Field(RhythmKind.NORMAL, description="Cardiac rhythm to simulate.")
    lead: Optional[Lead] = Field(Lead.II, description="EKG lead to display. None means no lead-specific scaling.")
    pr_interval_sec: float = Field(DEFAULT_PR_INTERVAL_SEC, ge=0, description="Time from P-wave onset to QRS onset.")
    qrs_width_sec: float = Field(DEFAULT_QRS_WIDTH_SEC, gt=0, description="QRS complex width. VTach widens anything below 120ms.")
    qt_interval_sec: float = Field(DEFAULT_QT_INTERVAL_SEC, gt=0, description="Time from QRS onset to T-wave end.")
    amplitude_gain: float = Field(DEFAULT_AMPLITUDE_GAIN, ge=0, description="Multiplier applied to every deflection.")
    add_noise: bool = Field(False, description="Add rate-dependent baseline noise.")

    @field_validator("rhythm", mode="before")
    @classmethod
    def _coerce_rhythm(cls, value):
        return RhythmKind.parse(value)

    @field_validator("lead", mode="before")
    @classmethod
    def _coerce_lead(cls, value):
        lead = Lead.parse(value)
        if lead is None and value is not None:
            logger.warning("Unknown lead %r, using base amplitudes", value)
        return lead


class WaveformRequest(SynthesisParameters):
    """HTTP request body: the engine parameters constrained to the UI slider ranges."""
    heart_rate_bpm: float = Field(DEFAULT_HEART_RATE_BPM, ge=HEART_RATE_RANGE_BPM[0], le=HEART_RATE_RANGE_BPM[1])
    pr_interval_sec: float = Field(DEFAULT_PR_INTERVAL_SEC, ge=PR_INTERVAL_RANGE_SEC[0], le=PR_INTERVAL_RANGE_SEC[1])
    qrs_width_sec: float = Field(DEFAULT_QRS_WIDTH_SEC, ge=QRS_WIDTH_RANGE_SEC[0], le=QRS_WIDTH_RANGE_SEC[1])
    qt_interval_sec: float = Field(DEFAULT_QT_INTERVAL_SEC, ge=QT_INTERVAL_RANGE_SEC[0], le=QT_INTERVAL_RANGE_SEC[1])
    amplitude_gain: float = Field(DEFAULT_AMPLITUDE_GAIN, ge=AMPLITUDE_GAIN_RANGE[0], le=AMPLITUDE_GAIN_RANGE[1])
    seed: Optional[int] = Field(None, ge=0, description="Seed for reproducible noise. Ignored when add_noise is false.")

    def to_synthesis_parameters(self) -> SynthesisParameters:
        return SynthesisParameters(**self.model_dump(exclude={"seed"}))


# --- Wave Labels ---

class WaveLabel(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    kind: Literal["wave", "note"] = "wave"
    phase: float = Field(description="Position within the beat (0-1).")
    time_sec: float = Field(description="Position in seconds within beat 0.")
    height_mv: float = Field(description="Nominal deflection height the label sits above (or below).")


class IntervalMarker(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    start_phase: float
    end_phase: float
    start_sec: float
    end_sec: float


class WaveLabelSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    rhythm: RhythmKind
    cycle_length_sec: float
    labels: List[WaveLabel]
    intervals: List[IntervalMarker] = Field(default_factory=list)


# --- Responses ---

class WaveformResponse(BaseModel):
    time_axis: List[float]
    ecg_signal: List[float]
    rhythm_generated: str
    lead: Optional[Lead]
    sample_rate_hz: int
    heart_rate_bpm: float


class TwelveLeadResponse(BaseModel):
    time_axis: List[float]
    twelve_lead_signals: Dict[str, List[float]]
    rhythm_generated: str
