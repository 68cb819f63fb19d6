# ekg_simulator/constants.py

# --- Sampling & Window Constants ---
FS = 250
BASELINE_MV = 0.0
MIN_WINDOW_SEC = 5.0
MIN_CYCLES_PER_WINDOW = 3

# --- Noise Constants ---
# Noise scale grows with heart rate: 0.05 * (1 + (bpm - 70) / 100)
NOISE_BASE_SCALE = 0.05
NOISE_REFERENCE_RATE_BPM = 70.0
NOISE_RATE_DIVISOR = 100.0

# --- Parameter Defaults (simulator start-up state) ---
DEFAULT_HEART_RATE_BPM = 70.0
DEFAULT_PR_INTERVAL_SEC = 0.16
DEFAULT_QRS_WIDTH_SEC = 0.08
DEFAULT_QT_INTERVAL_SEC = 0.36
DEFAULT_AMPLITUDE_GAIN = 1.0

# --- UI Ranges (enforced by the HTTP request model only) ---
HEART_RATE_RANGE_BPM = (40.0, 180.0)
PR_INTERVAL_RANGE_SEC = (0.12, 0.20)
QRS_WIDTH_RANGE_SEC = (0.06, 0.12)
QT_INTERVAL_RANGE_SEC = (0.30, 0.50)
AMPLITUDE_GAIN_RANGE = (0.5, 2.0)

# --- Lead Normalization ---
# Applied to every rhythm after the morphology is computed.
LEAD_NORMALIZATION_GAINS = {
    "II": 1.0, "V5": 1.0,
    "V1": 1.2, "V2": 1.2,
}
DEFAULT_LEAD_NORMALIZATION_GAIN = 0.9

# --- QRS Phase Boundaries (fraction of QRS width) ---
QRS_Q_END = 0.2
QRS_R_END = 0.4
QRS_S_END = 0.7
Q_WAVE_DEPTH = 0.2          # Q trough as a fraction of QRS amplitude
R_WAVE_EXPONENT = 0.8
S_WAVE_OVERSHOOT = 1.2      # S descent slope, overshoots below baseline
ST_ELEVATION_SCALE = 0.05

VT_QRS_UPSTROKE_END = 0.4
VT_QRS_PLATEAU_END = 0.7
VT_UPSTROKE_EXPONENT = 1.5
VT_UPSTROKE_GAIN = 1.2
VT_NOTCH_FREQUENCY = 20.0
VT_NOTCH_AMPLITUDE = 0.1
VT_DESCENT_GAIN = 0.7

# --- Atrial Fibrillation ---
# (frequency in rad per unit phase, amplitude in mV)
FIBRILLATORY_WAVE_TERMS = (
    (120.0, 0.03),
    (137.0, 0.02),
    (146.0, 0.025),
)
# Incommensurate multipliers so the per-beat RR scale never repeats
RR_JITTER_MULTIPLIERS = (0.31, 0.77, 1.23)
# RR variation factor = rate_variability * this (0.4 -> 20%)
RR_VARIATION_PER_VARIABILITY = 0.5

# --- Per-Rhythm Timing Definitions ---
# Positions and durations are in units of cycle phase (0-1), which equal
# seconds at 60 bpm. qrs_start None means "use the PR interval".
NORMAL_TIMING = {
    "p_start": 0.04, "qrs_start": None, "min_qrs_width": 0.0,
    "t_duration": 0.16, "min_st_duration": 0.05, "st_offset": None,
    "t_center": 0.4, "t_width": 0.3, "t_gain": 1.0,
}
AFIB_TIMING = {
    "p_start": None, "qrs_start": 0.2, "min_qrs_width": 0.0,
    "t_duration": 0.16, "min_st_duration": 0.05, "st_offset": None,
    "t_center": 0.4, "t_width": 0.3, "t_gain": 0.9,
}
VTACH_TIMING = {
    "p_start": None, "qrs_start": 0.1, "min_qrs_width": 0.12,  # Wide QRS (>=120ms) always
    "t_duration": 0.16, "min_st_duration": 0.02, "st_offset": -0.1,  # ST depression
    "t_center": 0.45, "t_width": 0.35, "t_gain": -0.7,  # Inverted T-wave
}

RHYTHM_TIMING = {
    "normal": NORMAL_TIMING,
    "afib": AFIB_TIMING,
    "vtach": VTACH_TIMING,
}

# --- Morphology Profile Definitions ---
NORMAL_PROFILE_PARAMS = {
    "name": "Normal Sinus Rhythm",
    "description": "Regular rhythm with normal P waves, QRS complexes, and T waves",
    "p_amplitude": 0.2, "p_duration": 0.08, "p_present": True,
    "qrs_amplitude": 1.0, "qrs_duration": 0.08, "qrs_morphology": "normal",
    "t_amplitude": 0.3, "t_duration": 0.16, "t_present": True,
    "baseline_noise": 0.02, "rate_variability": 0.05,
}
AFIB_PROFILE_PARAMS = {
    "name": "Atrial Fibrillation",
    "description": "Irregular rhythm with absence of P waves, replaced by fibrillatory waves",
    "p_amplitude": 0.0, "p_duration": 0.0, "p_present": False,
    "qrs_amplitude": 1.0, "qrs_duration": 0.08, "qrs_morphology": "normal",
    "t_amplitude": 0.3, "t_duration": 0.16, "t_present": True,
    "baseline_noise": 0.05, "rate_variability": 0.4,  # Irregularly irregular
}
VTACH_PROFILE_PARAMS = {
    "name": "Ventricular Tachycardia",
    "description": "Rapid, regular rhythm with wide, bizarre QRS complexes",
    "p_amplitude": 0.0, "p_duration": 0.0, "p_present": False,
    "qrs_amplitude": 1.8, "qrs_duration": 0.16, "qrs_morphology": "wide",
    "t_amplitude": 0.5, "t_duration": 0.12, "t_present": True,
    "baseline_noise": 0.03, "rate_variability": 0.1,
}

# Lead-specific overrides: absolute values replacing the base profile entries.
NORMAL_LEAD_OVERRIDES = {
    "I":   {"qrs_amplitude": 0.8},
    "II":  {"p_amplitude": 0.25, "qrs_amplitude": 1.1},  # Most prominent P waves
    "III": {"qrs_amplitude": 0.7, "t_amplitude": 0.2},
    "aVR": {"p_amplitude": -0.15, "qrs_amplitude": -0.7, "t_amplitude": -0.2},  # Predominantly negative
    "aVL": {"qrs_amplitude": 0.6},
    "aVF": {"qrs_amplitude": 0.8},
    "V1":  {"qrs_amplitude": 0.7, "t_amplitude": -0.1},  # Inverted T can be normal in V1
    "V2":  {"qrs_amplitude": 1.2},
    "V3":  {"qrs_amplitude": 1.5},
    "V4":  {"qrs_amplitude": 1.8},
    "V5":  {"qrs_amplitude": 1.5},
    "V6":  {"qrs_amplitude": 1.2},
}
AFIB_LEAD_OVERRIDES = {
    "II": {"qrs_amplitude": 1.1},
    "V1": {"baseline_noise": 0.07},  # Fibrillatory waves most visible in V1
}
VTACH_LEAD_OVERRIDES = {
    "V1": {"qrs_amplitude": 2.0},
    "V2": {"qrs_amplitude": 2.0},
    "V6": {"qrs_amplitude": 1.6},
}

RHYTHM_PROFILES = {
    "normal": (NORMAL_PROFILE_PARAMS, NORMAL_LEAD_OVERRIDES),
    "afib": (AFIB_PROFILE_PARAMS, AFIB_LEAD_OVERRIDES),
    "vtach": (VTACH_PROFILE_PARAMS, VTACH_LEAD_OVERRIDES),
}

# --- Wave Label Heights (nominal mV, before lead scaling) ---
LABEL_HEIGHTS = {
    "normal": {"P": 0.2, "QRS": 1.0, "T": 0.3},
    "afib": {"f": 0.05, "QRS": 1.0, "T": 0.3},
    "vtach": {"QRS": 1.8, "T": -0.3},
}
AFIB_IRREGULAR_LABEL_PHASE = 0.2
AFIB_FIBRILLATION_LABEL_MID = 0.1
QT_MARKER_MIN_SEC = 0.2
