# ekg_simulator/api.py
import logging

import numpy as np
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api_models import (
    Lead, MorphologyProfile, TwelveLeadResponse, WaveformRequest, WaveformResponse, WaveLabelSet,
)
from .constants import FS
from .exceptions import EKGSimulatorError
from .full_ecg.lead_scaling import LEADS
from .rhythm_logic import synthesize, synthesize_12_lead
from .rhythm_profiles import get_profile, list_rhythms
from .wave_labels import build_wave_labels

logger = logging.getLogger(__name__)

app = FastAPI(title="EKG Wave Simulator", version="1.0.0")


@app.exception_handler(EKGSimulatorError)
async def simulator_error_handler(request: Request, exc: EKGSimulatorError):
    logger.warning("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _rng_for(params: WaveformRequest):
    if params.add_noise and params.seed is not None:
        return np.random.default_rng(params.seed)
    return None


@app.post("/generate_waveform", response_model=WaveformResponse)
async def get_waveform_data(params: WaveformRequest):
    series = synthesize(params.to_synthesis_parameters(), rng=_rng_for(params))
    return WaveformResponse(
        time_axis=series.time_axis.tolist(),
        ecg_signal=series.voltage.tolist(),
        rhythm_generated=series.rhythm_description,
        lead=series.lead,
        sample_rate_hz=FS,
        heart_rate_bpm=series.heart_rate_bpm,
    )


@app.post("/generate_waveform_12_lead", response_model=TwelveLeadResponse)
async def get_waveform_data_12_lead(params: WaveformRequest):
    lead_series = synthesize_12_lead(params.to_synthesis_parameters(), rng=_rng_for(params))
    reference = lead_series["II"]
    return TwelveLeadResponse(
        time_axis=reference.time_axis.tolist(),
        twelve_lead_signals={lead: series.voltage.tolist() for lead, series in lead_series.items()},
        rhythm_generated=reference.profile.name,
    )


@app.post("/wave_labels", response_model=WaveLabelSet)
async def get_wave_labels(params: WaveformRequest):
    return build_wave_labels(params.to_synthesis_parameters())


@app.get("/rhythms")
async def get_rhythms():
    return list_rhythms()


@app.get("/leads")
async def get_leads():
    return {"leads": LEADS}


@app.get("/profile/{rhythm}/{lead}", response_model=MorphologyProfile)
async def get_rhythm_profile(rhythm: str, lead: str):
    return get_profile(rhythm, Lead.parse(lead))
