# main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",  # For local development
    "http://127.0.0.1:3000",
    "http://localhost:5173",  # Vite dev server
]


def get_cors_origins():
    configured = os.environ.get("EKG_SIMULATOR_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in configured.split(",") if origin.strip()]
    return origins or DEFAULT_CORS_ORIGINS


app = FastAPI(title="EKG Wave Simulator API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"message": "EKG Wave Simulator API is running", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Waveform routes live in the simulator package and are mounted under /api
from ekg_simulator.api import app as ekg_app  # noqa: E402

app.mount("/api", ekg_app)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    host = os.environ.get("EKG_SIMULATOR_HOST", "0.0.0.0")
    port = int(os.environ.get("EKG_SIMULATOR_PORT", "8000"))
    logger.info("Starting EKG simulator on %s:%d", host, port)
    uvicorn.run("main:app", host=host, port=port, reload=True)
