"""HTTP API for point landslide risk predictions.

Endpoints:
- GET  /         -> plain-text health check
- POST /predict  -> {lat, lng, manualRain?} -> features + prediction

Usage:
    uvicorn slopewatch.api.server:app
"""

from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from slopewatch.config import get_config
from slopewatch.risk.engine import RiskEngine
from slopewatch.sources.gather import gather_features

logger = structlog.get_logger()


class PredictRequest(BaseModel):
    """Body of a prediction request. Coordinates are checked by the handler."""

    lat: float | None = None
    lng: float | None = None
    manualRain: float | None = None


def create_app(engine: RiskEngine | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        engine: Risk engine to use. Defaults to one built from the configured
            risk model path (or the default model).
    """
    config = get_config()
    if engine is None:
        model_path = Path(config.risk.model_path) if config.risk.model_path else None
        engine = RiskEngine(config_path=model_path)

    app = FastAPI(
        title="SlopeWatch API",
        version="0.1.0",
        description="Point landslide risk from live weather, soil and terrain data",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    def health() -> str:
        return "SlopeWatch backend is running"

    @app.post("/predict")
    async def predict(payload: PredictRequest | None = None):
        """Fetch live features for a point and evaluate its landslide risk."""
        if payload is None or payload.lat is None or payload.lng is None:
            logger.warning("Missing lat/lng in body")
            return JSONResponse(status_code=400, content={"error": "lat and lng are required"})

        logger.info(
            "Prediction requested",
            lat=payload.lat,
            lng=payload.lng,
            manual_rain=payload.manualRain,
        )

        try:
            features, is_simulated = await gather_features(
                payload.lat, payload.lng, manual_rain=payload.manualRain
            )
            prediction = engine.evaluate(features)
        except Exception:
            logger.exception("Prediction failed", lat=payload.lat, lng=payload.lng)
            return JSONResponse(status_code=500, content={"error": "Failed"})

        logger.info("Prediction complete", level=prediction.level.value, reason=prediction.reason)

        return {
            "location": {"lat": payload.lat, "lng": payload.lng},
            "data": features.to_dict(),
            "prediction": prediction.to_dict(),
            "isSimulated": is_simulated,
        }

    return app


app = create_app()
