"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .api.router import init_router, router
from .cameras import CameraConfigStore
from .config import AppConfig, resolve_app_config
from .detection.pipeline import DetectionPipeline
from .errors import CameraConfigError
from .inference.gemini import GeminiGateway

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_gateway(config: AppConfig) -> GeminiGateway:
    """Create the inference gateway from configuration."""
    inference = config.inference
    return GeminiGateway(
        api_key=inference.api_key,
        model=inference.model,
        base_url=inference.base_url,
        timeout_seconds=inference.timeout_seconds,
        max_retries=inference.max_retries,
        retry_backoff_seconds=inference.retry_backoff_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Gaia Parking...")

    config = resolve_app_config()

    store = CameraConfigStore(config.assets.camera_config_path)
    try:
        store.load()
    except CameraConfigError as e:
        logger.error(str(e))
        logger.error("Set CAMERA_CONFIG_PATH or create config/cameras.json")
        raise

    gateway = build_gateway(config)
    if not gateway.is_configured:
        logger.warning("GEMINI_API_KEY not set - detection requests will fail")
    else:
        logger.info(f"Using inference model {gateway.model}")

    reference_path = Path(config.assets.reference_image_path)
    if not reference_path.exists():
        logger.warning(f"Reference image not found: {reference_path}")

    pipeline = DetectionPipeline(
        store=store,
        gateway=gateway,
        reference_image_path=reference_path,
    )

    init_router(
        store,
        pipeline,
        reference_image_path=reference_path,
        parking_map_path=config.assets.parking_map_path,
    )

    logger.info(f"Gaia Parking ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Gaia Parking",
    description="Parking spot occupancy from camera frames via a vision-language model",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


def main():
    """Run the application."""
    config = resolve_app_config()

    uvicorn.run(
        "gaia_parking.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
