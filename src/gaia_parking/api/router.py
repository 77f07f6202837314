"""FastAPI route definitions."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response
from starlette.datastructures import UploadFile

from ..assets import load_parking_map, load_reference_image
from ..cameras import CameraConfigStore
from ..detection.models import DetectionResponse
from ..detection.pipeline import DetectionPipeline
from ..errors import (
    CameraConfigError,
    ConfigurationError,
    InferenceError,
    MissingCredentialError,
    ParkingMapError,
    ReferenceImageError,
    UnknownCameraError,
)
from ..metrics import get_metrics
from ..rendering.overlay import render_overlay
from .schemas import (
    CameraProfile,
    ConfigsResponse,
    HealthResponse,
    OverlayRequest,
    ParkingMapResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

REFERENCE_CACHE_CONTROL = "public, max-age=60"

# Dependencies injected at startup
_store: Optional[CameraConfigStore] = None
_pipeline: Optional[DetectionPipeline] = None
_reference_image_path: Optional[Path] = None
_parking_map_path: Optional[Path] = None
_start_time: datetime = datetime.now()


def init_router(
    store: CameraConfigStore,
    pipeline: DetectionPipeline,
    reference_image_path: str | Path,
    parking_map_path: str | Path,
) -> None:
    """
    Initialize router with dependencies.

    Args:
        store: Camera profile store
        pipeline: Detection pipeline sharing the same store
        reference_image_path: Path to the labeled reference map image
        parking_map_path: Path to the parking map geometry document
    """
    global _store, _pipeline, _reference_image_path, _parking_map_path, _start_time

    _store = store
    _pipeline = pipeline
    _reference_image_path = Path(reference_image_path)
    _parking_map_path = Path(parking_map_path)
    _start_time = datetime.now()

    logger.info("API router initialized")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health information about the service.
    """
    uptime = (datetime.now() - _start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        cameras_loaded=_store is not None and _store.is_loaded,
        inference_configured=_pipeline is not None and _pipeline.gateway.is_configured,
        uptime_seconds=uptime,
    )


@router.get("/configs", response_model=ConfigsResponse)
async def list_configs() -> ConfigsResponse:
    """
    List camera profiles.

    Returns every configured camera key with its camera ID, allowed spots
    and alignment hint.
    """
    if _store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        configs = await asyncio.to_thread(_store.load)
    except CameraConfigError as e:
        logger.error(f"Failed to load camera configs: {e}")
        raise HTTPException(status_code=500, detail="Camera configuration unavailable")

    return ConfigsResponse(
        configs=[
            CameraProfile(
                key=key,
                camera_id=cfg.camera_id,
                visible_spots=list(cfg.visible_spots),
                alignment_hint=cfg.alignment_hint,
            )
            for key, cfg in configs.items()
        ]
    )


@router.post("/detect", response_model=DetectionResponse)
async def detect(request: Request) -> DetectionResponse:
    """
    Classify spot occupancy in an uploaded camera frame.

    Expects multipart form fields ``camera`` (camera profile key) and
    ``image`` (the frame, sent as a file). Spots may legitimately be empty;
    ``raw`` always carries the unmodified model output.
    """
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    if not _pipeline.gateway.is_configured:
        raise HTTPException(status_code=500, detail="Server missing GEMINI_API_KEY")

    # Parsed by hand so a non-file ``image`` gets a 400 rather than a validation dump
    async with request.form() as form:
        camera = form.get("camera")
        image = form.get("image")

        if not isinstance(camera, str) or not camera or not isinstance(image, UploadFile):
            raise HTTPException(status_code=400, detail="camera and image are required")

        image_bytes = await image.read()
        image_mime = image.content_type

    try:
        return await _pipeline.detect(camera, image_bytes, image_mime)
    except MissingCredentialError:
        raise HTTPException(status_code=500, detail="Server missing GEMINI_API_KEY")
    except UnknownCameraError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ReferenceImageError as e:
        logger.error(f"Detection aborted: {e}")
        raise HTTPException(status_code=500, detail="Reference image not found on server")
    except ConfigurationError as e:
        logger.error(f"Detection aborted: {e}")
        raise HTTPException(status_code=500, detail="Camera configuration unavailable")
    except InferenceError as e:
        logger.error(f"Detection failed for camera '{camera}': {e}")
        raise HTTPException(status_code=502, detail="Inference service request failed")


@router.get("/reference-image")
async def get_reference_image() -> Response:
    """
    Get the labeled reference map image.

    Served with its detected content type and a short public cache lifetime.
    """
    if _reference_image_path is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        data, mime_type = await asyncio.to_thread(load_reference_image, _reference_image_path)
    except ReferenceImageError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Reference image not found")

    return Response(
        content=data,
        media_type=mime_type,
        headers={"Cache-Control": REFERENCE_CACHE_CONTROL},
    )


@router.get("/parking-map", response_model=ParkingMapResponse)
async def get_parking_map() -> ParkingMapResponse:
    """
    Get the spot polygons of the reference map.

    Coordinates are in reference-image pixels, sized by ``metadata``.
    """
    if _parking_map_path is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        parking_map = await asyncio.to_thread(load_parking_map, _parking_map_path)
    except ParkingMapError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Parking map unavailable")

    return ParkingMapResponse(**parking_map.to_dict())


@router.post("/overlay")
async def render_occupancy_overlay(req: OverlayRequest) -> Response:
    """
    Render spot statuses onto the reference map.

    Returns a PNG of the reference image with each spot filled:
    - Red for occupied spots
    - Green for vacant spots, and for spots missing from the request
    - Slate for unknown spots
    """
    if _reference_image_path is None or _parking_map_path is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        reference_bytes, _ = await asyncio.to_thread(load_reference_image, _reference_image_path)
        parking_map = await asyncio.to_thread(load_parking_map, _parking_map_path)
        png = await asyncio.to_thread(render_overlay, reference_bytes, parking_map, req.spots)
    except ConfigurationError as e:
        logger.error(f"Failed to render overlay: {e}")
        raise HTTPException(status_code=500, detail="Overlay assets unavailable")

    return Response(content=png, media_type="image/png")


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - gaia_detection_requests_total: Detection requests by camera and outcome
    - gaia_inference_latency_seconds: Histogram of inference call latency
    - gaia_spots_reported_total: Sanitized spot reports by camera and status
    - gaia_model_elements_dropped_total: Model output elements rejected
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
