"""Request-scoped detection pipeline."""

import asyncio
import logging
import time
from pathlib import Path

from ..assets import load_reference_image
from ..cameras import CameraConfigStore
from ..errors import InferenceError, MissingCredentialError, UnknownCameraError
from ..inference.gemini import GeminiGateway
from ..metrics import (
    record_detection,
    record_dropped_elements,
    record_inference_latency,
    record_spot_report,
)
from .models import DetectionResponse
from .prompt import build_request
from .sanitizer import parse_elements, sanitize

logger = logging.getLogger(__name__)

DEFAULT_CAMERA_MIME = "image/jpeg"


class DetectionPipeline:
    """
    Turns an uploaded camera frame into sanitized spot occupancy.

    Holds no per-request state; the camera store is read-only after its
    first load, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        store: CameraConfigStore,
        gateway: GeminiGateway,
        reference_image_path: str | Path,
    ):
        """
        Initialize the pipeline.

        Args:
            store: Camera profile store
            gateway: Inference gateway
            reference_image_path: Path to the labeled reference map image
        """
        self.store = store
        self.gateway = gateway
        self.reference_image_path = Path(reference_image_path)

    async def detect(
        self,
        camera_key: str,
        image_bytes: bytes,
        image_mime: str | None = None,
    ) -> DetectionResponse:
        """
        Run detection for one uploaded frame.

        Args:
            camera_key: Key of the camera profile the frame came from
            image_bytes: Uploaded camera frame
            image_mime: MIME type of the frame (defaults to image/jpeg)

        Returns:
            DetectionResponse with allow-listed spots and the raw model text

        Raises:
            MissingCredentialError: If no inference credential is configured
            UnknownCameraError: If the camera key is not configured
            ConfigurationError: If the camera config or reference image is unavailable
            InferenceError: If the inference call fails
        """
        # Credential is checked before anything else is touched
        if not self.gateway.is_configured:
            record_detection("unknown", "missing_credential")
            raise MissingCredentialError("Inference API key is not configured")

        # File reads run off the event loop
        cfg = await asyncio.to_thread(self.store.get, camera_key)
        if cfg is None:
            record_detection("unknown", "unknown_camera")
            raise UnknownCameraError(camera_key)

        reference_bytes, reference_mime = await asyncio.to_thread(
            load_reference_image, self.reference_image_path
        )

        request = build_request(
            cfg,
            reference_bytes,
            reference_mime,
            image_bytes,
            image_mime or DEFAULT_CAMERA_MIME,
        )

        logger.info(
            f"Running detection for camera '{camera_key}' "
            f"({len(cfg.visible_spots)} allowed spots, {len(image_bytes)} byte frame)"
        )

        start = time.perf_counter()
        try:
            raw = await self.gateway.send(request)
        except InferenceError:
            record_detection(camera_key, "inference_error")
            raise
        finally:
            record_inference_latency(time.perf_counter() - start)

        spots = sanitize(raw, set(cfg.visible_spots))

        dropped = len(parse_elements(raw)) - len(spots)
        if dropped:
            logger.warning(f"Dropped {dropped} invalid element(s) from model output for '{camera_key}'")
        record_dropped_elements(camera_key, dropped)
        for spot in spots:
            record_spot_report(camera_key, spot.status.value)
        record_detection(camera_key, "success")

        logger.info(f"Camera '{camera_key}': {len(spots)} spot(s) reported")

        return DetectionResponse(camera_id=cfg.camera_id, spots=spots, raw=raw)
