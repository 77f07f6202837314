"""Prompt construction for the occupancy inference call."""

from ..cameras import CameraConfig
from .models import InferenceRequest, InlineImage


def build_prompt(cfg: CameraConfig) -> str:
    """
    Build the instruction text for a camera profile.

    The alignment hint is embedded verbatim and the allow-list is rendered as
    a comma-separated list. The model is asked to restrict itself to those
    spots, but the sanitizer enforces it regardless of what comes back.
    """
    return "\n".join(
        [
            "You are a parking enforcement AI. Compare the labeled Reference Map to the Camera View.",
            f"Perspective hint: {cfg.alignment_hint}",
            f"Allowed spots (strict): {', '.join(cfg.visible_spots)}",
            "Rules:",
            "- Report only allowed spots.",
            "- Status = OCCUPIED, VACANT, or UNKNOWN (if ambiguous or not visible).",
            "- If alignment fails, return [].",
            'Return JSON array: [{"spot_number":"A0","status":"OCCUPIED"}].',
        ]
    )


def build_request(
    cfg: CameraConfig,
    reference_bytes: bytes,
    reference_mime: str,
    camera_bytes: bytes,
    camera_mime: str,
) -> InferenceRequest:
    """
    Package the prompt and both images into a single inference request.

    Args:
        cfg: Camera profile the frame was taken with
        reference_bytes: Labeled reference map image
        reference_mime: MIME type of the reference map
        camera_bytes: Uploaded camera frame
        camera_mime: MIME type of the camera frame

    Returns:
        InferenceRequest with the reference map first and the camera frame second
    """
    return InferenceRequest(
        prompt=build_prompt(cfg),
        images=(
            InlineImage(mime_type=reference_mime, data=reference_bytes),
            InlineImage(mime_type=camera_mime, data=camera_bytes),
        ),
        temperature=0.0,
    )
