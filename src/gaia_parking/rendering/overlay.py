"""Server-side rendering of occupancy onto the reference map."""

import logging
from collections.abc import Iterable

import cv2
import numpy as np

from ..assets import ParkingMap
from ..detection.models import DetectionResult, SpotStatus
from ..errors import ReferenceImageError

logger = logging.getLogger(__name__)

# (fill, stroke) in BGR
STATUS_COLORS = {
    SpotStatus.OCCUPIED: ((68, 68, 239), (165, 165, 252)),  # Red
    SpotStatus.VACANT: ((94, 197, 34), (172, 239, 134)),  # Green
}
DEFAULT_COLORS = ((225, 213, 203), (184, 163, 148))  # Slate

LABEL_COLOR = (36, 18, 11)
LABEL_OUTLINE_COLOR = (240, 232, 226)
STROKE_WIDTH = 3

# Spots missing from the results are drawn as vacant
UNREPORTED_STATUS = SpotStatus.VACANT


def status_colors(status: SpotStatus) -> tuple[tuple[int, int, int], tuple[int, int, int]]:
    """Get (fill, stroke) BGR colors for a spot status."""
    return STATUS_COLORS.get(status, DEFAULT_COLORS)


def render_overlay(
    reference_bytes: bytes,
    parking_map: ParkingMap,
    results: Iterable[DetectionResult],
) -> bytes:
    """
    Draw spot polygons colored by status over the reference map.

    Args:
        reference_bytes: Encoded reference map image
        parking_map: Spot geometry in map coordinates
        results: Sanitized detection results; the last report for a spot wins

    Returns:
        PNG-encoded image with the reference map's dimensions

    Raises:
        ReferenceImageError: If the reference image cannot be decoded
    """
    nparr = np.frombuffer(reference_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if image is None:
        raise ReferenceImageError("Failed to decode reference image")

    height, width = image.shape[:2]
    status_by_spot = {r.spot_number: r.status for r in results}

    # Font size tracks the image height relative to the map definition
    font_scale = max(0.3, 0.6 * height / parking_map.image_height)
    thickness = max(1, round(2 * height / parking_map.image_height))

    for spot in parking_map.spots:
        if (width, height) != (parking_map.image_width, parking_map.image_height):
            spot = spot.scale(
                parking_map.image_width, parking_map.image_height, width, height
            )

        fill, stroke = status_colors(status_by_spot.get(spot.id, UNREPORTED_STATUS))

        pts = np.array([[round(x), round(y)] for x, y in spot.points], np.int32)
        cv2.fillPoly(image, [pts], fill)
        cv2.polylines(image, [pts], True, stroke, STROKE_WIDTH)

        # Label centered on the polygon centroid
        cx, cy = spot.centroid
        (text_w, text_h), _ = cv2.getTextSize(
            spot.id, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness
        )
        origin = (round(cx - text_w / 2), round(cy + text_h / 2))
        cv2.putText(
            image,
            spot.id,
            origin,
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            LABEL_OUTLINE_COLOR,
            thickness + 2,
            cv2.LINE_AA,
        )
        cv2.putText(
            image,
            spot.id,
            origin,
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            LABEL_COLOR,
            thickness,
            cv2.LINE_AA,
        )

    logger.debug(f"Rendered overlay for {len(parking_map.spots)} spot(s) at {width}x{height}")

    _, buffer = cv2.imencode(".png", image)
    return buffer.tobytes()
