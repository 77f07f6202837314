"""Reference map image and parking map geometry loading."""

import json
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ParkingMapError, ReferenceImageError

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_MIME = "image/png"

# Dimensions of the original labeled reference map
DEFAULT_MAP_WIDTH = 363
DEFAULT_MAP_HEIGHT = 899


def load_reference_image(path: str | Path) -> tuple[bytes, str]:
    """
    Read the labeled reference map image.

    Args:
        path: Path to the reference image

    Returns:
        Tuple of (image bytes, MIME type guessed from the file extension)

    Raises:
        ReferenceImageError: If the image is missing or unreadable
    """
    image_path = Path(path)

    if not image_path.is_file():
        raise ReferenceImageError(f"Reference image not found: {image_path}")

    try:
        data = image_path.read_bytes()
    except OSError as e:
        raise ReferenceImageError(f"Cannot read reference image {image_path}: {e}") from e

    mime_type, _ = mimetypes.guess_type(image_path.name)
    return data, mime_type or DEFAULT_REFERENCE_MIME


@dataclass
class MapSpot:
    """A named parking spot polygon in reference-image pixel coordinates."""

    id: str
    points: list[tuple[float, float]]  # List of (x, y) vertices

    @property
    def centroid(self) -> tuple[float, float]:
        """Mean of the polygon vertices."""
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return (sum(xs) / len(xs), sum(ys) / len(ys))

    def scale(
        self,
        src_width: int,
        src_height: int,
        dst_width: int,
        dst_height: int,
    ) -> "MapSpot":
        """Return a copy with points rescaled from one image size to another."""
        sx = dst_width / src_width
        sy = dst_height / src_height
        return MapSpot(
            id=self.id,
            points=[(x * sx, y * sy) for x, y in self.points],
        )

    @classmethod
    def from_dict(cls, data: dict) -> "MapSpot":
        """Create MapSpot from dictionary."""
        return cls(
            id=str(data["id"]),
            points=[(float(p[0]), float(p[1])) for p in data["points"]],
        )


@dataclass
class ParkingMap:
    """Geometry of every spot drawn on the reference map."""

    spots: list[MapSpot] = field(default_factory=list)
    image_width: int = DEFAULT_MAP_WIDTH
    image_height: int = DEFAULT_MAP_HEIGHT

    def to_dict(self) -> dict:
        return {
            "metadata": {
                "image_width": self.image_width,
                "image_height": self.image_height,
            },
            "spots": [
                {"id": s.id, "points": [[x, y] for x, y in s.points]}
                for s in self.spots
            ],
        }


def load_parking_map(path: str | Path) -> ParkingMap:
    """
    Load parking map geometry from a JSON file.

    Args:
        path: Path to parking_map.json

    Returns:
        ParkingMap with spot polygons and the image size they refer to

    Raises:
        ParkingMapError: If the file is missing or malformed
    """
    map_path = Path(path)

    try:
        with open(map_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ParkingMapError(f"Cannot read parking map {map_path}: {e}") from e
    except ValueError as e:
        raise ParkingMapError(f"Parking map {map_path} is not valid JSON: {e}") from e

    try:
        spots = [MapSpot.from_dict(s) for s in data["spots"]]
        metadata = data.get("metadata") or {}
        width = int(metadata.get("image_width") or DEFAULT_MAP_WIDTH)
        height = int(metadata.get("image_height") or DEFAULT_MAP_HEIGHT)
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise ParkingMapError(f"Parking map {map_path} is malformed: {e}") from e

    if any(len(s.points) < 3 for s in spots):
        raise ParkingMapError(f"Parking map {map_path} has a spot with fewer than 3 points")

    logger.debug(f"Loaded {len(spots)} map spot(s) from {map_path}")
    return ParkingMap(spots=spots, image_width=width, image_height=height)
