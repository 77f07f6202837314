"""API request and response schemas."""

from pydantic import BaseModel

from ..detection.models import DetectionResult


class CameraProfile(BaseModel):
    """Public view of a camera profile."""

    key: str
    camera_id: str
    visible_spots: list[str]
    alignment_hint: str


class ConfigsResponse(BaseModel):
    """Response for listing camera profiles."""

    configs: list[CameraProfile]


class OverlayRequest(BaseModel):
    """Spot statuses to draw onto the reference map."""

    spots: list[DetectionResult] = []


class MapMetadata(BaseModel):
    """Pixel size of the image the map geometry refers to."""

    image_width: int
    image_height: int


class MapSpotSchema(BaseModel):
    """A single spot polygon."""

    id: str
    points: list[tuple[float, float]]


class ParkingMapResponse(BaseModel):
    """Parking map geometry for the presentation layer."""

    metadata: MapMetadata
    spots: list[MapSpotSchema]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    cameras_loaded: bool
    inference_configured: bool
    uptime_seconds: float
