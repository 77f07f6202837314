"""Data models for detection requests and results."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class SpotStatus(str, Enum):
    """Occupancy status of a parking spot."""

    OCCUPIED = "OCCUPIED"
    VACANT = "VACANT"
    UNKNOWN = "UNKNOWN"


class DetectionResult(BaseModel):
    """Sanitized occupancy report for a single spot."""

    model_config = ConfigDict(frozen=True)

    spot_number: str
    status: SpotStatus


class DetectionResponse(BaseModel):
    """Outcome of one detection request."""

    camera_id: str
    spots: list[DetectionResult]
    raw: str  # Unmodified inference output, kept for diagnostics


@dataclass(frozen=True)
class InlineImage:
    """Binary image payload tagged with its MIME type."""

    mime_type: str
    data: bytes


@dataclass(frozen=True)
class InferenceRequest:
    """Multimodal request handed to the inference gateway."""

    prompt: str
    images: tuple[InlineImage, ...]
    temperature: float = 0.0
    response_mime_type: str = "application/json"
