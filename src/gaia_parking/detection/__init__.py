"""Occupancy detection module."""

from .models import DetectionResponse, DetectionResult, InferenceRequest, InlineImage, SpotStatus
from .prompt import build_prompt, build_request
from .sanitizer import parse_elements, sanitize

__all__ = [
    "DetectionResponse",
    "DetectionResult",
    "InferenceRequest",
    "InlineImage",
    "SpotStatus",
    "build_prompt",
    "build_request",
    "parse_elements",
    "sanitize",
]
