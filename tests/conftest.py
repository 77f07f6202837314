"""Shared fixtures for the test suite."""

import json

import cv2
import numpy as np
import pytest

from gaia_parking.cameras import CameraConfigStore
from gaia_parking.errors import InferenceError

CAMERAS = {
    "north_gate": {
        "camera_id": "CAM-01",
        "visible_spots": ["A0", "A1"],
        "alignment_hint": "Camera faces south; A0 is nearest the gate.",
    },
    "east_wall": {
        "camera_id": "CAM-02",
        "visible_spots": ["A0", "B2"],
        "alignment_hint": "Looking west, B2 on the left.",
    },
}

PARKING_MAP = {
    "metadata": {"image_width": 363, "image_height": 899},
    "spots": [
        {"id": "A0", "points": [[20, 40], [160, 40], [160, 120], [20, 120]]},
        {"id": "A1", "points": [[20, 130], [160, 130], [160, 210], [20, 210]]},
        {"id": "B2", "points": [[200, 500], [340, 500], [340, 580], [200, 580]]},
    ],
}


def make_png(width: int = 363, height: int = 899, color=(255, 255, 255)) -> bytes:
    """Encode a solid-color PNG."""
    image = np.full((height, width, 3), color, np.uint8)
    _, buffer = cv2.imencode(".png", image)
    return buffer.tobytes()


class FakeGateway:
    """Stands in for GeminiGateway; records requests and returns canned text."""

    def __init__(self, raw: str = "[]", configured: bool = True, error: Exception = None):
        self.raw = raw
        self.error = error
        self.model = "fake-model"
        self._configured = configured
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def send(self, request) -> str:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.raw


@pytest.fixture
def camera_config_path(tmp_path):
    path = tmp_path / "cameras.json"
    path.write_text(json.dumps(CAMERAS))
    return path


@pytest.fixture
def store(camera_config_path):
    return CameraConfigStore(camera_config_path)


@pytest.fixture
def reference_image_path(tmp_path):
    path = tmp_path / "reference_labeled.png"
    path.write_bytes(make_png())
    return path


@pytest.fixture
def parking_map_path(tmp_path):
    path = tmp_path / "parking_map.json"
    path.write_text(json.dumps(PARKING_MAP))
    return path


@pytest.fixture
def gateway():
    return FakeGateway(raw='[{"spot_number": "A0", "status": "occupied"}]')


@pytest.fixture
def failing_gateway():
    return FakeGateway(error=InferenceError("Inference service returned HTTP 503"))
