"""Tests for the detection pipeline."""

import asyncio
import threading

import pytest
from conftest import FakeGateway

from gaia_parking.cameras import CameraConfigStore
from gaia_parking.detection.models import SpotStatus
from gaia_parking.detection.pipeline import DetectionPipeline
from gaia_parking.errors import (
    InferenceError,
    MissingCredentialError,
    ReferenceImageError,
    UnknownCameraError,
)


def run(pipeline, camera="north_gate", image=b"frame", mime="image/jpeg"):
    return asyncio.run(pipeline.detect(camera, image, mime))


def test_detect_returns_sanitized_spots(store, reference_image_path):
    gateway = FakeGateway(
        raw='[{"spot_number":"A0","status":"occupied"},{"spot_number":"C9","status":"VACANT"}]'
    )
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    response = run(pipeline)

    assert response.camera_id == "CAM-01"
    assert [(s.spot_number, s.status) for s in response.spots] == [("A0", SpotStatus.OCCUPIED)]
    assert response.raw == gateway.raw


def test_request_carries_reference_and_frame(store, reference_image_path):
    gateway = FakeGateway()
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    run(pipeline, image=b"frame-bytes", mime="image/webp")

    request = gateway.calls[0]
    assert "Allowed spots (strict): A0, A1" in request.prompt
    assert request.images[0].data == reference_image_path.read_bytes()
    assert request.images[0].mime_type == "image/png"
    assert request.images[1].data == b"frame-bytes"
    assert request.images[1].mime_type == "image/webp"


@pytest.mark.parametrize("mime", [None, ""])
def test_frame_mime_defaults_to_jpeg(store, reference_image_path, mime):
    gateway = FakeGateway()
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    run(pipeline, mime=mime)

    assert gateway.calls[0].images[1].mime_type == "image/jpeg"


def test_allow_list_is_per_camera(store, reference_image_path):
    gateway = FakeGateway(
        raw='[{"spot_number":"B2","status":"VACANT"},{"spot_number":"A1","status":"VACANT"}]'
    )
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    response = run(pipeline, camera="east_wall")

    assert response.camera_id == "CAM-02"
    assert [s.spot_number for s in response.spots] == ["B2"]


def test_malformed_output_is_not_an_error(store, reference_image_path):
    gateway = FakeGateway(raw="not json")
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    response = run(pipeline)

    assert response.spots == []
    assert response.raw == "not json"


def test_empty_array_is_success(store, reference_image_path):
    pipeline = DetectionPipeline(store, FakeGateway(raw="[]"), reference_image_path)

    response = run(pipeline)

    assert response.spots == []
    assert response.raw == "[]"


def test_missing_credential_checked_first(tmp_path, reference_image_path):
    # The store points at a missing file, so touching it would raise a different error
    store = CameraConfigStore(tmp_path / "missing.json")
    gateway = FakeGateway(configured=False)
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    with pytest.raises(MissingCredentialError):
        run(pipeline)
    assert gateway.calls == []
    assert not store.is_loaded


def test_unknown_camera_rejected_before_inference(store, reference_image_path):
    gateway = FakeGateway()
    pipeline = DetectionPipeline(store, gateway, reference_image_path)

    with pytest.raises(UnknownCameraError) as exc_info:
        run(pipeline, camera="south_lot")

    assert exc_info.value.camera_key == "south_lot"
    assert gateway.calls == []


def test_missing_reference_image(store, tmp_path):
    gateway = FakeGateway()
    pipeline = DetectionPipeline(store, gateway, tmp_path / "missing.png")

    with pytest.raises(ReferenceImageError):
        run(pipeline)
    assert gateway.calls == []


def test_inference_failure_propagates(store, reference_image_path, failing_gateway):
    pipeline = DetectionPipeline(store, failing_gateway, reference_image_path)

    with pytest.raises(InferenceError):
        run(pipeline)
    assert len(failing_gateway.calls) == 1


def test_file_reads_run_off_the_event_loop(store, reference_image_path, monkeypatch):
    read_threads = []
    original = store._read

    def recording_read():
        read_threads.append(threading.get_ident())
        return original()

    monkeypatch.setattr(store, "_read", recording_read)
    pipeline = DetectionPipeline(store, FakeGateway(), reference_image_path)

    async def detect_and_report_loop_thread():
        await pipeline.detect("north_gate", b"frame", "image/jpeg")
        return threading.get_ident()

    loop_thread = asyncio.run(detect_and_report_loop_thread())

    assert len(read_threads) == 1
    assert read_threads[0] != loop_thread
