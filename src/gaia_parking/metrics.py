"""Prometheus metrics for occupancy detection."""

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# Detection requests by camera and outcome
DETECTION_REQUESTS = Counter(
    "gaia_detection_requests_total",
    "Detection requests handled, by outcome",
    ["camera", "outcome"],
    registry=REGISTRY,
)

# Inference latency histogram (in seconds)
INFERENCE_LATENCY = Histogram(
    "gaia_inference_latency_seconds",
    "Time spent waiting on the inference service",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
    registry=REGISTRY,
)

# Sanitized spot reports by status
SPOTS_REPORTED = Counter(
    "gaia_spots_reported_total",
    "Spot reports that survived sanitization",
    ["camera", "status"],
    registry=REGISTRY,
)

# Model output elements rejected by the sanitizer
ELEMENTS_DROPPED = Counter(
    "gaia_model_elements_dropped_total",
    "Model output elements dropped by the sanitizer",
    ["camera"],
    registry=REGISTRY,
)


def record_detection(camera: str, outcome: str) -> None:
    """Record the outcome of a detection request."""
    DETECTION_REQUESTS.labels(camera=camera, outcome=outcome).inc()


def record_inference_latency(latency_seconds: float) -> None:
    """Record inference call latency."""
    INFERENCE_LATENCY.observe(latency_seconds)


def record_spot_report(camera: str, status: str) -> None:
    """Record one sanitized spot report."""
    SPOTS_REPORTED.labels(camera=camera, status=status).inc()


def record_dropped_elements(camera: str, count: int) -> None:
    """Record model output elements the sanitizer discarded."""
    if count > 0:
        ELEMENTS_DROPPED.labels(camera=camera).inc(count)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
