"""Sanitization of free-form inference output."""

import json
from collections.abc import Collection

from .models import DetectionResult, SpotStatus

ALLOWED_STATUS = frozenset(s.value for s in SpotStatus)


def parse_elements(raw_text: str) -> list:
    """
    Parse raw model output into a list of candidate elements.

    Returns an empty list when the text is not JSON or its top-level value
    is not an array. Never raises.
    """
    try:
        parsed = json.loads(raw_text)
    except (TypeError, ValueError, RecursionError):
        return []

    if not isinstance(parsed, list):
        return []
    return parsed


def _text_field(element: dict, name: str) -> str:
    value = element.get(name)
    return value if isinstance(value, str) else ""


def sanitize(raw_text: str, allowed_spots: Collection[str]) -> list[DetectionResult]:
    """
    Reduce untrusted model output to allow-listed spot reports.

    Elements that are not objects, name a spot outside ``allowed_spots``
    (exact, case-sensitive match after trimming) or carry a status outside
    OCCUPIED/VACANT/UNKNOWN (after trimming and upper-casing) are dropped
    silently. Surviving elements keep their original order; repeated spot
    numbers are not collapsed.

    Args:
        raw_text: Text returned by the inference service
        allowed_spots: Spot identifiers the camera may report

    Returns:
        List of DetectionResult, possibly empty
    """
    results = []

    for element in parse_elements(raw_text):
        if not isinstance(element, dict):
            continue

        spot_number = _text_field(element, "spot_number").strip()
        status = _text_field(element, "status").strip().upper()

        if spot_number in allowed_spots and status in ALLOWED_STATUS:
            results.append(
                DetectionResult(spot_number=spot_number, status=SpotStatus(status))
            )

    return results
