"""Tests for model output sanitization."""

import json

import pytest

from gaia_parking.detection.models import DetectionResult, SpotStatus
from gaia_parking.detection.sanitizer import parse_elements, sanitize


def pairs(results: list[DetectionResult]) -> list[tuple[str, str]]:
    return [(r.spot_number, r.status.value) for r in results]


def test_drops_spot_outside_allow_list():
    raw = json.dumps(
        [
            {"spot_number": "A0", "status": "OCCUPIED"},
            {"spot_number": "C9", "status": "VACANT"},
        ]
    )

    assert pairs(sanitize(raw, {"A0", "A1"})) == [("A0", "OCCUPIED")]


def test_preserves_model_order():
    raw = '[{"spot_number":"B2","status":"VACANT"},{"spot_number":"A0","status":"OCCUPIED"}]'

    assert pairs(sanitize(raw, {"A0", "B2"})) == [("B2", "VACANT"), ("A0", "OCCUPIED")]


@pytest.mark.parametrize("status", ["vacant", "Vacant", " VACANT ", "\tvacant\n"])
def test_status_is_trimmed_and_upper_cased(status):
    raw = json.dumps([{"spot_number": "A0", "status": status}])

    result = sanitize(raw, {"A0"})

    assert result == [DetectionResult(spot_number="A0", status=SpotStatus.VACANT)]


def test_spot_number_is_trimmed_but_case_sensitive():
    raw = json.dumps(
        [
            {"spot_number": "  A0 ", "status": "UNKNOWN"},
            {"spot_number": "a0", "status": "UNKNOWN"},
        ]
    )

    assert pairs(sanitize(raw, {"A0"})) == [("A0", "UNKNOWN")]


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "",
        "```json\n[]\n```",
        '[{"spot_number": "A0"',
        "[" * 100000,
    ],
)
def test_unparseable_text_yields_empty(raw):
    assert sanitize(raw, {"A0"}) == []


@pytest.mark.parametrize(
    "raw",
    [
        '{"spot_number": "A0", "status": "OCCUPIED"}',
        '"A0"',
        "42",
        "null",
        "true",
    ],
)
def test_non_array_top_level_yields_empty(raw):
    assert sanitize(raw, {"A0"}) == []


def test_empty_array_yields_empty():
    assert sanitize("[]", {"A0"}) == []


def test_primitives_dropped_objects_still_evaluated():
    raw = json.dumps(
        [
            "A0",
            1,
            None,
            ["A0", "OCCUPIED"],
            {"spot_number": "A1", "status": "occupied"},
        ]
    )

    assert pairs(sanitize(raw, {"A0", "A1"})) == [("A1", "OCCUPIED")]


def test_wrong_typed_fields_are_dropped_without_error():
    raw = json.dumps(
        [
            {"spot_number": 0, "status": "OCCUPIED"},
            {"spot_number": "A0", "status": 1},
            {"spot_number": None, "status": None},
            {"spot_number": "A0"},
            {"status": "VACANT"},
            {},
            {"spot_number": "A0", "status": "VACANT", "confidence": 0.9},
        ]
    )

    assert pairs(sanitize(raw, {"A0", "0"})) == [("A0", "VACANT")]


def test_unknown_status_values_dropped():
    raw = json.dumps(
        [
            {"spot_number": "A0", "status": "FREE"},
            {"spot_number": "A0", "status": "AVAILABLE"},
            {"spot_number": "A0", "status": ""},
        ]
    )

    assert sanitize(raw, {"A0"}) == []


def test_repeated_spots_are_kept():
    raw = json.dumps(
        [
            {"spot_number": "A0", "status": "VACANT"},
            {"spot_number": "A0", "status": "OCCUPIED"},
        ]
    )

    assert pairs(sanitize(raw, {"A0"})) == [("A0", "VACANT"), ("A0", "OCCUPIED")]


def test_every_survivor_satisfies_both_predicates():
    allowed = {"A0", "A1", "B2"}
    raw = json.dumps(
        [
            {"spot_number": s, "status": st}
            for s in ["A0", "A1", "B2", "C9", "", " B2", "b2"]
            for st in ["OCCUPIED", "vacant", "Unknown", "parked", "", "OCCUPIED!"]
        ]
    )

    results = sanitize(raw, allowed)

    assert results
    for r in results:
        assert r.spot_number in allowed
        assert r.status in set(SpotStatus)


def test_accepts_any_collection_as_allow_list():
    raw = json.dumps([{"spot_number": "A1", "status": "VACANT"}])

    assert pairs(sanitize(raw, ("A0", "A1"))) == [("A1", "VACANT")]


def test_parse_elements():
    assert parse_elements("[1, {}]") == [1, {}]
    assert parse_elements("{}") == []
    assert parse_elements("nope") == []
