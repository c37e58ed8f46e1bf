import math

import pytest

from fence_quote.services.normalization import (
    LeadNormalizer,
    clean_text,
    is_valid_email,
    normalize_lead,
    to_coordinate,
    to_non_negative_int,
    to_non_negative_number,
    to_positive_number,
)


def test_clean_text():
    assert clean_text("  Jane Doe  ", 120) == "Jane Doe"
    assert clean_text("<script>alert(1)</script>", 120) == "scriptalert(1)/script"
    assert clean_text("line1\nline2\ttab\x7f", 120) == "line1 line2 tab"
    assert clean_text(None, 10) == ""
    assert clean_text(42, 10) == "42"
    assert clean_text("x" * 500, 64) == "x" * 64


def test_is_valid_email():
    assert is_valid_email("jane@example.com")
    assert is_valid_email("  jane@example.com  ")
    assert not is_valid_email("")
    assert not is_valid_email(None)
    assert not is_valid_email("jane@example")
    assert not is_valid_email("jane example@example.com")
    assert not is_valid_email("@example.com")


@pytest.mark.parametrize(
    "value, expected",
    [
        (120, 120.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        (0, 0.0),
        (-3, 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("Infinity", 0.0),
        ([1], 0.0),
    ],
)
def test_to_positive_number(value, expected):
    assert to_positive_number(value) == expected


def test_to_non_negative_number_keeps_zero():
    assert to_non_negative_number(0) == 0.0
    assert to_non_negative_number("3000") == 3000.0
    assert to_non_negative_number(-0.5) == 0.0
    assert to_non_negative_number(10 ** 400) == 0.0


def test_to_non_negative_int_floors():
    assert to_non_negative_int(2.9) == 2
    assert to_non_negative_int("3") == 3
    assert to_non_negative_int(True) == 1
    assert to_non_negative_int(-0.5) == 0
    assert to_non_negative_int("two") == 0
    assert isinstance(to_non_negative_int(4.0), int)


def test_to_coordinate_rounds_to_seven_places():
    assert to_coordinate(40.640512345678) == 40.6405123
    assert to_coordinate("-111.89031234567") == -111.8903123
    assert to_coordinate("north") == 0.0
    assert to_coordinate(float("nan")) == 0.0


def test_normalize_lead_fields():
    lead = normalize_lead(
        {
            "fullName": "  <b>Jane</b> Doe ",
            "phone": "555-0100",
            "email": " Jane@Example.COM ",
            "pushover_email": "Owner@Example.com",
            "address": "1 Main St",
            "fenceType": "vinyl",
            "walkGatesQty": "1",
            "doubleGatesQty": -2,
            "removeOldFence": 1,
            "totalLinearFeet": "120.5",
            "segmentsCount": 2,
            "estimatedMin": "3000",
            "estimatedMax": "oops",
            "created_at": "2026-10-19T10:00:00Z",
            "page_url": "https://fence.example/quote",
        }
    )
    assert lead.full_name == "bJane/b Doe"
    assert lead.email == "jane@example.com"
    assert lead.pushover_email == "owner@example.com"
    assert lead.walk_gates_qty == 1
    assert lead.double_gates_qty == 0
    assert lead.remove_old_fence is True
    assert lead.total_linear_feet == 120.5
    assert lead.estimated_min == 3000.0
    assert lead.estimated_max == 0.0
    assert lead.created_at == "2026-10-19T10:00:00Z"
    assert lead.page_url == "https://fence.example/quote"
    assert lead.website == ""


def test_normalize_lead_accepts_camel_case_provenance_keys():
    lead = normalize_lead(
        {
            "pushoverEmail": "owner@example.com",
            "createdAt": "today",
            "pageUrl": "https://fence.example",
        }
    )
    assert lead.pushover_email == "owner@example.com"
    assert lead.created_at == "today"
    assert lead.page_url == "https://fence.example"


def test_normalize_lead_empty_payload_defaults():
    lead = normalize_lead({})
    assert lead.full_name == ""
    assert lead.total_linear_feet == 0.0
    assert lead.segments == []
    assert lead.remove_old_fence is False


def test_normalize_lead_text_caps_and_brackets():
    noisy = "<>" + "a" * 1000
    lead = normalize_lead({field: noisy for field in ("fullName", "phone", "address", "page_url", "website")})
    assert len(lead.full_name) == 120
    assert len(lead.phone) == 40
    assert len(lead.address) == 220
    assert len(lead.page_url) == 300
    assert len(lead.website) == 200
    for value in (lead.full_name, lead.phone, lead.address, lead.page_url, lead.website):
        assert "<" not in value and ">" not in value


def test_normalize_segments_limits():
    normalizer = LeadNormalizer()
    point = {"lat": 40.64051234567, "lng": -111.8903}
    segments = normalizer.normalize_segments([[point] * 250] * 45)
    assert len(segments) == 40
    assert all(len(segment) == 200 for segment in segments)
    assert segments[0][0].lat == 40.6405123


def test_normalize_segments_bad_shapes():
    normalizer = LeadNormalizer()
    assert normalizer.normalize_segments("not a list") == []
    assert normalizer.normalize_segments(None) == []

    segments = normalizer.normalize_segments([{"lat": 1}, [None, {"lat": "x", "lng": 2}]])
    assert segments[0] == []
    assert (segments[1][0].lat, segments[1][0].lng) == (0.0, 0.0)
    assert (segments[1][1].lat, segments[1][1].lng) == (0.0, 2.0)
    assert not any(math.isnan(p.lat) for p in segments[1])
