"""Tests for the issue summary sentence builder."""

from __future__ import annotations

import pytest

from civicvoice.services.summary import build_summary

FULL = dict(
    severity="high",
    issue_type="Pothole",
    location="5th Ave",
    landmark="near the bakery",
    impact="Cars swerving into the bike lane",
    recurrence="recurring",
    latitude=12.97,
    longitude=77.59,
    evidence_urls=["u1", "u2"],
    contact_name="Asha",
    contact_phone="555-0100",
    contact_email="asha@example.org",
)

SENTENCES = [
    "Citizen reports a high severity Pothole at 5th Ave (landmark: near the bakery).",
    "Impact: Cars swerving into the bike lane.",
    "Recurrence: recurring.",
    "Precise map coordinates captured for field teams.",
    "Citizen attached 2 piece(s) of evidence (photos/videos).",
    "Contact: Asha, phone: 555-0100, email: asha@example.org.",
]


def test_full_summary_in_fixed_order() -> None:
    assert build_summary(**FULL) == " ".join(SENTENCES)


def test_minimal_summary_is_the_headline_only() -> None:
    out = build_summary(severity="low", issue_type="Streetlight", location="Main St")
    assert out == "Citizen reports a low severity Streetlight at Main St."


def test_same_input_same_output() -> None:
    assert build_summary(**FULL) == build_summary(**FULL)


@pytest.mark.parametrize(
    "omitted, index",
    [
        ({"impact": None}, 1),
        ({"recurrence": None}, 2),
        ({"latitude": None, "longitude": None}, 3),
        ({"evidence_urls": []}, 4),
        ({"contact_name": None, "contact_phone": None, "contact_email": None}, 5),
    ],
)
def test_omitting_a_field_drops_exactly_its_sentence(omitted, index) -> None:
    expected = " ".join(s for i, s in enumerate(SENTENCES) if i != index)
    assert build_summary(**{**FULL, **omitted}) == expected


def test_single_coordinate_does_not_claim_map_coordinates() -> None:
    out = build_summary(**{**FULL, "longitude": None})
    assert "Precise map coordinates" not in out


def test_contact_without_name_uses_placeholder() -> None:
    out = build_summary(
        severity="medium", issue_type="Leak", location="Ring Rd", contact_email="x@example.org"
    )
    assert out.endswith("Contact: N/A, email: x@example.org.")


def test_landmark_is_optional_in_headline() -> None:
    out = build_summary(**{**FULL, "landmark": None})
    assert out.startswith("Citizen reports a high severity Pothole at 5th Ave. ")
