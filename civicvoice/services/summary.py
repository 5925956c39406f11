# civicvoice/services/summary.py
"""Human-readable synopsis of a newly filed issue.

Built once at creation from the validated intake fields and stored on the
record; never recomputed.
"""
from typing import Optional, Sequence


def build_summary(
    *,
    severity: str,
    issue_type: str,
    location: str,
    landmark: Optional[str] = None,
    impact: Optional[str] = None,
    recurrence: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    evidence_urls: Sequence[str] = (),
    contact_name: Optional[str] = None,
    contact_phone: Optional[str] = None,
    contact_email: Optional[str] = None,
) -> str:
    parts = []
    landmark_part = f" (landmark: {landmark})" if landmark else ""
    parts.append(f"Citizen reports a {severity} severity {issue_type} at {location}{landmark_part}.")

    if impact:
        parts.append(f"Impact: {impact}.")

    if recurrence:
        parts.append(f"Recurrence: {recurrence}.")

    if latitude is not None and longitude is not None:
        parts.append("Precise map coordinates captured for field teams.")

    if evidence_urls:
        parts.append(f"Citizen attached {len(evidence_urls)} piece(s) of evidence (photos/videos).")

    if contact_name or contact_phone or contact_email:
        contact = f"Contact: {contact_name or 'N/A'}"
        if contact_phone:
            contact += f", phone: {contact_phone}"
        if contact_email:
            contact += f", email: {contact_email}"
        parts.append(contact + ".")

    return " ".join(parts)
