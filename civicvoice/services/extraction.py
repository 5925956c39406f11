# File: civicvoice/services/extraction.py
# Project: civicvoice-backend
"""Free-text intake: turn a citizen's description into a candidate issue.

The candidate is never trusted; IssueService validates it exactly like a form
submission.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Protocol

from civicvoice.core.errors import ValidationError

log = logging.getLogger(__name__)

CANDIDATE_KEYS = (
    "issueType",
    "location",
    "landmark",
    "severity",
    "description",
    "impact",
    "recurrence",
    "contactName",
    "contactPhone",
    "contactEmail",
    "preferredContactMethod",
)

SYSTEM_PROMPT = (
    "You turn a citizen's description of a civic problem into a JSON object. "
    "Use only these keys: " + ", ".join(CANDIDATE_KEYS) + ". "
    "severity is one of low, medium, high, critical. "
    "recurrence is one of new, recurring, ongoing. "
    "preferredContactMethod is one of phone, email, none. "
    "Leave out any key the text does not support; never invent contact details. "
    "Reply with the JSON object only."
)


class TextExtractor(Protocol):
    def extract(self, text: str) -> Dict[str, Any]:
        ...


class OpenAIIssueExtractor:
    def __init__(self, client, model: str, temperature: float = 0.0):
        self.client = client
        self.model = model
        self.temperature = temperature

    def extract(self, text: str) -> Dict[str, Any]:
        resp = self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
        )
        content = resp.choices[0].message.content or ""
        try:
            raw = json.loads(content)
        except json.JSONDecodeError:
            log.warning("extractor returned non-JSON content (%d chars)", len(content))
            raise ValidationError("Could not understand the issue description", field="text")
        if not isinstance(raw, dict):
            raise ValidationError("Could not understand the issue description", field="text")

        candidate = {k: raw[k] for k in CANDIDATE_KEYS if raw.get(k) not in (None, "")}
        for k, v in candidate.items():
            if not isinstance(v, str):
                candidate[k] = str(v)
        # the citizen's own words are the description of record when the model drops it
        candidate.setdefault("description", text)
        log.info("extracted candidate issue with keys %s", sorted(candidate))
        return candidate
