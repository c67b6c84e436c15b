"""Canonical forms for Message-ID style identifiers."""

from __future__ import annotations

import re

_STRIP_RE = re.compile(r"[<>\s]")


def normalize_message_id(value: str | None) -> str:
    """Strip angle brackets and whitespace, then lowercase.

    `` <AbC@Example.com> `` and ``abc@example.com`` normalize identically.
    """
    if not value:
        return ""
    return _STRIP_RE.sub("", value).lower()


def message_id_candidates(value: str | None) -> set[str]:
    """Every stored form a legacy row may have used for the same id.

    Returns the raw trimmed value, the canonical form and the canonical form
    re-wrapped in angle brackets. Blank input yields an empty set.
    """
    normalized = normalize_message_id(value)
    if not normalized:
        return set()
    return {value.strip(), normalized, f"<{normalized}>"}
