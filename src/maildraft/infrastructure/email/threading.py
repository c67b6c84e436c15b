"""Thread key derivation for parsed messages."""

from __future__ import annotations

import hashlib
import re

from maildraft.domain.entities.parsed_message import ParsedMessage
from maildraft.infrastructure.email.message_id import normalize_message_id

_PREFIX_RE = re.compile(r"^(?:\s*(?:re|fwd|fw)\s*:\s*)+", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")


def normalize_subject(subject: str) -> str:
    """Lowercase, drop any run of leading re:/fw:/fwd: tokens, collapse whitespace."""
    stripped = _PREFIX_RE.sub("", (subject or "").strip())
    return _SPACE_RE.sub(" ", stripped).strip().lower()


def derive_thread_key(message: ParsedMessage) -> str:
    """Stable grouping key for a message.

    Priority: root of the References chain, then In-Reply-To, then a SHA-1 of
    the normalized subject plus sender address.
    """
    if message.references:
        root = normalize_message_id(message.references[0])
        if root:
            return f"ref:{root}"

    reply_to = normalize_message_id(message.in_reply_to)
    if reply_to:
        return f"reply:{reply_to}"

    basis = f"{normalize_subject(message.subject)}:{message.sender.address.strip().lower()}"
    digest = hashlib.sha1(basis.encode("utf-8")).hexdigest()
    return f"subj:{digest}"


def reference_candidates(message: ParsedMessage) -> list[str]:
    """References followed by In-Reply-To, in header order."""
    refs = [r for r in message.references if r and r.strip()]
    if message.in_reply_to and message.in_reply_to.strip():
        refs.append(message.in_reply_to)
    return refs


def has_body_content(text: str) -> bool:
    return bool(_SPACE_RE.sub("", text or ""))


def snippet(text: str, max_chars: int = 280) -> str:
    """Single-line preview, truncated with an ellipsis."""
    compact = _SPACE_RE.sub(" ", text or "").strip()
    if len(compact) <= max_chars:
        return compact
    return f"{compact[: max_chars - 3]}..."
