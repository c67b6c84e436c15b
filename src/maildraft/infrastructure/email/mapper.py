from __future__ import annotations
import json
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses, parseaddr
from datetime import datetime, timezone

from maildraft.domain.entities.parsed_message import ParsedAddress, ParsedMessage

KEPT_HEADERS = ("Message-Id", "In-Reply-To", "References", "Subject", "From", "To", "Cc", "Date")


def _part_text(part: EmailMessage) -> str | None:
    try:
        return part.get_content()
    except (KeyError, LookupError):
        return None


def _as_text(msg: EmailMessage) -> str:
    # Prefer text/plain; fall back to raw HTML. Undecodable parts are skipped
    if msg.is_multipart():
        for p in msg.walk():
            if p.get_content_type() == "text/plain":
                text = _part_text(p)
                if text is not None:
                    return text.strip()
        for p in msg.walk():
            if p.get_content_type() == "text/html":
                text = _part_text(p)
                if text is not None:
                    return text
        return ""
    return (_part_text(msg) or "").strip()


def _address(value: str | None) -> ParsedAddress:
    name, addr = parseaddr(value or "")
    return ParsedAddress(address=addr.strip().lower(), name=name.strip())


def _addresses(values: list[str]) -> list[ParsedAddress]:
    return [
        ParsedAddress(address=addr.strip().lower(), name=name.strip())
        for name, addr in getaddresses(values)
        if addr
    ]


def _sent_at_ms(em: EmailMessage) -> int:
    # Date parsing can be messy; default to now if absent/unparseable
    dt = em.get("Date")
    try:
        date = dt.datetime if dt else None
    except Exception:
        date = None
    if date is None:
        date = datetime.now(timezone.utc)
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return int(date.timestamp() * 1000)


def rfc822_to_parsed_message(sequence: int, rfc822_bytes: bytes) -> ParsedMessage:
    """Decode raw RFC 822 bytes fetched at ``sequence`` into a ParsedMessage."""
    em = BytesParser(policy=policy.default).parsebytes(rfc822_bytes)

    message_id = (em.get("Message-Id") or "").strip()
    if not message_id:
        message_id = f"<maildraft-fallback-{sequence}@local>"

    in_reply_to = (em.get("In-Reply-To") or "").strip() or None
    references = (em.get("References") or "").split()

    headers = {name: str(em.get(name)) for name in KEPT_HEADERS if em.get(name) is not None}

    return ParsedMessage(
        sequence=sequence,
        message_id=message_id,
        in_reply_to=in_reply_to,
        references=references,
        subject=(em.get("Subject") or "").strip(),
        sender=_address(em.get("From")),
        to=_addresses([str(x) for x in (em.get_all("To") or [])]),
        cc=_addresses([str(x) for x in (em.get_all("Cc") or [])]),
        sent_at=_sent_at_ms(em),
        text=_as_text(em),
        headers=json.dumps(headers),
    )
