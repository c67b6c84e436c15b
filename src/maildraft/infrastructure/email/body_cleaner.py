"""Strip quoted replies and trailing signatures from message bodies."""

from __future__ import annotations

import re

QUOTE_MARKERS = [
    re.compile(r"^\s*>"),
    re.compile(r"^\s*-*\s*original message\s*-*\s*$", re.IGNORECASE),
    re.compile(r"^\s*on\s+.+wrote:\s*$", re.IGNORECASE),
    re.compile(r"^\s*from:\s+", re.IGNORECASE),
    re.compile(r"^\s*sent:\s+", re.IGNORECASE),
    re.compile(r"^\s*to:\s+", re.IGNORECASE),
    re.compile(r"^\s*subject:\s+", re.IGNORECASE),
]

SIGNATURE_MARKERS = [
    re.compile(r"^\s*--\s*$"),
    re.compile(r"^\s*sent from my ", re.IGNORECASE),
    re.compile(r"^\s*best,?\s*$", re.IGNORECASE),
    re.compile(r"^\s*regards,?\s*$", re.IGNORECASE),
    re.compile(r"^\s*thanks,?\s*$", re.IGNORECASE),
    re.compile(r"^\s*cheers,?\s*$", re.IGNORECASE),
]

SIGNATURE_WINDOW = 10
FALLBACK_LINES = 12


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _strip_quoted(lines: list[str]) -> list[str]:
    out: list[str] = []
    for line in lines:
        if any(p.search(line) for p in QUOTE_MARKERS):
            break
        out.append(line)
    return out


def _strip_signature(lines: list[str]) -> list[str]:
    window_start = max(0, len(lines) - SIGNATURE_WINDOW)
    for i in range(len(lines) - 1, window_start - 1, -1):
        if any(p.search(lines[i]) for p in SIGNATURE_MARKERS):
            return lines[:i]
    return lines


def _squash_blank_lines(lines: list[str]) -> list[str]:
    out: list[str] = []
    blank_run = 0
    for line in lines:
        trimmed = line.rstrip()
        if not trimmed:
            blank_run += 1
            if blank_run > 1:
                continue
            out.append("")
            continue
        blank_run = 0
        out.append(trimmed)

    while out and out[-1] == "":
        out.pop()
    return out


def clean_body(raw_text: str | None) -> str:
    """Return the text a drafting step should read.

    Never returns an empty string when any of the first twelve lines of the
    input carry text: if the heuristics strip everything, the first lines of
    the original are returned instead.
    """
    normalized = _normalize_newlines(raw_text or "").strip()
    if not normalized:
        return ""

    lines = [line.replace("\t", "  ") for line in normalized.split("\n")]
    lines = _strip_signature(_strip_quoted(lines))
    compact = "\n".join(_squash_blank_lines(lines)).strip()
    if compact:
        return compact

    return "\n".join(_normalize_newlines(raw_text or "").split("\n")[:FALLBACK_LINES]).strip()
