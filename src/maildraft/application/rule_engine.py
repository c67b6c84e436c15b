"""Ignore and style rules evaluated per message sender."""

from __future__ import annotations

from typing import Sequence

from maildraft.domain.models import IgnoreDecision, RuleKind, RuleRecord
from maildraft.infrastructure.config.schema import RulesConfig


def _split_sender(sender: str) -> tuple[str, str]:
    sender = (sender or "").strip().lower()
    domain = sender.split("@", 1)[1] if "@" in sender else ""
    return sender, domain


def should_ignore(sender: str, config: RulesConfig, db_rules: Sequence[RuleRecord]) -> IgnoreDecision:
    """
    Decide whether a message from ``sender`` is dropped before threading.

    Config lists are matched exactly (sender, then domain); stored rules are
    then tried in order and match as substrings. First match wins.
    """
    sender, domain = _split_sender(sender)

    if sender in {entry.lower() for entry in config.ignore_senders}:
        return IgnoreDecision(ignore=True, reason=f"ignored sender ({sender}) from config")

    if domain and domain in {entry.lower() for entry in config.ignore_domains}:
        return IgnoreDecision(ignore=True, reason=f"ignored domain ({domain}) from config")

    for rule in db_rules:
        if not rule.enabled:
            continue
        pattern = rule.pattern.strip().lower()
        if not pattern:
            continue
        if rule.kind == RuleKind.IGNORE_SENDER and pattern in sender:
            return IgnoreDecision(ignore=True, reason=f"rule {rule.id} matched sender")
        if rule.kind == RuleKind.IGNORE_DOMAIN and pattern in domain:
            return IgnoreDecision(ignore=True, reason=f"rule {rule.id} matched domain")

    return IgnoreDecision(ignore=False)


def resolve_vibe(sender: str, config: RulesConfig, db_rules: Sequence[RuleRecord]) -> str:
    """Config styles first, then stored style rules, then the global vibe."""
    sender = (sender or "").lower()

    for style in config.styles:
        if style.match.lower() in sender:
            return style.vibe

    for rule in db_rules:
        if rule.enabled and rule.kind == RuleKind.STYLE and rule.pattern.lower() in sender:
            return rule.value

    return config.global_vibe
