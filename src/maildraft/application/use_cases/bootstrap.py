"""First-sync thread window selection."""

from __future__ import annotations

from typing import Iterable

from maildraft.domain.entities.parsed_message import ParsedMessage
from maildraft.infrastructure.email.threading import derive_thread_key


def select_latest_thread_keys(messages: Iterable[ParsedMessage], limit: int) -> set[str]:
    """Keys of the ``limit`` most recently active threads in a bootstrap pull.

    The window counts distinct threads, not messages.
    """
    messages = list(messages)
    if limit < 1 or not messages:
        return set()

    keys: set[str] = set()
    for message in sorted(messages, key=lambda m: m.sent_at, reverse=True):
        keys.add(derive_thread_key(message))
        if len(keys) >= limit:
            break
    return keys
