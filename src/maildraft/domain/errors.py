"""Error taxonomy for the sync engine."""

from __future__ import annotations


class MailDraftError(Exception):
    """Base class for errors raised by maildraft."""


class ConfigurationError(MailDraftError):
    """Invalid or missing configuration. Fatal to the invocation, never retried."""


class TransientError(MailDraftError):
    """Connectivity-style failure that is worth retrying with backoff."""


class TransportError(TransientError):
    """The mailbox transport could not fetch messages."""


class DraftProducerError(TransientError):
    """The draft producer failed to generate a reply."""


class ThreadNotFoundError(MailDraftError):
    """A thread action named a thread that is not stored, or has no messages."""
