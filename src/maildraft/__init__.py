"""Incremental mailbox sync, threading and reply drafting engine."""

__version__ = "0.1.0"
