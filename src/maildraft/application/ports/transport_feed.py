from __future__ import annotations
from typing import Optional, Protocol

from maildraft.domain.entities.parsed_message import FetchResult
from maildraft.domain.models import Account


class TransportFeed(Protocol):
    # Raises TransportError on connectivity/auth problems (retryable)
    async def fetch_since(
        self,
        account: Account,
        watermark: int,
        bootstrap_window: Optional[int] = None,
    ) -> FetchResult: ...
