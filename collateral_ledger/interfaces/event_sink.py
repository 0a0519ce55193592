"""Event sink protocol: append-only ledger notifications."""
from typing import Protocol

from ..models import LedgerEvent


class EventSink(Protocol):
    """Abstract interface for receiving events of successful operations."""

    async def publish(self, event: LedgerEvent) -> None: ...
