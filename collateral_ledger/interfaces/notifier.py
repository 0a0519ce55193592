"""Notifier protocol: outbound message channel for ledger events."""
from typing import Protocol


class Notifier(Protocol):
    """Abstract interface for delivering formatted messages.

    ``send_alert`` is for operator attention (liquidations), ``send_log`` for
    routine activity. Both return whether the message was delivered.
    """

    async def send_alert(self, message: str, subject: str = "") -> bool: ...

    async def send_log(self, message: str, silent: bool = True) -> bool: ...
