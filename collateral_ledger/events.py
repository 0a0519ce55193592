"""Event sinks: where successful ledger operations are reported."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .interfaces.event_sink import EventSink
from .interfaces.notifier import Notifier
from .models import AssetInfo, EventKind, LedgerEvent

logger = logging.getLogger(__name__)


class InMemoryEventLog:
    """Append-only in-memory event history."""

    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        return tuple(self._events)

    def of_kind(self, kind: EventKind) -> list[LedgerEvent]:
        return [e for e in self._events if e.kind is kind]

    async def publish(self, event: LedgerEvent) -> None:
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)


class LoggingEventSink:
    """Emit one structured log record per event."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger("collateral_ledger.events")

    async def publish(self, event: LedgerEvent) -> None:
        level = logging.WARNING if event.kind is EventKind.LIQUIDATION else logging.INFO
        self._log.log(
            level,
            "%s account=%s amount=%d debt=%d deposit=%d",
            event.kind.value,
            event.account,
            event.amount,
            event.debt,
            event.deposit,
            extra={"ledger_event": event},
        )


class CompositeEventSink:
    """Fan an event out to several sinks, isolating their failures."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self._sinks: list[EventSink] = list(sinks)

    async def publish(self, event: LedgerEvent) -> None:
        for sink in self._sinks:
            try:
                await sink.publish(event)
            except Exception as e:
                logger.error("Event sink %s failed: %s", type(sink).__name__, e)


def format_units(amount: int, decimals: int) -> str:
    """Render a raw integer amount in whole units, e.g. 1500000 @6 → '1.5'."""
    whole, frac = divmod(amount, 10**decimals)
    frac_digits = str(frac).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{whole}.{frac_digits}" if frac_digits else str(whole)


class NotifierEventSink:
    """Format events as messages and dispatch them to notifiers.

    Liquidations go out as alerts; everything else as silent log messages.
    """

    def __init__(
        self,
        notifiers: Sequence[Notifier],
        collateral: AssetInfo,
        debt: AssetInfo,
    ) -> None:
        self._notifiers = list(notifiers)
        self._collateral = collateral
        self._debt = debt

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _format_account(account: str) -> str:
        if len(account) > 16:
            return f"{account[:10]}...{account[-6:]}"
        return account

    def _collateral_str(self, amount: int) -> str:
        amount_str = format_units(amount, self._collateral.decimals)
        return f"{amount_str} {self._collateral.symbol}"

    def _debt_str(self, amount: int) -> str:
        return f"{format_units(amount, self._debt.decimals)} {self._debt.symbol}"

    def _build_log_message(self, event: LedgerEvent) -> str:
        if event.kind in (EventKind.DEPOSIT, EventKind.WITHDRAW):
            moved = self._collateral_str(event.amount)
        else:
            moved = self._debt_str(event.amount)
        return (
            f"📒 {event.kind.value.upper()} · {self._format_account(event.account)}\n"
            f"\n"
            f"Amount: {moved}\n"
            f"Deposit: {self._collateral_str(event.deposit)}\n"
            f"Debt: {self._debt_str(event.debt)}\n"
            f"\n"
            f"{event.timestamp:%Y-%m-%d %H:%M:%S} UTC"
        )

    def _build_liquidation_alert(self, event: LedgerEvent) -> str:
        return (
            f"🚨 LIQUIDATION · {self._format_account(event.account)}\n"
            f"\n"
            f"Written off:\n"
            f"  Deposit: {self._collateral_str(event.deposit)}\n"
            f"  Debt: {self._debt_str(event.debt)}\n"
            f"\n"
            f"Account: {event.account}\n"
            f"{event.timestamp:%Y-%m-%d %H:%M:%S} UTC"
        )

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def publish(self, event: LedgerEvent) -> None:
        if event.kind is EventKind.LIQUIDATION:
            message = self._build_liquidation_alert(event)
            for notifier in self._notifiers:
                try:
                    await notifier.send_alert(message, subject="🚨 Account liquidated")
                except Exception as e:
                    logger.error("Notifier send_alert failed: %s", e)
            return

        message = self._build_log_message(event)
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=True)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)
