"""Data models: all frozen (immutable)."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone

# Balances are modelled as unsigned 256-bit integers.
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class AssetInfo:
    """A tradable asset and its integer precision."""

    symbol: str
    decimals: int


@dataclass(frozen=True)
class AccountEntry:
    """Ledger balances for one account."""

    deposit_balance: int = 0
    debt_balance: int = 0

    @property
    def is_zero(self) -> bool:
        return self.deposit_balance == 0 and self.debt_balance == 0


@dataclass(frozen=True)
class PriceSnapshot:
    """One oracle reading, scaled by ``10 ** precision``."""

    price: int
    precision: int

    @property
    def scalar(self) -> int:
        return 10**self.precision


class EventKind(str, enum.Enum):
    DEPOSIT = "deposit"
    BORROW = "borrow"
    REPAY = "repay"
    WITHDRAW = "withdraw"
    LIQUIDATION = "liquidation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LedgerEvent:
    """Notification emitted after a successful ledger operation.

    ``debt`` and ``deposit`` carry the balances after the operation, except for
    liquidations where they carry the balances that were written off.
    """

    kind: EventKind
    account: str
    amount: int
    debt: int
    deposit: int
    timestamp: datetime = field(default_factory=_utcnow)
