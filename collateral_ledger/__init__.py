"""Single-pair collateralized lending ledger."""
from .engine import LendingEngine
from .errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    InvalidAmount,
    LedgerError,
    NotUndercollateralized,
    OracleUnavailable,
    TransferFailed,
    Unauthorized,
    WouldBecomeUndercollateralized,
)
from .models import AccountEntry, AssetInfo, EventKind, LedgerEvent, PriceSnapshot
from .scaling import scale

__all__ = [
    "AccountEntry",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "AssetInfo",
    "EventKind",
    "InvalidAmount",
    "LedgerError",
    "LedgerEvent",
    "LendingEngine",
    "NotUndercollateralized",
    "OracleUnavailable",
    "PriceSnapshot",
    "TransferFailed",
    "Unauthorized",
    "WouldBecomeUndercollateralized",
    "scale",
]
