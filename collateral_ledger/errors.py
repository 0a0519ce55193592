"""Ledger error taxonomy: every error rejects the whole operation."""
from __future__ import annotations


class LedgerError(Exception):
    """Base error for rejected ledger operations."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ArithmeticUnderflow(LedgerError):
    code = "ARITHMETIC_UNDERFLOW"

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Arithmetic underflow: requested {requested}, available {available}"
        )


class ArithmeticOverflow(LedgerError):
    code = "ARITHMETIC_OVERFLOW"

    def __init__(self, current: int, amount: int) -> None:
        self.current = current
        self.amount = amount
        super().__init__(
            f"Arithmetic overflow: {current} + {amount} exceeds the balance limit"
        )


class WouldBecomeUndercollateralized(LedgerError):
    code = "WOULD_BECOME_UNDERCOLLATERALIZED"

    def __init__(self, debt: int, deposit: int) -> None:
        self.debt = debt
        self.deposit = deposit
        super().__init__(
            f"Debt {debt} would not be supported by deposit {deposit}"
        )


class NotUndercollateralized(LedgerError):
    code = "NOT_UNDERCOLLATERALIZED"

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"Account {account} is not undercollateralized")


class Unauthorized(LedgerError):
    code = "UNAUTHORIZED"

    def __init__(self, caller: str) -> None:
        self.caller = caller
        super().__init__(f"Caller {caller} is not an authorized operator")


class TransferFailed(LedgerError):
    code = "TRANSFER_FAILED"

    def __init__(self, direction: str, asset: str, amount: int) -> None:
        self.direction = direction
        self.asset = asset
        self.amount = amount
        super().__init__(f"Transfer {direction} of {amount} {asset} failed")


class OracleUnavailable(LedgerError):
    """Price could not be read, or the reading cannot be trusted."""

    code = "ORACLE_UNAVAILABLE"


class InvalidAmount(LedgerError, ValueError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: object) -> None:
        self.amount = amount
        super().__init__(f"Amount must be a non-negative integer, got {amount!r}")
