"""Lending engine: collateral-gated ledger operations and liquidation."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

from .calculator import CollateralCalculator
from .config import EngineConfig
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
from .interfaces.access_control import AccessControl
from .interfaces.asset_transfer import AssetTransfer
from .interfaces.event_sink import EventSink
from .interfaces.price_oracle import PriceOracle
from .ledger import Ledger
from .models import MAX_UINT256, AccountEntry, EventKind, LedgerEvent

logger = logging.getLogger(__name__)


def _require_amount(amount: object) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(amount)
    return amount


class LendingEngine:
    """Single-pair collateralized lending ledger.

    Operations on one account are serialized by a per-account lock held for
    the whole operation, including the external transfer. Every check runs
    before the ledger changes, and each operation reads the oracle at most
    once.

    Outgoing transfers (borrow, withdraw) write the new entry tentatively,
    request the transfer and restore the previous entry if it fails. Incoming
    transfers (deposit, repay) only touch the ledger after the transfer
    succeeds.
    """

    def __init__(
        self,
        config: EngineConfig,
        oracle: PriceOracle,
        transfers: AssetTransfer,
        access: AccessControl,
        events: EventSink | None = None,
        ledger: Ledger | None = None,
    ) -> None:
        self._config = config
        self._collateral = config.collateral
        self._debt = config.debt
        self._oracle = oracle
        self._transfers = transfers
        self._access = access
        self._events = events
        self._ledger = ledger if ledger is not None else Ledger()
        self._locks: dict[str, asyncio.Lock] = {}
        # Holders plus waiters per lock; a lock with none left is dropped.
        self._lock_users: dict[str, int] = {}
        # Committed entries of accounts whose outgoing transfer is in flight.
        self._inflight: dict[str, AccountEntry] = {}

    @property
    def config(self) -> EngineConfig:
        return self._config

    # ------------------------------------------------------------------
    # Collaborator helpers
    # ------------------------------------------------------------------

    async def _calculator(self) -> CollateralCalculator:
        """Read the oracle once and bind a calculator to that snapshot."""
        try:
            snapshot = await asyncio.wait_for(
                self._oracle.latest_price(), timeout=self._config.oracle_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise OracleUnavailable(
                f"Oracle did not answer within {self._config.oracle_timeout_seconds}s"
            ) from e
        except LedgerError:
            raise
        except Exception as e:
            raise OracleUnavailable(f"Oracle read failed: {e}") from e

        if snapshot.precision != self._config.price_precision:
            raise OracleUnavailable(
                f"Oracle precision {snapshot.precision} does not match "
                f"configured {self._config.price_precision}"
            )
        return CollateralCalculator(self._collateral, self._debt, snapshot)

    async def _transfer(
        self, direction: str, account: str, asset: str, amount: int
    ) -> None:
        call = (
            self._transfers.transfer_in
            if direction == "in"
            else self._transfers.transfer_out
        )
        try:
            ok = await call(account, asset, amount)
        except Exception as e:
            raise TransferFailed(direction, asset, amount) from e
        if not ok:
            raise TransferFailed(direction, asset, amount)

    async def _publish(
        self, kind: EventKind, account: str, amount: int, entry: AccountEntry
    ) -> LedgerEvent:
        event = LedgerEvent(
            kind=kind,
            account=account,
            amount=amount,
            debt=entry.debt_balance,
            deposit=entry.deposit_balance,
        )
        if self._events is not None:
            # The operation is already committed; a sink failure must not undo it.
            try:
                await self._events.publish(event)
            except Exception as e:
                logger.error("Event publish failed for %s %s: %s", kind.value, account, e)
        return event

    @asynccontextmanager
    async def _account_lock(self, account: str) -> AsyncIterator[None]:
        """Per-account lock, created on first use and dropped once idle."""
        lock = self._locks.get(account)
        if lock is None:
            lock = self._locks[account] = asyncio.Lock()
        self._lock_users[account] = self._lock_users.get(account, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[account] -= 1
            if not self._lock_users[account]:
                del self._lock_users[account]
                del self._locks[account]

    @asynccontextmanager
    async def _locked(self, operation: str, account: str) -> AsyncIterator[AccountEntry]:
        """Hold the account lock, yielding its committed entry."""
        async with self._account_lock(account):
            try:
                yield self._ledger.get(account)
            except LedgerError as e:
                logger.warning("%s rejected for %s: %s (%s)", operation, account, e.code, e)
                raise

    async def _commit_outgoing(
        self,
        account: str,
        previous: AccountEntry,
        updated: AccountEntry,
        asset: str,
        amount: int,
    ) -> None:
        """Write ``updated`` tentatively, transfer out, restore on any failure."""
        self._inflight[account] = previous
        self._ledger.put(account, updated)
        try:
            await self._transfer("out", account, asset, amount)
        except BaseException:
            self._ledger.put(account, previous)
            raise
        finally:
            del self._inflight[account]

    # ------------------------------------------------------------------
    # Transaction operations
    # ------------------------------------------------------------------

    async def deposit(self, account: str, amount: int) -> LedgerEvent:
        """Move ``amount`` of collateral into custody and credit the account."""
        async with self._locked("deposit", account) as entry:
            amount = _require_amount(amount)
            new_deposit = entry.deposit_balance + amount
            if new_deposit > MAX_UINT256:
                raise ArithmeticOverflow(entry.deposit_balance, amount)

            await self._transfer("in", account, self._collateral.symbol, amount)
            updated = replace(entry, deposit_balance=new_deposit)
            self._ledger.put(account, updated)

            logger.info("deposit %s: +%d -> %d", account, amount, new_deposit)
            return await self._publish(EventKind.DEPOSIT, account, amount, updated)

    async def borrow(self, account: str, amount: int) -> LedgerEvent:
        """Draw ``amount`` of debt asset against the account's deposit."""
        async with self._locked("borrow", account) as entry:
            amount = _require_amount(amount)
            new_debt = entry.debt_balance + amount
            if new_debt > MAX_UINT256:
                raise ArithmeticOverflow(entry.debt_balance, amount)

            calc = await self._calculator()
            if not calc.is_collateralized(new_debt, entry.deposit_balance):
                raise WouldBecomeUndercollateralized(new_debt, entry.deposit_balance)

            updated = replace(entry, debt_balance=new_debt)
            await self._commit_outgoing(account, entry, updated, self._debt.symbol, amount)

            logger.info("borrow %s: +%d -> debt %d", account, amount, new_debt)
            return await self._publish(EventKind.BORROW, account, amount, updated)

    async def repay(self, account: str, amount: int) -> LedgerEvent:
        """Return ``amount`` of debt asset and reduce the account's debt."""
        async with self._locked("repay", account) as entry:
            amount = _require_amount(amount)
            if amount > entry.debt_balance:
                raise ArithmeticUnderflow(amount, entry.debt_balance)

            await self._transfer("in", account, self._debt.symbol, amount)
            updated = replace(entry, debt_balance=entry.debt_balance - amount)
            self._ledger.put(account, updated)

            logger.info("repay %s: -%d -> debt %d", account, amount, updated.debt_balance)
            return await self._publish(EventKind.REPAY, account, amount, updated)

    async def withdraw(self, account: str, amount: int) -> LedgerEvent:
        """Release ``amount`` of collateral if the remaining deposit supports the debt."""
        async with self._locked("withdraw", account) as entry:
            amount = _require_amount(amount)
            if amount > entry.deposit_balance:
                raise ArithmeticUnderflow(amount, entry.deposit_balance)

            new_deposit = entry.deposit_balance - amount
            calc = await self._calculator()
            if not calc.is_collateralized(entry.debt_balance, new_deposit):
                raise WouldBecomeUndercollateralized(entry.debt_balance, new_deposit)

            updated = replace(entry, deposit_balance=new_deposit)
            await self._commit_outgoing(
                account, entry, updated, self._collateral.symbol, amount
            )

            logger.info("withdraw %s: -%d -> %d", account, amount, new_deposit)
            return await self._publish(EventKind.WITHDRAW, account, amount, updated)

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    async def liquidate(self, caller: str, account: str) -> LedgerEvent:
        """Write off an undercollateralized account.

        Both balances are reset to zero. No asset moves: the collateral stays
        in custody and the debt is written off. The returned event carries
        the balances that were cleared.
        """
        async with self._locked("liquidate", account) as entry:
            if not self._access.is_authorized_operator(caller):
                raise Unauthorized(caller)

            calc = await self._calculator()
            if calc.is_collateralized(entry.debt_balance, entry.deposit_balance):
                raise NotUndercollateralized(account)

            self._ledger.reset(account)

            logger.warning(
                "liquidated %s by %s: debt %d, deposit %d written off",
                account, caller, entry.debt_balance, entry.deposit_balance,
            )
            return await self._publish(EventKind.LIQUIDATION, account, 0, entry)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def account(self, account: str) -> AccountEntry:
        async with self._account_lock(account):
            return self._ledger.get(account)

    async def minimum_collateral(self, account: str) -> int:
        """Smallest deposit that keeps the account's debt supported right now."""
        async with self._account_lock(account):
            entry = self._ledger.get(account)
            calc = await self._calculator()
            return calc.debt_to_collateral(entry.debt_balance)

    async def withdrawable(self, account: str) -> int:
        """Largest collateral withdrawal that would currently succeed."""
        async with self._account_lock(account):
            entry = self._ledger.get(account)
            calc = await self._calculator()
            return calc.max_withdrawable(entry.deposit_balance, entry.debt_balance)

    async def borrowable(self, account: str) -> int:
        """Largest additional borrow that would currently succeed."""
        async with self._account_lock(account):
            entry = self._ledger.get(account)
            calc = await self._calculator()
            return calc.max_borrowable(entry.deposit_balance, entry.debt_balance)

    async def is_healthy(self, account: str) -> bool:
        async with self._account_lock(account):
            entry = self._ledger.get(account)
            calc = await self._calculator()
            return calc.is_collateralized(entry.debt_balance, entry.deposit_balance)

    def accounts(self) -> dict[str, AccountEntry]:
        """Committed non-zero entries, excluding tentative in-flight writes."""
        view = self._ledger.snapshot()
        for account, committed in self._inflight.items():
            if committed.is_zero:
                view.pop(account, None)
            else:
                view[account] = committed
        return view
