"""In-memory asset custody: external wallets plus engine-held balances."""
from __future__ import annotations

import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class InMemoryCustody:
    """Asset transfer collaborator backed by plain integer balances.

    ``wallet(account, asset)`` is what a holder owns outside the engine;
    ``custody(asset)`` is what the engine holds. Transfers that would
    overdraw either side report ``False``.
    """

    def __init__(self) -> None:
        self._wallets: dict[tuple[str, str], int] = defaultdict(int)
        self._custody: dict[str, int] = defaultdict(int)

    def fund(self, account: str, asset: str, amount: int) -> None:
        """Credit an external wallet (faucet for simulations and tests)."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        self._wallets[(account, asset)] += amount

    def seed_custody(self, asset: str, amount: int) -> None:
        """Credit engine custody, e.g. lendable debt-asset liquidity."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        self._custody[asset] += amount

    def wallet(self, account: str, asset: str) -> int:
        return self._wallets.get((account, asset), 0)

    def custody(self, asset: str) -> int:
        return self._custody.get(asset, 0)

    async def transfer_in(self, account: str, asset: str, amount: int) -> bool:
        available = self.wallet(account, asset)
        if amount > available:
            logger.debug(
                "transfer_in refused: %s has %d %s, needs %d",
                account, available, asset, amount,
            )
            return False
        self._wallets[(account, asset)] = available - amount
        self._custody[asset] += amount
        return True

    async def transfer_out(self, account: str, asset: str, amount: int) -> bool:
        available = self.custody(asset)
        if amount > available:
            logger.debug(
                "transfer_out refused: custody has %d %s, needs %d",
                available, asset, amount,
            )
            return False
        self._custody[asset] = available - amount
        self._wallets[(account, asset)] += amount
        return True
