"""Collateralization math over a single price snapshot: no I/O."""
from __future__ import annotations

from .errors import OracleUnavailable
from .models import AssetInfo, PriceSnapshot
from .scaling import scale


class CollateralCalculator:
    """Convert between collateral and debt amounts at one fixed price.

    A calculator is built per logical operation from the snapshot read at the
    start of that operation, so every check inside the operation sees the
    same price.

    Conversions:
        collateral_to_debt(c) = scale(c * scalar / price, debt, collateral)
        debt_to_collateral(d) = scale(d * price / scalar, collateral, debt)
    """

    def __init__(
        self, collateral: AssetInfo, debt: AssetInfo, snapshot: PriceSnapshot
    ) -> None:
        if snapshot.price <= 0:
            raise OracleUnavailable(f"Non-positive oracle price: {snapshot.price}")
        self._collateral = collateral
        self._debt = debt
        self._snapshot = snapshot

    @property
    def snapshot(self) -> PriceSnapshot:
        return self._snapshot

    def collateral_to_debt(self, collateral_amount: int) -> int:
        """Largest debt ``collateral_amount`` supports at this price."""
        intermediate = collateral_amount * self._snapshot.scalar // self._snapshot.price
        return scale(intermediate, self._debt.decimals, self._collateral.decimals)

    def debt_to_collateral(self, debt_amount: int) -> int:
        """Collateral needed to support ``debt_amount`` at this price."""
        intermediate = debt_amount * self._snapshot.price // self._snapshot.scalar
        return scale(intermediate, self._collateral.decimals, self._debt.decimals)

    def is_collateralized(self, debt_amount: int, collateral_amount: int) -> bool:
        # Debt-free accounts are healthy at any price.
        if debt_amount == 0:
            return True
        return debt_amount <= self.collateral_to_debt(collateral_amount)

    def max_borrowable(self, collateral_amount: int, debt_amount: int) -> int:
        """Additional debt that can still be drawn against ``collateral_amount``."""
        return max(0, self.collateral_to_debt(collateral_amount) - debt_amount)

    def max_withdrawable(self, collateral_amount: int, debt_amount: int) -> int:
        """Largest withdrawal from ``collateral_amount`` that keeps the debt supported.

        ``is_collateralized`` is monotone in the remaining deposit, so a binary
        search over the withdrawal size returns the exact boundary regardless
        of rounding in the conversions.
        """
        if debt_amount == 0:
            return collateral_amount
        if not self.is_collateralized(debt_amount, collateral_amount):
            return 0

        low, high = 0, collateral_amount
        while low < high:
            mid = (low + high + 1) // 2
            if self.is_collateralized(debt_amount, collateral_amount - mid):
                low = mid
            else:
                high = mid - 1
        return low
