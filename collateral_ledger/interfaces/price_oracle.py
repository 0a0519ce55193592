"""Price oracle protocol: collateral/debt exchange rate feed."""
from typing import Protocol

from ..models import PriceSnapshot


class PriceOracle(Protocol):
    """Abstract interface for reading the current pair price."""

    async def latest_price(self) -> PriceSnapshot: ...
