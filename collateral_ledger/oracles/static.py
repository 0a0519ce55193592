"""In-process price oracle with a settable price."""
from __future__ import annotations

import logging

from ..models import PriceSnapshot

logger = logging.getLogger(__name__)


class StaticPriceOracle:
    """Serve a fixed price until ``set_price`` moves it."""

    def __init__(self, price: int, precision: int = 18) -> None:
        self._price = price
        self._precision = precision

    @property
    def price(self) -> int:
        return self._price

    def set_price(self, price: int) -> None:
        logger.info("Static oracle price %d -> %d", self._price, price)
        self._price = price

    async def latest_price(self) -> PriceSnapshot:
        return PriceSnapshot(price=self._price, precision=self._precision)
