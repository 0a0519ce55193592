"""Pyth Network price oracle: collateral-per-debt rate from two USD feeds."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import OracleUnavailable
from ..models import PriceSnapshot

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns feed ids lower-case without the ``0x`` prefix."""
    feed_id = feed_id.lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def pair_price(
    base: tuple[int, int], quote: tuple[int, int], precision: int
) -> int:
    """Integer ``base / quote`` rate scaled by ``10 ** precision``.

    Each side is a Pyth ``(price, expo)`` pair meaning ``price * 10**expo``.
    The division truncates toward zero.
    """
    base_raw, base_expo = base
    quote_raw, quote_expo = quote
    if base_raw <= 0 or quote_raw <= 0:
        raise OracleUnavailable(
            f"Non-positive feed price: base={base_raw} quote={quote_raw}"
        )

    numerator = base_raw * 10**precision
    denominator = quote_raw
    shift = base_expo - quote_expo
    if shift >= 0:
        numerator *= 10**shift
    else:
        denominator *= 10**-shift
    return numerator // denominator


class PythOracle:
    """Fetch the engine price from Pyth Network Hermes.

    The engine price is collateral units per debt unit, so the rate is
    ``debt_usd / collateral_usd``. Unlike a monitor that can skip a cycle,
    every failure here raises ``OracleUnavailable`` so the calling operation
    is rejected.
    """

    def __init__(
        self, config: PythConfig, precision: int = 18, timeout: float = 5.0
    ) -> None:
        self.hermes_url = config.hermes_url
        self.collateral_feed = _normalize_feed_id(config.collateral_feed)
        self.debt_feed = _normalize_feed_id(config.debt_feed)
        self.precision = precision
        self.timeout = timeout

    async def _fetch_parsed(self) -> list[dict[str, Any]]:
        query_params = f"ids[]={self.collateral_feed}&ids[]={self.debt_feed}"
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        raise OracleUnavailable(
                            f"Pyth returned HTTP {response.status}"
                        )
                    data = await response.json()
        except OracleUnavailable:
            raise
        except Exception as e:
            raise OracleUnavailable(f"Error fetching prices from Pyth: {e}") from e

        return data.get("parsed", [])

    async def latest_price(self) -> PriceSnapshot:
        """Fetch both feeds and derive the pair price."""
        parsed = await self._fetch_parsed()

        feeds: dict[str, tuple[int, int]] = {}
        for item in parsed:
            feed_id = _normalize_feed_id(str(item.get("id", "")))
            price_data = item.get("price", {})
            feeds[feed_id] = (
                int(price_data.get("price", 0)),
                int(price_data.get("expo", 0)),
            )

        missing = [f for f in (self.collateral_feed, self.debt_feed) if f not in feeds]
        if missing:
            raise OracleUnavailable(f"Pyth response missing feeds: {missing}")

        price = pair_price(
            feeds[self.debt_feed], feeds[self.collateral_feed], self.precision
        )
        logger.debug("Pyth pair price %d (precision %d)", price, self.precision)
        return PriceSnapshot(price=price, precision=self.precision)
