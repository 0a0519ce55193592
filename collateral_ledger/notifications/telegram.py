"""Telegram notifier for ledger events."""
from __future__ import annotations

import html
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"


class TelegramNotifier:
    """Deliver ledger messages through two Telegram bots.

    The alert bot carries liquidations with sound on; the log bot carries
    routine deposit/borrow/repay/withdraw activity.
    """

    def __init__(self, config: TelegramConfig, timeout: float = 10.0) -> None:
        self.alert_bot_token = config.alert_bot_token
        self.log_bot_token = config.log_bot_token
        self.chat_id = config.chat_id
        self.timeout = timeout

    def _payload(self, message: str, silent: bool) -> dict[str, object]:
        return {
            "chat_id": self.chat_id,
            "text": html.escape(message, quote=False),
            "parse_mode": "HTML",
            "disable_notification": silent,
        }

    async def _send_message(self, message: str, bot_token: str, silent: bool) -> bool:
        if not bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        url = f"{TELEGRAM_API}/bot{bot_token}/sendMessage"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                url,
                json=self._payload(message, silent),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    logger.error("Telegram sendMessage returned %s", response.status)
                    return False
                return True

    async def send_alert(self, message: str, subject: str = "") -> bool:
        text = f"{subject}\n\n{message}" if subject else message
        delivered = await self._send_message(text, self.alert_bot_token, silent=False)
        if delivered:
            logger.info("Telegram alert delivered")
        return delivered

    async def send_log(self, message: str, silent: bool = True) -> bool:
        return await self._send_message(message, self.log_bot_token, silent=silent)
