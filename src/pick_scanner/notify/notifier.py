"""Notification sinks for scan summaries and performance reports."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import logging

import aiohttp

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Abstract base class for notification sinks."""

    @abstractmethod
    async def send(self, text: str) -> None:
        pass

    async def close(self) -> None:
        pass


class LogNotifier(Notifier):
    """Writes messages to the application log."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    async def send(self, text: str) -> None:
        logger.log(self.level, "\n" + text)


class TelegramNotifier(Notifier):
    """Posts messages to one or more Telegram chats."""

    def __init__(self, token: str, chat_ids: Sequence[str], timeout: float = 15):
        self.token = (token or "").strip()
        self.chat_ids = [str(c).strip() for c in (chat_ids or []) if str(c).strip()]
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    def enabled(self) -> bool:
        return bool(self.token) and bool(self.chat_ids)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def send(self, text: str) -> None:
        if not self.enabled():
            return
        session = await self._get_session()
        url = f"https://api.telegram.org/bot{self.token}/sendMessage"
        for chat_id in self.chat_ids:
            payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
            async with session.post(url, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    raise RuntimeError(f"Telegram send to {chat_id} failed ({response.status}): {body[:500]}")

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()


class NotificationDispatcher:
    """Fans a message out to every sink; a failing sink is logged, never raised."""

    def __init__(self, notifiers: Optional[List[Notifier]] = None):
        self.notifiers: List[Notifier] = list(notifiers) if notifiers is not None else [LogNotifier()]

    async def publish(self, text: str) -> int:
        """Send to all sinks and return how many succeeded."""
        delivered = 0
        for notifier in self.notifiers:
            try:
                await notifier.send(text)
                delivered += 1
            except Exception as e:
                logger.error(f"Notification via {notifier.__class__.__name__} failed: {e}")
        return delivered

    async def close(self) -> None:
        for notifier in self.notifiers:
            try:
                await notifier.close()
            except Exception as e:
                logger.warning(f"Error closing {notifier.__class__.__name__}: {e}")
