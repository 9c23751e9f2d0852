import logging
from datetime import datetime, timezone
import httpx
from splitledger.core.config import settings

logger = logging.getLogger(__name__)


class Notifier:
    """
    Best-effort outbound channel for group events.

    Implementations may raise, callers go through `broadcast` which
    never lets a notification failure reach the ledger.
    """

    async def notify(self, group_id: int, event_type: str, payload: dict):
        raise NotImplementedError


class NoOpNotifier(Notifier):
    async def notify(self, group_id: int, event_type: str, payload: dict):
        return None


class LoggingNotifier(Notifier):
    async def notify(self, group_id: int, event_type: str, payload: dict):
        logger.info("group %s event %s: %s", group_id, event_type, payload)


class WebhookNotifier(Notifier):
    def __init__(self, url: str, timeout: float = 3.0, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def notify(self, group_id: int, event_type: str, payload: dict):
        body = {
            "group_id": group_id,
            "event": event_type,
            "data": payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            res = await client.post(self.url, json=body)
            res.raise_for_status()


async def broadcast(notifier: Notifier | None, group_id: int, event_type: str, payload: dict):
    if notifier is None:
        return

    try:
        await notifier.notify(group_id, event_type, payload)
    except Exception as e:
        logger.warning(
            "Notification %s for group %s failed: %s", event_type, group_id, e
        )


def build_notifier() -> Notifier:
    kind = settings.NOTIFIER.lower()

    if kind == "webhook":
        if not settings.NOTIFY_WEBHOOK_URL:
            logger.warning("NOTIFIER=webhook without NOTIFY_WEBHOOK_URL, notifications disabled")
            return NoOpNotifier()
        return WebhookNotifier(settings.NOTIFY_WEBHOOK_URL, timeout=settings.NOTIFY_TIMEOUT)

    if kind == "log":
        return LoggingNotifier()

    return NoOpNotifier()
