"""Forward refresh events to notification channels."""
import logging
from collections.abc import Iterable

from ..formatting import build_event_message
from ..interfaces.notifier import Notifier
from ..models import RefreshEvent, RefreshEventKind

logger = logging.getLogger(__name__)

FAILURE_SUBJECT = "🚨 DLMM positions unavailable"


class NotificationRelay:
    """Refresh listener that fans events out to notifiers.

    Final failures go out as alerts; successes and retries as silent logs.
    Loading events are not forwarded.
    """

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self._notifiers = list(notifiers)

    async def __call__(self, event: RefreshEvent) -> None:
        if event.kind is RefreshEventKind.LOADING:
            return

        message = build_event_message(event)
        if event.kind is RefreshEventKind.FAILED:
            await self._send_alert(message, subject=FAILURE_SUBJECT)
        else:
            await self._send_log(message, silent=True)

    async def _send_log(self, message: str, silent: bool = True) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=silent)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)
