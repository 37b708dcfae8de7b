"""Bound-account context shared between the wallet layer and the orchestrator."""
from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

AccountListener = Callable[[str | None], Awaitable[None] | None]


class AccountContext:
    """Holds the currently connected account and publishes changes.

    Subscribers receive the new account, or ``None`` on disconnect.
    Reconnecting the account that is already bound publishes nothing.
    """

    def __init__(self, account: str | None = None) -> None:
        self._account = account or None
        self._listeners: list[AccountListener] = []

    @property
    def account(self) -> str | None:
        return self._account

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def connect(self, account: str) -> None:
        if not account:
            raise ValueError("Cannot connect an empty account")
        if account == self._account:
            return
        self._account = account
        logger.info("Account connected: %s", account)
        await self._publish()

    async def disconnect(self) -> None:
        if self._account is None:
            return
        logger.info("Account disconnected: %s", self._account)
        self._account = None
        await self._publish()

    async def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(self._account)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Account listener failed: %s", e)
