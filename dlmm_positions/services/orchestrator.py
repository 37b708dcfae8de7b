"""Refresh orchestration: retries, periodic re-fetch and consumer state."""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from datetime import datetime, timezone
from typing import Any

from ..config import AppConfig, RefreshConfig
from ..interfaces.position_source import PositionSource
from ..interfaces.price_oracle import PriceOracle
from ..models import (
    EnrichedPosition,
    FetchOutcome,
    OutcomeStatus,
    PortfolioSummary,
    PositionsView,
    RefreshEvent,
    RefreshEventKind,
    RefreshState,
)
from ..notifications import NotificationRelay, TelegramNotifier
from ..oracles import BirdeyeOracle, StaticPriceOracle
from ..session import AccountContext
from ..sources import SarosPositionSource
from .aggregator import summarize
from .enricher import enrich
from .reconciler import reconcile

logger = logging.getLogger(__name__)

RefreshListener = Callable[[RefreshEvent], Any]


class PositionFetchError(RuntimeError):
    """The position source returned data that must not be committed."""


class RefreshOrchestrator:
    """Keeps the enriched positions of the bound account up to date.

    At most one refresh cycle runs at a time: a manual trigger during a
    cycle joins it, a periodic tick during a cycle is skipped. Every commit
    replaces the whole positions tuple, and results from a cycle started
    before the account was unbound are discarded.
    """

    def __init__(
        self,
        source: PositionSource,
        oracle: PriceOracle,
        config: RefreshConfig | None = None,
        *,
        pair_id: str | None = None,
        accept_demo_fallback: bool = True,
        listeners: Iterable[RefreshListener] = (),
    ) -> None:
        self._source = source
        self._oracle = oracle
        self._config = config or RefreshConfig()
        self._pair_id = pair_id
        self._accept_demo_fallback = accept_demo_fallback
        self._listeners: list[RefreshListener] = list(listeners)

        self._account: str | None = None
        self._generation = 0
        self._state = RefreshState.IDLE
        self._positions: tuple[EnrichedPosition, ...] = ()
        self._summary = PortfolioSummary()
        self._error: str | None = None
        self._last_fetch_time: datetime | None = None

        self._inflight: asyncio.Task[FetchOutcome] | None = None
        self._periodic: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._deliveries: set[asyncio.Task[None]] = set()

    @classmethod
    def from_config(cls, config: AppConfig) -> RefreshOrchestrator:
        """Build source, oracle and notifiers from application config."""
        source = SarosPositionSource(config.data_source)

        oracle: PriceOracle
        if config.data_source.mode == "demo":
            oracle = StaticPriceOracle(config.price_oracle.fallback_prices)
        else:
            oracle = BirdeyeOracle(config.price_oracle)

        listeners: list[RefreshListener] = []
        if config.notifications.telegram.enabled:
            listeners.append(
                NotificationRelay([TelegramNotifier(config.notifications.telegram)])
            )

        return cls(
            source,
            oracle,
            config.refresh,
            pair_id=config.data_source.pair_id or None,
            accept_demo_fallback=config.data_source.accept_demo_fallback,
            listeners=listeners,
        )

    # ------------------------------------------------------------------
    # Consumer state
    # ------------------------------------------------------------------

    @property
    def account(self) -> str | None:
        return self._account

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is RefreshState.LOADING

    @property
    def positions(self) -> tuple[EnrichedPosition, ...]:
        return self._positions

    @property
    def summary(self) -> PortfolioSummary:
        return self._summary

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def last_fetch_time(self) -> datetime | None:
        return self._last_fetch_time

    def view(self) -> PositionsView:
        return PositionsView(
            positions=self._positions,
            loading=self.loading,
            error=self._error,
            summary=self._summary,
            refetch=self.refetch,
            last_fetch_time=self._last_fetch_time,
        )

    def subscribe(self, listener: RefreshListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Account binding
    # ------------------------------------------------------------------

    async def attach(self, context: AccountContext) -> Callable[[], None]:
        """Follow ``context``; binds right away if an account is connected."""
        unsubscribe = context.subscribe(self._on_account_change)
        if context.account:
            await self.bind(context.account, wait=False)
        return unsubscribe

    async def _on_account_change(self, account: str | None) -> None:
        if account is None:
            self.unbind()
        else:
            await self.bind(account, wait=False)

    async def bind(self, account: str, wait: bool = True) -> FetchOutcome | None:
        """Bind ``account``, start the periodic timer and fetch immediately."""
        if not account:
            raise ValueError("Cannot bind an empty account")
        if account == self._account:
            return None
        if self._account is not None:
            self.unbind()

        self._account = account
        self._generation += 1
        logger.info("Tracking DLMM positions for %s", account)

        self._periodic = self._spawn(self._periodic_loop(self._generation))
        task = self._start_cycle(self._config.initial_attempts)
        if task is None or not wait:
            return None
        return await asyncio.shield(task)

    def unbind(self) -> None:
        """Forget the bound account and clear all derived state."""
        if self._account is None:
            return
        logger.info("Stopped tracking DLMM positions for %s", self._account)

        self._account = None
        self._generation += 1
        if self._periodic is not None:
            self._periodic.cancel()
            self._periodic = None
        # an in-flight cycle may still finish; its commit is discarded
        self._inflight = None

        self._positions = ()
        self._summary = PortfolioSummary()
        self._error = None
        self._last_fetch_time = None
        self._state = RefreshState.IDLE

    async def close(self) -> None:
        """Unbind, cancel background tasks and flush pending listener deliveries."""
        self.unbind()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def refresh(self, max_attempts: int | None = None) -> FetchOutcome | None:
        """Run (or join) a refresh cycle and return its outcome.

        Returns None when no account is bound.
        """
        task = self._start_cycle(max_attempts or self._config.initial_attempts)
        if task is None:
            return None
        return await asyncio.shield(task)

    def refetch(self) -> None:
        """Fire-and-forget manual refresh. Needs a running event loop."""
        self._start_cycle(self._config.initial_attempts)

    async def _tick(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Skipping periodic refresh: fetch already in flight")
            return
        await self.refresh(self._config.background_attempts)

    async def _periodic_loop(self, generation: int) -> None:
        interval = self._config.interval_seconds
        logger.info("Auto-refresh every %.0f seconds", interval)

        while self._is_current(generation):
            await asyncio.sleep(interval)
            if not self._is_current(generation):
                break
            try:
                await self._tick()
            except Exception as e:
                logger.error("Error in periodic refresh: %s", e)

    # ------------------------------------------------------------------
    # Refresh cycle
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_current(self, generation: int) -> bool:
        return self._account is not None and generation == self._generation

    def _start_cycle(self, max_attempts: int) -> asyncio.Task[FetchOutcome] | None:
        if self._account is None:
            logger.debug("Refresh requested with no bound account")
            return None
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Refresh already in flight for %s, joining it", self._account)
            return self._inflight

        self._state = RefreshState.LOADING
        self._error = None
        self._inflight = self._spawn(
            self._run_cycle(self._account, self._generation, max(1, max_attempts))
        )
        return self._inflight

    async def _run_cycle(
        self, account: str, generation: int, max_attempts: int
    ) -> FetchOutcome:
        """Bounded retry loop: one typed outcome per attempt."""
        last_error = "Unknown error occurred"

        for attempt in range(1, max_attempts + 1):
            if not self._is_current(generation):
                return FetchOutcome(OutcomeStatus.STALE)

            self._state = RefreshState.LOADING
            await self._emit(RefreshEventKind.LOADING, account, attempt, max_attempts)

            outcome = await self._attempt(account)

            if not self._is_current(generation):
                logger.info("Discarding refresh results for unbound account %s", account)
                return FetchOutcome(OutcomeStatus.STALE)

            if outcome.ok:
                self._commit(account, outcome.positions)
                await self._emit(
                    RefreshEventKind.SUCCESS,
                    account,
                    attempt,
                    max_attempts,
                    position_count=len(outcome.positions),
                )
                return outcome

            last_error = outcome.error or last_error
            if attempt < max_attempts:
                await self._emit(
                    RefreshEventKind.RETRYING,
                    account,
                    attempt,
                    max_attempts,
                    message=last_error,
                )
                await asyncio.sleep(self._config.retry_delay_seconds)

        if not self._is_current(generation):
            return FetchOutcome(OutcomeStatus.STALE)

        self._state = RefreshState.FAILED
        self._error = last_error
        logger.error(
            "Failed to load DLMM positions for %s after %d attempt(s): %s",
            account,
            max_attempts,
            last_error,
        )
        await self._emit(
            RefreshEventKind.FAILED, account, max_attempts, max_attempts, message=last_error
        )
        return FetchOutcome(OutcomeStatus.TERMINAL, error=last_error)

    async def _attempt(self, account: str) -> FetchOutcome:
        try:
            result = await self._source.fetch_all(account, self._pair_id)
            if not result.success:
                if not self._accept_demo_fallback:
                    raise PositionFetchError("Failed to fetch positions from Saros API")
                logger.warning("Position source served demo data for %s", account)

            merged = reconcile(result.pool_aggregates, result.bin_positions)
            enriched = await enrich(merged, self._oracle)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error("Error fetching DLMM positions for %s: %s", account, message)
            return FetchOutcome(OutcomeStatus.RETRIABLE, error=message)

        return FetchOutcome(OutcomeStatus.SUCCESS, positions=tuple(enriched))

    def _commit(self, account: str, positions: tuple[EnrichedPosition, ...]) -> None:
        self._positions = positions
        self._summary = summarize(positions)
        self._last_fetch_time = datetime.now(timezone.utc)
        self._error = None
        self._state = RefreshState.READY
        logger.info("Loaded %d DLMM positions for %s", len(positions), account)

    async def _emit(
        self,
        kind: RefreshEventKind,
        account: str,
        attempt: int,
        max_attempts: int,
        message: str = "",
        position_count: int = 0,
    ) -> None:
        event = RefreshEvent(
            kind=kind,
            account=account,
            attempt=attempt,
            max_attempts=max_attempts,
            timestamp=datetime.now(timezone.utc),
            message=message,
            position_count=position_count,
        )
        for listener in list(self._listeners):
            try:
                result = listener(event)
            except Exception as e:
                logger.error("Refresh listener failed: %s", e)
                continue
            if inspect.isawaitable(result):
                # off the retry path; close() flushes pending deliveries
                task = asyncio.ensure_future(self._deliver(result))
                self._deliveries.add(task)
                task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, result: Awaitable[Any]) -> None:
        try:
            await result
        except Exception as e:
            logger.error("Refresh listener failed: %s", e)
