"""Polling loop with a single in-flight cycle."""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from maildraft.application.use_cases.sync_mailboxes import SyncOrchestrator
from maildraft.domain.errors import ConfigurationError
from maildraft.domain.models import SyncRunStats


@dataclass
class RunnerHooks:
    """Optional callbacks fired around each cycle."""

    on_cycle_start: Optional[Callable[[], None]] = None
    on_cycle_success: Optional[Callable[[list[SyncRunStats]], None]] = None
    on_cycle_error: Optional[Callable[[Exception], None]] = None
    on_cycle_skip: Optional[Callable[[], None]] = None
    on_stop: Optional[Callable[[], None]] = None


class SyncRunner:
    """
    Runs sync cycles one at a time.

    A cycle requested while another is in flight is skipped, never queued.
    A stop request takes effect at the next cycle boundary; an in-flight
    cycle always runs to completion.
    """

    def __init__(self, orchestrator: SyncOrchestrator, hooks: Optional[RunnerHooks] = None):
        self.orchestrator = orchestrator
        self.hooks = hooks or RunnerHooks()
        self._in_flight = False
        self._stop = asyncio.Event()
        self.cycles_completed = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    async def run_cycle(self, account_id: Optional[str] = None) -> Optional[list[SyncRunStats]]:
        """Run one cycle, or return None if one is already running."""
        if self._in_flight:
            logger.info("Sync cycle already in flight; skipping")
            if self.hooks.on_cycle_skip:
                self.hooks.on_cycle_skip()
            return None

        self._in_flight = True
        if self.hooks.on_cycle_start:
            self.hooks.on_cycle_start()

        try:
            stats = await self.orchestrator.run_once(account_id)
        except Exception as e:
            if self.hooks.on_cycle_error:
                self.hooks.on_cycle_error(e)
            raise
        finally:
            self._in_flight = False

        self.cycles_completed += 1
        if self.hooks.on_cycle_success:
            self.hooks.on_cycle_success(stats)
        return stats

    def request_stop(self) -> None:
        if not self._stop.is_set():
            logger.info("Stop requested; finishing current cycle")
            self._stop.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_stop)

    async def run_forever(self, interval_seconds: float, account_id: Optional[str] = None) -> None:
        """Poll until stopped. Configuration errors end the loop."""
        logger.info(f"Sync runner started, polling every {interval_seconds}s")

        while not self._stop.is_set():
            try:
                await self.run_cycle(account_id)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.error(f"Sync cycle failed: {e}")

            if self._stop.is_set():
                break
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info(f"Sync runner stopped after {self.cycles_completed} cycle(s)")
        if self.hooks.on_stop:
            self.hooks.on_stop()
