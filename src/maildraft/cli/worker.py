"""Sync worker - polls all configured mailboxes at the configured interval."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from maildraft.application.runner import RunnerHooks, SyncRunner
from maildraft.cli.wiring import build_orchestrator
from maildraft.domain.errors import ConfigurationError
from maildraft.domain.models import SyncRunStats
from maildraft.infrastructure.log_config import configure_logging
from maildraft.infrastructure.settings import Settings, get_settings


@dataclass
class WorkerStats:
    """Track worker statistics."""

    total_imported: int = 0
    total_drafted: int = 0
    total_errors: int = 0
    skipped_cycles: int = 0
    last_poll: datetime | None = None
    polls_completed: int = 0
    by_account: dict[str, int] = field(default_factory=dict)

    def record(self, results: list[SyncRunStats]) -> None:
        self.last_poll = datetime.now()
        self.polls_completed += 1
        for stats in results:
            self.total_imported += stats.imported
            self.total_drafted += stats.drafted
            if not stats.ok:
                self.total_errors += 1
            self.by_account[stats.account_id] = self.by_account.get(stats.account_id, 0) + stats.imported

    def log(self) -> None:
        logger.info(
            f"Worker stats: "
            f"polls={self.polls_completed}, "
            f"imported={self.total_imported}, "
            f"drafted={self.total_drafted}, "
            f"errors={self.total_errors}, "
            f"skipped={self.skipped_cycles}, "
            f"by_account={self.by_account}"
        )


def _on_skip(stats: WorkerStats) -> None:
    stats.skipped_cycles += 1


def _on_success(stats: WorkerStats, results: list[SyncRunStats]) -> None:
    stats.record(results)
    stats.log()


async def run_worker(settings: Settings) -> int:
    orchestrator, config = build_orchestrator(settings)
    interval = settings.poll_interval_seconds or config.poll.interval_seconds

    stats = WorkerStats()
    hooks = RunnerHooks(
        on_cycle_start=lambda: logger.info(f"Starting poll cycle #{stats.polls_completed + 1}"),
        on_cycle_success=lambda results: _on_success(stats, results),
        on_cycle_error=lambda e: logger.error(f"Poll cycle failed: {e}"),
        on_cycle_skip=lambda: _on_skip(stats),
        on_stop=stats.log,
    )
    runner = SyncRunner(orchestrator, hooks=hooks)
    runner.install_signal_handlers()

    logger.info(f"Sync worker starting with {len(config.accounts)} account(s)")
    logger.info(f"Poll interval: {interval} seconds")
    for account in config.accounts:
        logger.info(f"  - {account.id}: {account.email}")

    await runner.run_forever(interval)
    logger.info("Worker shutdown complete")
    return 0


def main() -> int:
    """Entry point for the sync worker."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} Sync Worker {settings.app_version}")
    logger.info("=" * 60)

    try:
        return asyncio.run(run_worker(settings))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
