"""Run a single sync cycle and exit."""

from __future__ import annotations

import argparse
import asyncio

from loguru import logger

from maildraft.cli.wiring import build_orchestrator
from maildraft.domain.errors import ConfigurationError
from maildraft.infrastructure.log_config import configure_logging
from maildraft.infrastructure.settings import get_settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync mailboxes once and draft replies")
    parser.add_argument("--account", default=None, help="Only sync this account id")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        orchestrator, _ = build_orchestrator(settings)
        results = asyncio.run(orchestrator.run_once(args.account))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    for stats in results:
        if stats.ok:
            logger.info(
                f"{stats.account_id}: fetched={stats.fetched} imported={stats.imported} "
                f"drafted={stats.drafted} ignored={stats.ignored}"
            )
        else:
            logger.error(f"{stats.account_id}: failed - {stats.error}")

    return 0 if all(s.ok for s in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
