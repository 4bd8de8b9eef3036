import signal
import sys
from types import FrameType

import psycopg

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.recovery_store import RecoveryStore
from app.database.repositories.worklist_repository import WorklistRepository
from app.database.schema import ensure_schema
from app.gateway.factory import GatewayFetcherFactory
from app.logging.logger import Log
from app.recovery.exceptions import ConfigurationError
from app.recovery.orchestrator import RecoveryOrchestrator, build_orchestrator


def _install_stop_handlers(orchestrator: RecoveryOrchestrator) -> None:
    def _handle(signum: int, _frame: FrameType | None) -> None:
        Log.info(f"Received signal {signum}, stopping after current record")
        orchestrator.request_stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main() -> int:
    """Entry point: settings -> pool -> schema -> worklist -> orchestrator run."""
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        fetcher = GatewayFetcherFactory.create(settings)
    except ConfigurationError as exc:
        Log.error(f"Configuration error, aborting run: {exc}")
        return 2

    try:
        init_pool(settings)
        if settings.recovery_ensure_schema:
            ensure_schema()
        store = RecoveryStore()
        orchestrator = build_orchestrator(settings, fetcher, store)
        _install_stop_handlers(orchestrator)

        records = WorklistRepository().find_pending(
            limit=settings.recovery_batch_limit,
            force=settings.recovery_force,
        )
        Log.info(f"Found {len(records)} records to recover")
        summary = orchestrator.run(records)
    except (ConfigurationError, psycopg.OperationalError) as exc:
        Log.error(f"Configuration error, aborting run: {exc}")
        return 2
    finally:
        fetcher.close()
        close_pool()

    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
