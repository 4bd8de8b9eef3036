import threading
from collections.abc import Iterable

from app.config.settings import Settings
from app.database.repositories.recovery_store import RecoveryStore
from app.gateway.fetcher import GatewayFetcher
from app.logging.logger import Log
from app.recovery.exceptions import RecoveryError
from app.recovery.models import BatchSummary, SourceRecord
from app.recovery.processor import build_processor
from app.recovery.record_runner import RecordRunner


class RecoveryOrchestrator:
    """Sequential batch loop: skip-check -> run record -> pause -> next.

    Records are processed one at a time with a fixed pause between them so
    the gateways do not throttle us. ``request_stop`` takes effect after the
    record in flight.
    """

    def __init__(
        self,
        runner: RecordRunner,
        store: RecoveryStore,
        item_delay_seconds: float = 1.0,
        force: bool = False,
    ) -> None:
        self._runner = runner
        self._store = store
        self._item_delay_seconds = item_delay_seconds
        self._force = force
        self._stop_event = threading.Event()

    def request_stop(self) -> None:
        """Stop after the current record; safe to call from a signal handler."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def run(self, records: Iterable[SourceRecord]) -> BatchSummary:
        """Process every record; per-record failures never abort the batch."""
        summary = BatchSummary()
        Log.info("Starting document recovery batch")
        processed_any = False
        for record in records:
            if self.stop_requested:
                summary.stopped = True
                Log.info("Stop requested, ending batch before next record")
                break

            if not self._force and self._already_recovered(record):
                Log.info(f"Skipping {record.document_id}: already recovered")
                summary.skipped.append(record.document_id)
                continue

            if processed_any and self._pause():
                summary.stopped = True
                Log.info("Stop requested, ending batch before next record")
                break

            summary.outcomes.append(self._runner.run(record))
            processed_any = True

        self._log_summary(summary)
        return summary

    def _already_recovered(self, record: SourceRecord) -> bool:
        try:
            return self._store.is_recovered(record.document_id)
        except RecoveryError as exc:
            Log.warning(f"Could not read status for {record.document_id}, processing: {exc}")
            return False

    def _pause(self) -> bool:
        """Sleep between records; True if a stop was requested meanwhile."""
        if self._item_delay_seconds <= 0:
            return self.stop_requested
        return self._stop_event.wait(self._item_delay_seconds)

    @staticmethod
    def _log_summary(summary: BatchSummary) -> None:
        Log.info(
            f"Recovery complete: {summary.total} processed, {summary.recovered} recovered, "
            f"{summary.failed} failed, {len(summary.skipped)} skipped "
            f"(success rate {summary.success_rate:.1f}%)"
        )
        for outcome in summary.failures:
            Log.error(
                f"Failed: {outcome.document_id}: {outcome.detail}",
                code=outcome.error_code,
            )


def build_orchestrator(
    settings: Settings,
    fetcher: GatewayFetcher,
    store: RecoveryStore,
) -> RecoveryOrchestrator:
    """Build a RecoveryOrchestrator with all required collaborators."""
    processor = build_processor(settings, fetcher, store)
    return RecoveryOrchestrator(
        runner=RecordRunner(processor, store),
        store=store,
        item_delay_seconds=settings.recovery_item_delay_seconds,
        force=settings.recovery_force,
    )
