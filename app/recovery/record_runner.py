from app.database.repositories.recovery_store import RecoveryStore
from app.extraction.models import DOCUMENT, THUMBNAIL
from app.logging.logger import Log
from app.recovery.exceptions import ConfigurationError, RecoveryError
from app.recovery.models import RecoveryOutcome, SourceRecord
from app.recovery.processor import RecoveryProcessor

_KIND_ORDER = {THUMBNAIL: 0, DOCUMENT: 1}


def recovered_detail(kinds: list[str]) -> str:
    """``Recovered: thumbnail, document``; extra kinds follow in stored order."""
    ordered = sorted(kinds, key=lambda kind: _KIND_ORDER.get(kind, len(_KIND_ORDER)))
    return f"Recovered: {', '.join(ordered)}"


class RecordRunner:
    """Run one source record, catch per-record errors, record the status once."""

    def __init__(self, processor: RecoveryProcessor, store: RecoveryStore) -> None:
        self._processor = processor
        self._store = store

    def run(self, record: SourceRecord) -> RecoveryOutcome:
        """Process a record; only configuration-level errors propagate."""
        try:
            context = self._processor.process(record)
        except ConfigurationError:
            raise
        except RecoveryError as exc:
            Log.error(
                f"Recovery of {record.document_id} failed: {exc}",
                document_id=record.document_id,
                code=exc.code,
            )
            return self._record(
                record, recovered=False, detail=exc.status_detail(), error_code=exc.code
            )
        except Exception as exc:
            Log.exception(
                f"Unexpected error recovering {record.document_id}: {exc}",
                document_id=record.document_id,
            )
            return self._record(
                record, recovered=False, detail=f"error: {exc}", error_code="INTERNAL_ERROR"
            )

        return self._record(
            record,
            recovered=True,
            detail=recovered_detail(context.stored_kinds),
            kinds=tuple(context.stored_kinds),
        )

    def _record(
        self,
        record: SourceRecord,
        *,
        recovered: bool,
        detail: str,
        kinds: tuple[str, ...] = (),
        error_code: str | None = None,
    ) -> RecoveryOutcome:
        status_recorded = True
        try:
            self._store.mark_recovery_status(record.document_id, recovered, detail)
        except RecoveryError as exc:
            Log.error(f"Could not record status for {record.document_id}: {exc}")
            status_recorded = False
        Log.info(f"{record.document_id}: {detail}", recovered=recovered)
        return RecoveryOutcome(
            document_id=record.document_id,
            recovered=recovered,
            detail=detail,
            kinds=kinds,
            error_code=error_code,
            status_recorded=status_recorded,
        )
