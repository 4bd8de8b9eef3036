from app.config.settings import Settings
from app.crypto.cipher import CompatibleCipher
from app.database.repositories.recovery_store import RecoveryStore
from app.extraction.extractor import DocumentExtractor
from app.gateway.fetcher import GatewayFetcher
from app.logging.logger import Log
from app.recovery.models import RecoveryState, SourceRecord
from app.recovery.pipeline import PipelineStep, RecoveryContext
from app.recovery.steps import ClassifyStep, DecryptStep, ExtractStep, FetchStep, PersistStep


class RecoveryProcessor:
    """Drives one source record through the recovery pipeline.

    Pipeline: fetch -> classify -> decrypt (if encrypted) -> extract -> persist.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def process(self, record: SourceRecord) -> RecoveryContext:
        """Run every step; on error the context is marked failed and the error re-raised."""
        Log.info(f"Processing {record.document_id} (case {record.case_label or 'n/a'})")
        context = RecoveryContext(record=record)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception:
            Log.debug(f"{record.document_id} failed while {context.state.value}")
            context.state = RecoveryState.FAILED
            raise
        context.state = RecoveryState.RECOVERED
        return context


def build_processor(
    settings: Settings,
    fetcher: GatewayFetcher,
    store: RecoveryStore,
) -> RecoveryProcessor:
    """Build a RecoveryProcessor with the standard step sequence."""
    steps: list[PipelineStep] = [
        FetchStep(fetcher),
        ClassifyStep(),
        DecryptStep(CompatibleCipher()),
        ExtractStep(DocumentExtractor()),
        PersistStep(store, default_uploaded_by=settings.recovery_uploaded_by),
    ]
    return RecoveryProcessor(steps)
