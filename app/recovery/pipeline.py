from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.extraction.models import ExtractionResult
from app.formats.models import ClassifiedPayload
from app.gateway.models import FetchedBlob
from app.recovery.models import RecoveryState, SourceRecord


@dataclass(slots=True)
class RecoveryContext:
    record: SourceRecord
    state: RecoveryState = RecoveryState.PENDING
    blob: FetchedBlob | None = None
    classified: ClassifiedPayload | None = None
    encrypted: bool = False
    extraction: ExtractionResult | None = None
    stored_ids: list[int] = field(default_factory=list)
    stored_kinds: list[str] = field(default_factory=list)

    @property
    def document_id(self) -> str:
        return self.record.document_id


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: RecoveryContext) -> RecoveryContext:
        raise NotImplementedError
