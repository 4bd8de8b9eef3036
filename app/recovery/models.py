from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class SourceRecord:
    """An item requiring recovery, produced by the upstream write path."""

    document_id: str
    content_ref: str
    decryption_key: str | None = None
    case_label: str = ""
    uploaded_by: str | None = None


class RecoveryState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    CLASSIFYING = "classifying"
    DECRYPTING = "decrypting"
    EXTRACTING = "extracting"
    PERSISTING = "persisting"
    RECOVERED = "recovered"
    FAILED = "failed"


@dataclass(frozen=True)
class RecoveryOutcome:
    """Result of one pass over one source record."""

    document_id: str
    recovered: bool
    detail: str
    kinds: tuple[str, ...] = ()
    error_code: str | None = None
    status_recorded: bool = True


@dataclass
class BatchSummary:
    """Totals for one orchestrator run."""

    outcomes: list[RecoveryOutcome] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    stopped: bool = False

    @property
    def recovered(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.recovered)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.recovered)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def success_rate(self) -> float:
        if not self.outcomes:
            return 0.0
        return self.recovered / self.total * 100

    @property
    def failures(self) -> list[RecoveryOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.recovered]
