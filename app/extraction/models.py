from dataclasses import dataclass, field

from app.recovery.exceptions import MalformedArtifact

THUMBNAIL = "thumbnail"
DOCUMENT = "document"


@dataclass(frozen=True)
class DecodedDataUrl:
    """Bytes and MIME type carried by a ``data:`` URL."""

    mime_type: str
    data: bytes


@dataclass(frozen=True)
class ExtractedArtifact:
    """A named sub-payload ready to be persisted."""

    document_id: str
    kind: str
    data: bytes
    mime_type: str
    file_name: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ExtractionResult:
    """Artifacts decoded from one payload plus the siblings that failed."""

    artifacts: list[ExtractedArtifact] = field(default_factory=list)
    errors: list[MalformedArtifact] = field(default_factory=list)

    @property
    def kinds(self) -> list[str]:
        return [artifact.kind for artifact in self.artifacts]
