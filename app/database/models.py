from dataclasses import dataclass
from datetime import datetime


@dataclass
class StoredArtifactRecord:
    """Represents a row from the document_storage table."""

    id: int
    document_id: str
    kind: str
    file_name: str
    mime_type: str
    file_data_base64: str
    file_size: int
    uploaded_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class RecoveryStatus:
    """Recovery columns of a served_notices row."""

    recovered: bool
    recovered_at: datetime | None = None
    status_detail: str = ""
