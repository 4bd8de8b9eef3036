import base64
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import RecoveryStatus, StoredArtifactRecord
from app.extraction.data_url import default_file_name
from app.extraction.models import ExtractedArtifact
from app.recovery.exceptions import StorageFailure, StorageUnavailable

UPSERT_ARTIFACT_SQL = """
    INSERT INTO document_storage
        (document_id, kind, file_name, mime_type, file_data_base64, file_size, uploaded_by)
    VALUES (%s, %s, %s, %s, %s, %s, %s)
    ON CONFLICT (document_id, kind)
    DO UPDATE SET
        file_name = EXCLUDED.file_name,
        mime_type = EXCLUDED.mime_type,
        file_data_base64 = EXCLUDED.file_data_base64,
        file_size = EXCLUDED.file_size,
        uploaded_by = EXCLUDED.uploaded_by,
        updated_at = NOW()
    RETURNING id
"""


class RecoveryStore:
    """Durable, idempotent persistence for recovered artifacts and status.

    Artifacts live in ``document_storage`` keyed by ``(document_id, kind)``;
    status lives in the recovery columns of ``served_notices``.
    """

    def upsert_artifact(
        self,
        document_id: str,
        kind: str,
        data: bytes,
        mime_type: str,
        uploaded_by: str,
        file_name: str | None = None,
    ) -> int:
        """Insert or overwrite one artifact and return its row id.

        Raises:
            StorageFailure: if the database rejects the write.
            StorageUnavailable: if the database cannot be reached.
        """
        name = file_name or default_file_name(kind, document_id, mime_type)
        with _storage_errors(f"upsert {kind} for {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    stored_id = self._upsert(
                        cur, document_id, kind, name, data, mime_type, uploaded_by
                    )
                conn.commit()
        return stored_id

    def save_artifacts(
        self,
        document_id: str,
        artifacts: Sequence[ExtractedArtifact],
        uploaded_by: str,
    ) -> list[int]:
        """Upsert all artifacts of one record in a single transaction.

        Either every artifact is written or none is.

        Raises:
            StorageFailure: if the database rejects any write.
            StorageUnavailable: if the database cannot be reached.
        """
        with _storage_errors(f"save artifacts for {document_id}"):
            with get_connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        return [
                            self._upsert(
                                cur,
                                document_id,
                                artifact.kind,
                                artifact.file_name,
                                artifact.data,
                                artifact.mime_type,
                                uploaded_by,
                            )
                            for artifact in artifacts
                        ]

    def mark_recovery_status(self, document_id: str, recovered: bool, detail: str) -> None:
        """Overwrite the recovery status of a source record.

        Raises:
            StorageFailure: if no source record matches or the write is rejected.
            StorageUnavailable: if the database cannot be reached.
        """
        with _storage_errors(f"mark status for {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE served_notices
                        SET documents_recovered = %s,
                            recovery_date = NOW(),
                            recovery_status = %s
                        WHERE notice_id = %s
                        """,
                        (recovered, detail, document_id),
                    )
                    if cur.rowcount == 0:
                        raise StorageFailure(f"source record {document_id} not found")
                conn.commit()

    def get_recovery_status(self, document_id: str) -> RecoveryStatus | None:
        """Return the stored status, or None if the record was never attempted."""
        with _storage_errors(f"read status for {document_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT documents_recovered, recovery_date, recovery_status
                        FROM served_notices
                        WHERE notice_id = %s
                        """,
                        (document_id,),
                    )
                    row = cur.fetchone()

        if row is None or row["recovery_date"] is None:
            return None
        return RecoveryStatus(
            recovered=bool(row["documents_recovered"]),
            recovered_at=row["recovery_date"],
            status_detail=row["recovery_status"] or "",
        )

    def is_recovered(self, document_id: str) -> bool:
        status = self.get_recovery_status(document_id)
        return status is not None and status.recovered

    def find_artifacts(self, document_id: str) -> list[StoredArtifactRecord]:
        """All stored artifacts for a document, ordered by kind."""
        with _storage_errors(f"read artifacts for {document_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, document_id, kind, file_name, mime_type,
                               file_data_base64, file_size, uploaded_by,
                               created_at, updated_at
                        FROM document_storage
                        WHERE document_id = %s
                        ORDER BY kind
                        """,
                        (document_id,),
                    )
                    rows = cur.fetchall()

        return [StoredArtifactRecord(**row) for row in rows]

    @staticmethod
    def _upsert(
        cur: psycopg.Cursor[Any],
        document_id: str,
        kind: str,
        file_name: str,
        data: bytes,
        mime_type: str,
        uploaded_by: str,
    ) -> int:
        cur.execute(
            UPSERT_ARTIFACT_SQL,
            (
                document_id,
                kind,
                file_name,
                mime_type,
                base64.b64encode(data).decode("ascii"),
                len(data),
                uploaded_by,
            ),
        )
        row = cur.fetchone()
        if row is None:
            raise StorageFailure(f"upsert of {kind} for {document_id} returned no id")
        return int(row[0])


@contextmanager
def _storage_errors(action: str) -> Generator[None, None, None]:
    """Translate psycopg errors into the recovery error taxonomy."""
    try:
        yield
    except psycopg.OperationalError as exc:
        raise StorageUnavailable(f"database unreachable during {action}: {exc}") from exc
    except psycopg.Error as exc:
        raise StorageFailure(f"{action} failed: {exc}") from exc
