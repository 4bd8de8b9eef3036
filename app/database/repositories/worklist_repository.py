from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.recovery.models import SourceRecord


class WorklistRepository:
    """Reads served notices that still need their documents recovered."""

    def find_pending(self, limit: int, force: bool = False) -> list[SourceRecord]:
        """Return up to ``limit`` records with a content reference, newest first.

        Records already marked recovered are excluded unless ``force`` is set.
        The decryption key may be absent, meaning the blob is plaintext.
        When a notice has several component rows, the newest one carrying a key
        wins.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT DISTINCT ON (sn.created_at, sn.notice_id)
                           sn.notice_id,
                           sn.ipfs_hash,
                           nc.document_encryption_key,
                           sn.case_number,
                           sn.server_address,
                           sn.created_at
                    FROM served_notices sn
                    LEFT JOIN notice_components nc ON nc.notice_id = sn.notice_id
                    WHERE sn.ipfs_hash IS NOT NULL
                      AND sn.ipfs_hash <> ''
                      AND (%s OR sn.documents_recovered IS NOT TRUE)
                    ORDER BY sn.created_at DESC,
                             sn.notice_id,
                             (nc.document_encryption_key IS NULL
                              OR nc.document_encryption_key = ''),
                             nc.id DESC
                    LIMIT %s
                    """,
                    (force, limit),
                )
                rows = cur.fetchall()

        return [
            SourceRecord(
                document_id=str(row["notice_id"]),
                content_ref=row["ipfs_hash"],
                decryption_key=row["document_encryption_key"] or None,
                case_label=row["case_number"] or "",
                uploaded_by=row["server_address"] or None,
            )
            for row in rows
        ]
