import base64
from datetime import datetime
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from app.database.models import RecoveryStatus, StoredArtifactRecord
from app.database.repositories.recovery_store import UPSERT_ARTIFACT_SQL, RecoveryStore
from app.extraction.models import ExtractedArtifact
from app.recovery.exceptions import StorageFailure, StorageUnavailable

PATCH_TARGET = "app.database.repositories.recovery_store.get_connection"


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _artifact(kind: str, data: bytes = b"\x89PNG") -> ExtractedArtifact:
    return ExtractedArtifact(
        document_id="N-1",
        kind=kind,
        data=data,
        mime_type="image/png",
        file_name=f"{kind}-N-1.png",
    )


class TestUpsertArtifact:
    @patch(PATCH_TARGET)
    def test_writes_base64_and_size(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (42,)

        stored_id = RecoveryStore().upsert_artifact(
            "N-1", "thumbnail", b"\x00\x01\x02", "image/png", "server-a"
        )

        assert stored_id == 42
        sql, params = mock_cursor.execute.call_args[0]
        assert sql == UPSERT_ARTIFACT_SQL
        assert params == (
            "N-1",
            "thumbnail",
            "thumbnail-N-1.png",
            "image/png",
            base64.b64encode(b"\x00\x01\x02").decode("ascii"),
            3,
            "server-a",
        )
        mock_conn.commit.assert_called_once()

    @patch(PATCH_TARGET)
    def test_explicit_file_name_kept(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (1,)

        RecoveryStore().upsert_artifact(
            "N-1", "document", b"%PDF", "application/pdf", "server-a", file_name="notice.pdf"
        )

        params = mock_cursor.execute.call_args[0][1]
        assert params[2] == "notice.pdf"

    def test_upsert_conflicts_on_document_and_kind(self) -> None:
        assert "ON CONFLICT (document_id, kind)" in UPSERT_ARTIFACT_SQL
        assert "DO UPDATE SET" in UPSERT_ARTIFACT_SQL

    @patch(PATCH_TARGET)
    def test_missing_returning_row_raises(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(StorageFailure, match="returned no id"):
            RecoveryStore().upsert_artifact("N-1", "document", b"x", "image/png", "server-a")

    @patch(PATCH_TARGET)
    def test_database_error_becomes_storage_failure(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.errors.StringDataRightTruncation("too long")

        with pytest.raises(StorageFailure) as exc_info:
            RecoveryStore().upsert_artifact("N-1", "document", b"x", "image/png", "server-a")

        assert exc_info.value.status_detail().startswith("persist: ")

    @patch(PATCH_TARGET)
    def test_operational_error_becomes_storage_unavailable(
        self, mock_get_conn: MagicMock
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(StorageUnavailable):
            RecoveryStore().upsert_artifact("N-1", "document", b"x", "image/png", "server-a")


class TestSaveArtifacts:
    @patch(PATCH_TARGET)
    def test_upserts_every_artifact_in_one_transaction(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [(7,), (8,)]

        ids = RecoveryStore().save_artifacts(
            "N-1", [_artifact("thumbnail"), _artifact("document")], "server-a"
        )

        assert ids == [7, 8]
        mock_conn.transaction.assert_called_once()
        kinds = [call.args[1][1] for call in mock_cursor.execute.call_args_list]
        assert kinds == ["thumbnail", "document"]

    @patch(PATCH_TARGET)
    def test_uses_artifact_file_name(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (1,)

        RecoveryStore().save_artifacts("N-1", [_artifact("document")], "server-a")

        params = mock_cursor.execute.call_args[0][1]
        assert params[2] == "document-N-1.png"
        assert params[6] == "server-a"


class TestMarkRecoveryStatus:
    @patch(PATCH_TARGET)
    def test_updates_status_columns(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        RecoveryStore().mark_recovery_status("N-1", True, "Recovered: thumbnail, document")

        sql, params = mock_cursor.execute.call_args[0]
        assert "UPDATE served_notices" in sql
        assert "recovery_date = NOW()" in sql
        assert params == (True, "Recovered: thumbnail, document", "N-1")
        mock_conn.commit.assert_called_once()

    @patch(PATCH_TARGET)
    def test_missing_source_record_raises(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(StorageFailure, match="not found"):
            RecoveryStore().mark_recovery_status("N-404", False, "fetch: gone")

        mock_conn.commit.assert_not_called()


class TestGetRecoveryStatus:
    @patch(PATCH_TARGET)
    def test_returns_status(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        when = datetime(2024, 5, 1, 12, 0)
        mock_cursor.fetchone.return_value = {
            "documents_recovered": True,
            "recovery_date": when,
            "recovery_status": "Recovered: document",
        }

        status = RecoveryStore().get_recovery_status("N-1")

        assert status == RecoveryStatus(
            recovered=True, recovered_at=when, status_detail="Recovered: document"
        )

    @patch(PATCH_TARGET)
    def test_never_attempted_returns_none(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "documents_recovered": False,
            "recovery_date": None,
            "recovery_status": None,
        }

        assert RecoveryStore().get_recovery_status("N-1") is None

    @patch(PATCH_TARGET)
    def test_unknown_record_returns_none(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert RecoveryStore().get_recovery_status("N-404") is None

    @patch(PATCH_TARGET)
    def test_is_recovered_false_after_failure(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {
            "documents_recovered": False,
            "recovery_date": datetime(2024, 5, 1),
            "recovery_status": "decrypt: invalid padding",
        }

        assert RecoveryStore().is_recovered("N-1") is False


class TestFindArtifacts:
    @patch(PATCH_TARGET)
    def test_maps_rows(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [
            {
                "id": 3,
                "document_id": "N-1",
                "kind": "document",
                "file_name": "document-N-1.png",
                "mime_type": "image/png",
                "file_data_base64": "AAECAwQ=",
                "file_size": 5,
                "uploaded_by": "server-a",
                "created_at": None,
                "updated_at": None,
            }
        ]

        records = RecoveryStore().find_artifacts("N-1")

        assert records == [
            StoredArtifactRecord(
                id=3,
                document_id="N-1",
                kind="document",
                file_name="document-N-1.png",
                mime_type="image/png",
                file_data_base64="AAECAwQ=",
                file_size=5,
                uploaded_by="server-a",
            )
        ]
