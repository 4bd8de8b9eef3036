import psycopg

from app.database.connection import get_connection
from app.logging.logger import Log
from app.recovery.exceptions import StorageUnavailable

CREATE_DOCUMENT_STORAGE = """
    CREATE TABLE IF NOT EXISTS document_storage (
        id SERIAL PRIMARY KEY,
        document_id VARCHAR(255) NOT NULL,
        kind VARCHAR(50) NOT NULL,
        file_name VARCHAR(255) NOT NULL,
        mime_type VARCHAR(100) NOT NULL,
        file_data_base64 TEXT NOT NULL,
        file_size INTEGER NOT NULL,
        uploaded_by VARCHAR(255),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (document_id, kind)
    )
"""

ADD_RECOVERY_COLUMNS = """
    ALTER TABLE served_notices
    ADD COLUMN IF NOT EXISTS documents_recovered BOOLEAN DEFAULT false,
    ADD COLUMN IF NOT EXISTS recovery_date TIMESTAMP,
    ADD COLUMN IF NOT EXISTS recovery_status TEXT
"""


def ensure_schema() -> None:
    """Create the artifact table and add recovery columns if missing.

    Raises ``StorageUnavailable`` when the statements fail, e.g. because the
    ``served_notices`` table does not exist.
    """
    try:
        with get_connection() as conn:
            conn.execute(CREATE_DOCUMENT_STORAGE)
            conn.execute(ADD_RECOVERY_COLUMNS)
            conn.commit()
    except psycopg.Error as exc:
        raise StorageUnavailable(f"schema setup failed: {exc}") from exc
    Log.info("Document storage table and recovery columns ready")
