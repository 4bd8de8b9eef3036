import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.schema import ensure_schema

# Minimal shape of the upstream tables the recovery job reads from.
CREATE_SERVED_NOTICES = """
    CREATE TABLE IF NOT EXISTS served_notices (
        notice_id VARCHAR(255) PRIMARY KEY,
        ipfs_hash VARCHAR(255),
        case_number VARCHAR(255),
        server_address VARCHAR(255),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_NOTICE_COMPONENTS = """
    CREATE TABLE IF NOT EXISTS notice_components (
        id SERIAL PRIMARY KEY,
        notice_id VARCHAR(255) NOT NULL,
        document_encryption_key TEXT
    )
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "notices_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings, wait_timeout_seconds=3.0)
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at one.")
    try:
        with get_connection() as conn:
            conn.execute(CREATE_SERVED_NOTICES)
            conn.execute(CREATE_NOTICE_COMPONENTS)
            conn.commit()
        ensure_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def seed_notice(
    db_conn: psycopg.Connection[Any],
) -> Generator[Any, None, None]:
    """Insert served notices on demand; rows and their artifacts are removed afterwards."""
    created: list[str] = []

    def _seed(content_ref: str, decryption_key: str | None = None) -> str:
        notice_id = f"test-{uuid.uuid4()}"
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO served_notices (notice_id, ipfs_hash, case_number, server_address)
                VALUES (%s, %s, %s, %s)
                """,
                (notice_id, content_ref, "CASE-TEST", "server-test"),
            )
            if decryption_key is not None:
                cur.execute(
                    """
                    INSERT INTO notice_components (notice_id, document_encryption_key)
                    VALUES (%s, %s)
                    """,
                    (notice_id, decryption_key),
                )
        db_conn.commit()
        created.append(notice_id)
        return notice_id

    yield _seed

    with db_conn.cursor() as cur:
        for notice_id in created:
            cur.execute("DELETE FROM document_storage WHERE document_id = %s", (notice_id,))
            cur.execute("DELETE FROM notice_components WHERE notice_id = %s", (notice_id,))
            cur.execute("DELETE FROM served_notices WHERE notice_id = %s", (notice_id,))
    db_conn.commit()
