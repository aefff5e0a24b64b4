import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from recapify.config.settings import Settings
from recapify.database.connection import close_pool, get_connection, init_pool
from recapify.database.models import DocumentStatus, JobKind

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "recapify" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "recapify_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to a scratch database")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        conn.execute("TRUNCATE documents CASCADE")
        conn.commit()
        yield conn
        conn.rollback()


@pytest.fixture
def seed_document(db_conn: psycopg.Connection[Any]) -> str:
    document_id = str(uuid.uuid4())
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO documents
            (id, filename, file_type, owner_id, raw_file_ref, raw_file_url, status)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                document_id,
                "report.pdf",
                "application/pdf",
                "user-1",
                "documents/report.pdf",
                "file:///tmp/documents/report.pdf",
                DocumentStatus.PROCESSING.value,
            ),
        )
    db_conn.commit()
    return document_id


@pytest.fixture
def seed_job(db_conn: psycopg.Connection[Any], seed_document: str) -> int:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO processing_jobs (document_id, kind, status)
            VALUES (%s, %s, 'pending')
            RETURNING id
            """,
            (seed_document, JobKind.SUMMARIZE.value),
        )
        row = cur.fetchone()
        assert row is not None
    db_conn.commit()
    return int(row[0])
