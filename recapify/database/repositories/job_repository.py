from typing import Any

import psycopg
from psycopg.rows import dict_row

from recapify.database.connection import get_connection
from recapify.database.models import JobKind, JobRecord


class JobRepository:
    """Database operations for the processing_jobs table."""

    def enqueue(self, document_id: str, kind: JobKind, voice: str | None = None) -> int:
        """Insert a pending job and return its id."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO processing_jobs (document_id, kind, voice, status)
                    VALUES (%s, %s, %s, 'pending')
                    RETURNING id
                    """,
                    (document_id, kind.value, voice),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Enqueue of {kind.value} job for {document_id} returned no row")
        return int(row[0])

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the oldest pending job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, document_id, kind, voice, status
                FROM processing_jobs
                WHERE status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE processing_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        return JobRecord(
            id=row["id"],
            document_id=str(row["document_id"]),
            kind=JobKind(row["kind"]),
            status="processing",
            voice=row["voice"],
        )

    def mark_done(self, job_id: int) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET status = 'done', updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as failed. Jobs are never re-queued automatically."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        """Find a job by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, kind, voice, status,
                           error_message, locked_at, created_at, updated_at
                    FROM processing_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return JobRecord(
            id=row["id"],
            document_id=str(row["document_id"]),
            kind=JobKind(row["kind"]),
            status=row["status"],
            voice=row["voice"],
            error_message=row["error_message"],
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
