from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from recapify.database.connection import get_connection
from recapify.database.models import SummaryRecord
from recapify.processor.exceptions import SummaryNotFoundError

_COLUMNS = """
    id, document_id, content, short_summary, key_points, was_truncated,
    text_length, created_at
"""


def _to_record(row: dict[str, Any]) -> SummaryRecord:
    return SummaryRecord(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        content=row["content"],
        short_summary=row["short_summary"],
        key_points=list(row["key_points"] or []),
        was_truncated=row["was_truncated"],
        text_length=row["text_length"],
        created_at=row["created_at"],
    )


class SummaryRepository:
    """Database operations for the summaries table (one row per document)."""

    def replace_for_document(
        self,
        *,
        summary_id: str,
        document_id: str,
        content: str,
        short_summary: str,
        key_points: list[str],
        was_truncated: bool,
        text_length: int,
    ) -> SummaryRecord:
        """Insert the document's summary, replacing any previous one.

        The UNIQUE(document_id) constraint plus ON CONFLICT keeps at most one
        summary per document. A replaced row keeps its original id, which audio
        tracks reference, and takes the new content.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO summaries
                    (id, document_id, content, short_summary, key_points,
                     was_truncated, text_length)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (document_id) DO UPDATE
                    SET content = EXCLUDED.content,
                        short_summary = EXCLUDED.short_summary,
                        key_points = EXCLUDED.key_points,
                        was_truncated = EXCLUDED.was_truncated,
                        text_length = EXCLUDED.text_length,
                        created_at = NOW()
                    RETURNING {_COLUMNS}
                    """,
                    (
                        summary_id,
                        document_id,
                        content,
                        short_summary,
                        Jsonb(key_points),
                        was_truncated,
                        text_length,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Upsert of summary for document {document_id} returned no row")
        return _to_record(row)

    def find_by_document_id(self, document_id: str) -> SummaryRecord:
        """Raises:
        SummaryNotFoundError: if the document has no summary.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM summaries WHERE document_id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise SummaryNotFoundError(f"No summary for document {document_id}")
        return _to_record(row)
