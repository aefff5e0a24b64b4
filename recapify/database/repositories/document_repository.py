from typing import Any

from psycopg.rows import dict_row

from recapify.database.connection import get_connection
from recapify.database.models import DocumentRecord, DocumentStatus
from recapify.processor.exceptions import DocumentNotFoundError, StateConflictError

_COLUMNS = """
    id, filename, file_type, owner_id, status, raw_file_ref, raw_file_url,
    extracted_text, uploaded_at, processed_at
"""


def _to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        filename=row["filename"],
        file_type=row["file_type"],
        owner_id=row["owner_id"],
        status=DocumentStatus(row["status"]),
        raw_file_ref=row["raw_file_ref"],
        raw_file_url=row["raw_file_url"],
        extracted_text=row["extracted_text"],
        uploaded_at=row["uploaded_at"],
        processed_at=row["processed_at"],
    )


class DocumentRepository:
    """Status store for the documents table.

    Every status change is a compare-and-set against the expected current
    status, so two writers can never both move the same document.
    """

    def create(
        self,
        *,
        document_id: str,
        filename: str,
        file_type: str,
        owner_id: str,
        raw_file_ref: str,
        raw_file_url: str,
        extracted_text: str | None,
        status: DocumentStatus,
    ) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (id, filename, file_type, owner_id, raw_file_ref, raw_file_url,
                     extracted_text, status)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        document_id,
                        filename,
                        file_type,
                        owner_id,
                        raw_file_ref,
                        raw_file_url,
                        extracted_text,
                        status.value,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of document {document_id} returned no row")
        return _to_record(row)

    def find_by_id(self, document_id: str) -> DocumentRecord:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _to_record(row)

    def transition_status(
        self,
        document_id: str,
        expected: DocumentStatus,
        new: DocumentStatus,
    ) -> None:
        """Move a document from `expected` to `new` status.

        Raises:
            StateConflictError: if the document is not currently in `expected`.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s
                    WHERE id = %s AND status = %s
                    """,
                    (new.value, document_id, expected.value),
                )
                updated = cur.rowcount
            conn.commit()

        if updated == 0:
            raise StateConflictError(
                f"Document {document_id} is not {expected.value}; "
                f"cannot move it to {new.value}"
            )

    def mark_completed(self, document_id: str) -> None:
        """PROCESSING -> COMPLETED, dropping the working state in the same write."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s,
                        processed_at = NOW(),
                        extracted_text = NULL,
                        raw_file_ref = NULL,
                        raw_file_url = NULL
                    WHERE id = %s AND status = %s
                    """,
                    (
                        DocumentStatus.COMPLETED.value,
                        document_id,
                        DocumentStatus.PROCESSING.value,
                    ),
                )
                updated = cur.rowcount
            conn.commit()

        if updated == 0:
            raise StateConflictError(
                f"Document {document_id} is not PROCESSING; cannot complete it"
            )

    def mark_failed(self, document_id: str) -> None:
        """PROCESSING -> FAILED. Raw file and cached text are kept for a retry."""
        self.transition_status(
            document_id, DocumentStatus.PROCESSING, DocumentStatus.FAILED
        )

    def update_extracted_text(self, document_id: str, extracted_text: str) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE documents SET extracted_text = %s WHERE id = %s",
                    (extracted_text, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def clear_raw_file(self, document_id: str) -> None:
        """Forget the raw-file reference after an extraction failure discarded it."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET raw_file_ref = NULL, raw_file_url = NULL, extracted_text = NULL
                    WHERE id = %s
                    """,
                    (document_id,),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()
