from unittest.mock import MagicMock, patch

import pytest

from recapify.database.models import JobKind
from recapify.database.repositories.job_repository import JobRepository

_GET_CONN = "recapify.database.repositories.job_repository.get_connection"


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestEnqueue:
    @patch(_GET_CONN)
    def test_returns_new_job_id(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (7,)

        job_id = JobRepository().enqueue("doc-1", JobKind.GENERATE_AUDIO, "male-1")

        assert job_id == 7
        assert mock_cursor.execute.call_args.args[1] == ("doc-1", "generate_audio", "male-1")
        mock_conn.commit.assert_called_once()

    @patch(_GET_CONN)
    def test_missing_row_raises(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(RuntimeError, match="returned no row"):
            JobRepository().enqueue("doc-1", JobKind.SUMMARIZE)


class TestClaimNextJob:
    def test_claims_pending_job(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = {
            "id": 3,
            "document_id": "doc-1",
            "kind": "summarize",
            "voice": None,
            "status": "pending",
        }

        job = JobRepository().claim_next_job(mock_conn)

        assert job is not None
        assert job.id == 3
        assert job.kind is JobKind.SUMMARIZE
        assert job.status == "processing"
        assert "SKIP LOCKED" in mock_cursor.execute.call_args.args[0]
        mock_conn.execute.assert_called_once()
        mock_conn.commit.assert_called_once()

    def test_returns_none_when_queue_empty(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = None

        assert JobRepository().claim_next_job(mock_conn) is None
        mock_conn.execute.assert_not_called()


class TestMarkOutcome:
    @patch(_GET_CONN)
    def test_mark_failed_records_error(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        JobRepository().mark_failed(3, "model unavailable")

        assert mock_conn.execute.call_args.args[1] == ("model unavailable", 3)
        mock_conn.commit.assert_called_once()

    @patch(_GET_CONN)
    def test_mark_done(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        JobRepository().mark_done(3)

        assert mock_conn.execute.call_args.args[1] == (3,)
