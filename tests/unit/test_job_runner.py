from unittest.mock import MagicMock

from recapify.database.models import DocumentRecord, DocumentStatus, JobKind, JobRecord
from recapify.processor.exceptions import BackendFailureError
from recapify.resilience.cancellation import CancellationToken
from recapify.worker.job_runner import JobRunner


def _make_runner() -> tuple[JobRunner, MagicMock, MagicMock, MagicMock]:
    """Create a JobRunner with mocked dependencies."""
    mock_pipeline = MagicMock()
    mock_job_repo = MagicMock()
    mock_doc_repo = MagicMock()
    mock_doc_repo.find_by_id.return_value = DocumentRecord(
        id="doc-1",
        filename="a.pdf",
        file_type="application/pdf",
        owner_id="user-1",
        status=DocumentStatus.COMPLETED,
    )
    runner = JobRunner(mock_pipeline, mock_job_repo, mock_doc_repo)
    return runner, mock_pipeline, mock_job_repo, mock_doc_repo


def _make_job(kind: JobKind = JobKind.SUMMARIZE, voice: str | None = None) -> JobRecord:
    return JobRecord(id=1, document_id="doc-1", kind=kind, status="processing", voice=voice)


class TestSummarizeJob:
    def test_calls_pipeline_with_token(self) -> None:
        runner, mock_pipeline, _jobs, _docs = _make_runner()
        token = CancellationToken()

        runner.run(_make_job(), token)

        mock_pipeline.summarize.assert_called_once_with("doc-1", token)

    def test_marks_job_done(self) -> None:
        runner, _pipeline, mock_jobs, _docs = _make_runner()

        runner.run(_make_job())

        mock_jobs.mark_done.assert_called_once_with(1)
        mock_jobs.mark_failed.assert_not_called()


class TestAudioJob:
    def test_generates_audio_for_document_owner(self) -> None:
        runner, mock_pipeline, _jobs, _docs = _make_runner()
        token = CancellationToken()

        runner.run(_make_job(JobKind.GENERATE_AUDIO, "male-1"), token)

        mock_pipeline.generate_audio.assert_called_once_with("doc-1", "user-1", "male-1", token)


class TestFailure:
    def test_marks_job_failed_without_requeue(self) -> None:
        runner, mock_pipeline, mock_jobs, _docs = _make_runner()
        mock_pipeline.summarize.side_effect = BackendFailureError("model down")

        runner.run(_make_job())

        mock_jobs.mark_failed.assert_called_once_with(1, "model down")
        mock_jobs.mark_done.assert_not_called()
        mock_jobs.enqueue.assert_not_called()

    def test_does_not_propagate_exception(self) -> None:
        runner, mock_pipeline, _jobs, _docs = _make_runner()
        mock_pipeline.generate_audio.side_effect = RuntimeError("boom")

        runner.run(_make_job(JobKind.GENERATE_AUDIO, "female-1"))  # Should not raise
