from recapify.database.models import JobKind, JobRecord
from recapify.database.repositories.document_repository import DocumentRepository
from recapify.database.repositories.job_repository import JobRepository
from recapify.logging.logger import Log
from recapify.processor.processor import DocumentPipeline
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken


class JobRunner:
    """Run one job, catch exceptions, and record the outcome.

    Failed jobs are never re-queued; the document's FAILED status is what
    the user retries from.
    """

    def __init__(
        self,
        pipeline: DocumentPipeline,
        job_repo: JobRepository,
        doc_repo: DocumentRepository,
    ) -> None:
        self._pipeline = pipeline
        self._job_repo = job_repo
        self._doc_repo = doc_repo

    def run(self, job: JobRecord, cancel_token: CancellationToken = NEVER_CANCELLED) -> None:
        """Execute a single job with error handling."""
        with Log.document_scope(job.document_id):
            Log.info(f"Running {job.kind.value} job {job.id}")
            try:
                self._dispatch(job, cancel_token)
            except Exception as exc:
                Log.error(f"Job {job.id} failed: {exc}")
                self._job_repo.mark_failed(job.id, str(exc))
                return
            self._job_repo.mark_done(job.id)
            Log.info(f"Job {job.id} completed successfully")

    def _dispatch(self, job: JobRecord, cancel_token: CancellationToken) -> None:
        if job.kind is JobKind.SUMMARIZE:
            self._pipeline.summarize(job.document_id, cancel_token)
        elif job.kind is JobKind.GENERATE_AUDIO:
            document = self._doc_repo.find_by_id(job.document_id)
            self._pipeline.generate_audio(
                job.document_id, document.owner_id, job.voice, cancel_token
            )
        else:
            raise ValueError(f"Unknown job kind: {job.kind}")
