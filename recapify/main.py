from recapify.config.settings import Settings
from recapify.database.connection import close_pool, init_pool
from recapify.database.models import JobKind
from recapify.database.repositories.document_repository import DocumentRepository
from recapify.database.repositories.job_repository import JobRepository
from recapify.logging.logger import Log
from recapify.processor.processor import build_pipeline
from recapify.resilience.cancellation import CancellationToken
from recapify.worker.job_runner import JobRunner
from recapify.worker.worker import Worker, run_workers


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loops."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        job_repo = JobRepository()
        pipeline = build_pipeline(
            settings,
            schedule=lambda document_id: job_repo.enqueue(document_id, JobKind.SUMMARIZE),
            schedule_audio=lambda document_id, voice: job_repo.enqueue(
                document_id, JobKind.GENERATE_AUDIO, voice
            ),
        )
        job_runner = JobRunner(pipeline, job_repo, DocumentRepository())
        shutdown_token = CancellationToken()
        workers = [
            Worker(job_repo, job_runner, settings, shutdown_token)
            for _ in range(settings.worker_concurrency)
        ]
        Log.info(f"Starting {len(workers)} worker(s)")
        run_workers(workers, shutdown_token)
    finally:
        close_pool()


if __name__ == "__main__":
    main()
