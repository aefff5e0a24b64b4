import threading

from recapify.config.settings import Settings
from recapify.database.connection import get_connection
from recapify.database.models import JobRecord
from recapify.database.repositories.job_repository import JobRepository
from recapify.logging.logger import Log
from recapify.resilience.cancellation import CancellationToken
from recapify.resilience.exceptions import OperationCancelledError
from recapify.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> dispatch -> sleep when idle."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
        shutdown_token: CancellationToken | None = None,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._shutdown = shutdown_token if shutdown_token is not None else CancellationToken()

    @property
    def shutdown_token(self) -> CancellationToken:
        return self._shutdown

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs until the shutdown token is cancelled.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        Log.info("Worker started, polling for jobs")
        jobs_done = 0
        try:
            while not self._shutdown.cancelled:
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                job = self._try_claim_job()
                if job:
                    self._job_runner.run(job, self._shutdown)
                    jobs_done += 1
                else:
                    Log.debug("No jobs available, sleeping")
                    self._shutdown.sleep(self._settings.job_poll_interval_seconds)
        except OperationCancelledError:
            pass
        Log.info("Worker stopped")

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None


def run_workers(workers: list[Worker], shutdown_token: CancellationToken) -> None:
    """Run each worker loop in its own thread until interrupted.

    On KeyboardInterrupt the shared token is cancelled, so in-flight backoff
    and poll waits return within one interval, and the threads are joined.
    """
    threads = [
        threading.Thread(target=worker.run, name=f"worker-{index + 1}", daemon=True)
        for index, worker in enumerate(workers)
    ]
    for thread in threads:
        thread.start()
    try:
        while any(thread.is_alive() for thread in threads):
            for thread in threads:
                thread.join(timeout=0.5)
    except KeyboardInterrupt:
        Log.info("Worker shutting down gracefully")
        shutdown_token.cancel()
        for thread in threads:
            thread.join()
