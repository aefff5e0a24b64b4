import threading
from concurrent.futures import Future, ThreadPoolExecutor

from recapify.logging.logger import Log
from recapify.resilience.cancellation import NEVER_CANCELLED, CancellationToken
from recapify.resilience.exceptions import RetryExhaustedError
from recapify.resilience.retry import BackoffPolicy, retry_call
from recapify.speech.base import BaseSpeechBackend
from recapify.speech.exceptions import (
    EndpointMismatchError,
    SpeechSynthesisError,
    TransientSpeechError,
)
from recapify.speech.models import SynthesizedAudio
from recapify.text.chunker import split_text


class SpeechSynthesizer:
    """Turns a whole text into one audio payload.

    The text is chunked to the backend's request-size limit, every chunk is
    synthesized with retry-with-backoff, and the results are concatenated in
    source order. Any chunk that fails for good aborts the whole operation.
    """

    def __init__(
        self,
        *,
        backend: BaseSpeechBackend,
        retry_policy: BackoffPolicy,
        chunk_size: int,
        fallback_backend: BaseSpeechBackend | None = None,
        max_parallel_chunks: int = 1,
    ) -> None:
        self._backend = backend
        self._fallback = fallback_backend
        self._retry_policy = retry_policy
        self._chunk_size = chunk_size
        self._max_parallel_chunks = max(1, max_parallel_chunks)

    @property
    def audio_format(self) -> str:
        return self._backend.AUDIO_FORMAT

    def resolve_voice(self, voice: str) -> str:
        return self._backend.resolve_voice(voice)

    def synthesize(
        self,
        text: str,
        voice: str,
        cancel_token: CancellationToken = NEVER_CANCELLED,
    ) -> SynthesizedAudio:
        """Synthesize `text` with a logical voice.

        Raises:
            SpeechSynthesisError: if any chunk fails after retries and fallback.
            OperationCancelledError: if cancelled during a wait.
        """
        chunks = split_text(text, self._chunk_size)
        if not chunks:
            raise SpeechSynthesisError("Nothing to synthesize: text is empty")

        voice_id = self.resolve_voice(voice)
        Log.info(
            f"Synthesizing {len(chunks)} chunk(s) with voice {voice_id} via {self._backend.name}"
        )
        primary_broken = threading.Event()

        if self._max_parallel_chunks == 1 or len(chunks) == 1:
            parts = [
                self._synthesize_chunk(
                    chunk, index, len(chunks), voice_id, primary_broken, cancel_token
                )
                for index, chunk in enumerate(chunks)
            ]
        else:
            parts = self._synthesize_parallel(chunks, voice_id, primary_broken, cancel_token)

        audio = b"".join(parts)
        Log.info(f"Combined {len(parts)} audio chunk(s) into {len(audio)} bytes")
        return SynthesizedAudio(
            data=audio,
            voice_id=voice_id,
            format=self.audio_format,
            chunk_count=len(chunks),
        )

    def _synthesize_parallel(
        self,
        chunks: list[str],
        voice_id: str,
        primary_broken: threading.Event,
        cancel_token: CancellationToken,
    ) -> list[bytes]:
        local_token = cancel_token.child()
        try:
            with ThreadPoolExecutor(
                max_workers=min(self._max_parallel_chunks, len(chunks)),
                thread_name_prefix="tts-chunk",
            ) as executor:
                futures: list[Future[bytes]] = [
                    executor.submit(
                        self._synthesize_chunk,
                        chunk,
                        index,
                        len(chunks),
                        voice_id,
                        primary_broken,
                        local_token,
                    )
                    for index, chunk in enumerate(chunks)
                ]
                try:
                    # Collected by index so the output order is source order.
                    return [future.result() for future in futures]
                except BaseException:
                    local_token.cancel()
                    for future in futures:
                        future.cancel()
                    raise
        finally:
            cancel_token.detach(local_token)

    def _synthesize_chunk(
        self,
        chunk: str,
        index: int,
        total: int,
        voice_id: str,
        primary_broken: threading.Event,
        cancel_token: CancellationToken,
    ) -> bytes:
        Log.debug(f"Processing chunk {index + 1}/{total} with length {len(chunk)}")
        if primary_broken.is_set() and self._fallback is not None:
            return self._with_retries(self._fallback, chunk, voice_id, cancel_token)
        try:
            return self._with_retries(self._backend, chunk, voice_id, cancel_token)
        except EndpointMismatchError as primary_error:
            if self._fallback is None:
                raise
            primary_broken.set()
            Log.warning(
                f"{self._backend.name} unreachable ({primary_error}); "
                f"trying {self._fallback.name}"
            )
            try:
                return self._with_retries(self._fallback, chunk, voice_id, cancel_token)
            except SpeechSynthesisError as fallback_error:
                raise SpeechSynthesisError(
                    f"Primary endpoint failed: {primary_error}; "
                    f"fallback endpoint failed: {fallback_error}"
                ) from fallback_error

    def _with_retries(
        self,
        backend: BaseSpeechBackend,
        chunk: str,
        voice_id: str,
        cancel_token: CancellationToken,
    ) -> bytes:
        try:
            return retry_call(
                lambda: backend.synthesize(chunk, voice_id, cancel_token),
                self._retry_policy,
                retry_on=(TransientSpeechError,),
                description=f"Speech request to {backend.name}",
                cancel_token=cancel_token,
            )
        except RetryExhaustedError as exc:
            raise SpeechSynthesisError(str(exc)) from exc
