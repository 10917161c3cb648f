"""Pipeline orchestrator coordinating conversion, transcription, and publishing."""

from __future__ import annotations

import queue
import threading
from typing import BinaryIO, Optional

from ...config import Settings, get_settings
from ...data.models import Result, Submission, output_name
from ...errors import CancelledError, PipelineError, SubmissionValidationError, TranscodingError
from ...logging import get_logger
from ...services.transcription.base import TranscriptionService
from ..audio.base import Transcoder
from ..audio.pipe import StreamPipe
from ..cancellation import CancellationToken
from ..validation import validate_submission
from .invoker import DEFAULT_TRANSCRIPTION_TIMEOUT, TranscriptionInvoker
from .results import ResultCollector, ResultStream

LOGGER = get_logger(__name__)

_POLL_INTERVAL = 0.05


class Scriber:
    """Turn media submissions into subtitle or transcript results.

    Each :meth:`process` call runs the transcoder on one worker thread while the
    calling thread feeds the converted audio to the transcription service
    through a bounded :class:`StreamPipe`. Successful results are published to
    the shared :class:`ResultCollector` returned by :meth:`collect`.
    """

    def __init__(
        self,
        transcoder: Transcoder,
        transcription: TranscriptionService,
        *,
        collector: Optional[ResultCollector] = None,
        transcription_timeout: float = DEFAULT_TRANSCRIPTION_TIMEOUT,
        pipe_capacity: int = 16,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self.transcoder = transcoder
        self.invoker = TranscriptionInvoker(transcription, timeout=transcription_timeout)
        self.pipe_capacity = pipe_capacity
        self.chunk_size = chunk_size
        self._collector = collector or ResultCollector()

    @classmethod
    def from_settings(
        cls,
        transcoder: Transcoder,
        transcription: TranscriptionService,
        settings: Optional[Settings] = None,
    ) -> "Scriber":
        settings = settings or get_settings()
        return cls(
            transcoder,
            transcription,
            collector=ResultCollector(settings.results_capacity),
            transcription_timeout=settings.transcription_timeout,
            pipe_capacity=settings.pipe_capacity,
            chunk_size=settings.chunk_size,
        )

    def collect(self) -> ResultStream:
        """Return the read-only stream of published results."""

        return self._collector.reader()

    def process(self, submission: Submission, token: Optional[CancellationToken] = None) -> None:
        """Convert, transcribe, and publish ``submission``.

        Raises a :class:`~scriber.errors.PipelineError` on failure, in which case
        nothing is published. ``submission.data`` is closed before returning on
        every path.
        """

        token = token or CancellationToken()
        LOGGER.info("Processing %s", submission.name)

        try:
            validate_submission(submission)
        except SubmissionValidationError as exc:
            LOGGER.warning("Rejected submission %r: %s", submission.name, exc)
            if submission.data is not None:
                submission.data.close()
            raise

        data = submission.data
        assert data is not None  # guaranteed by validation

        try:
            result = self._run(submission, data, token)
            LOGGER.debug("Publishing %s", result.name)
            self._collector.publish(result, token)
        except PipelineError as exc:
            LOGGER.warning("Processing %s failed: %s", submission.name, exc)
            raise
        finally:
            data.close()

        LOGGER.info("Processing complete: %s -> %s (%d bytes)", submission.name, result.name, len(result.text))

    def _run(self, submission: Submission, data: BinaryIO, token: CancellationToken) -> Result:
        token.raise_if_cancelled()

        pipe = StreamPipe(self.pipe_capacity, self.chunk_size)
        outcome: "queue.Queue[Optional[BaseException]]" = queue.Queue(maxsize=1)

        with token.child() as conversion:
            worker = threading.Thread(
                target=self._transcode,
                args=(data, pipe.writer, conversion, outcome),
                name=f"transcode-{submission.name}",
                daemon=True,
            )

            transcription_error: Optional[PipelineError] = None
            text = b""
            try:
                LOGGER.debug("Converting and transcribing %s", submission.name)
                worker.start()
                text = self.invoker.invoke(pipe.reader, submission, token)
            except PipelineError as exc:
                transcription_error = exc
            finally:
                pipe.reader.close()
                if transcription_error is not None:
                    LOGGER.debug("Stopping conversion of %s", submission.name)
                    conversion.cancel(CancelledError("transcription stopped before conversion finished"))

            LOGGER.debug("Reconciling %s", submission.name)
            transcoding_error = self._await_outcome(outcome, token)

            # The transcoder only saw the consumer go away.
            if isinstance(transcoding_error, BrokenPipeError) or (
                transcoding_error is not None and transcoding_error is conversion.error
            ):
                transcoding_error = None

        if transcoding_error is not None:
            if isinstance(transcoding_error, PipelineError):
                raise transcoding_error
            raise TranscodingError(f"transcoding failed: {transcoding_error}") from transcoding_error
        if transcription_error is not None:
            raise transcription_error

        return Result(name=output_name(submission.name, submission.output_kind), text=text)

    def _transcode(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        token: CancellationToken,
        outcome: "queue.Queue[Optional[BaseException]]",
    ) -> None:
        error: Optional[BaseException] = None
        try:
            self.transcoder.convert(source, sink, token)
        except Exception as exc:
            error = exc
        finally:
            sink.close()
            outcome.put(error)

    def _await_outcome(
        self,
        outcome: "queue.Queue[Optional[BaseException]]",
        token: CancellationToken,
    ) -> Optional[BaseException]:
        while True:
            token.raise_if_cancelled()
            try:
                return outcome.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue


__all__ = ["Scriber"]
