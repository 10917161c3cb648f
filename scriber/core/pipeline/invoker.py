"""Deadline-bounded calls into a transcription service."""

from __future__ import annotations

from typing import BinaryIO

from ...data.models import OutputKind, Submission
from ...errors import PipelineError, TranscriptionError
from ...logging import get_logger
from ...services.transcription.base import TranscriptionRequest, TranscriptionService
from ..cancellation import CancellationToken

LOGGER = get_logger(__name__)

DEFAULT_TRANSCRIPTION_TIMEOUT = 5 * 60.0


class TranscriptionInvoker:
    """Run one transcription with a deadline measured from the start of the call."""

    def __init__(
        self,
        service: TranscriptionService,
        timeout: float = DEFAULT_TRANSCRIPTION_TIMEOUT,
    ) -> None:
        self.service = service
        self.timeout = timeout

    def invoke(self, audio: BinaryIO, submission: Submission, token: CancellationToken) -> bytes:
        request = TranscriptionRequest(
            name=submission.name,
            language=submission.language,
            format=OutputKind(submission.output_kind).value,
            audio=audio,
        )

        with token.child(timeout=self.timeout) as scoped:
            interrupt = getattr(audio, "interrupt", None)
            remove_callback = (
                scoped.add_callback(lambda: interrupt(scoped.error)) if interrupt is not None else None
            )
            LOGGER.debug("Transcribing %s (deadline %.0fs)", submission.name, self.timeout)
            try:
                text = self.service.transcribe(request, scoped)
            except Exception as exc:
                error = scoped.error
                if error is not None and error is not exc:
                    raise error from exc
                if error is not None or isinstance(exc, PipelineError):
                    raise
                raise TranscriptionError(f"transcription failed: {exc}") from exc
            finally:
                if remove_callback is not None:
                    remove_callback()

        return text


__all__ = ["DEFAULT_TRANSCRIPTION_TIMEOUT", "TranscriptionInvoker"]
