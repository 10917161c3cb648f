"""OpenAI powered transcription service."""

from __future__ import annotations

import queue
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ...config import get_settings
from ...core.cancellation import CancellationToken
from ...data.models import OutputKind
from ...logging import get_logger
from .base import TranscriptionRequest, TranscriptionService

LOGGER = get_logger(__name__)

_POLL_INTERVAL = 0.05

_RESPONSE_FORMATS: Dict[str, str] = {
    OutputKind.SUBTITLES.value: "srt",
    OutputKind.TRANSCRIPT.value: "text",
}

_Outcome = Tuple[Any, Optional[BaseException]]


class OpenAITranscriptionService(TranscriptionService):
    """Upload the audio stream to the OpenAI transcription endpoint.

    The stream is sent as a chunked multipart body while it is still being
    produced, so the client is built without retries: a consumed stream cannot
    be replayed.

    Each request runs on its own HTTP client and helper thread. When the token
    fires, the call returns with the token's error at once and the HTTP client
    is closed to abort the request in flight, whether it is still uploading or
    already waiting for the response.
    """

    def __init__(self, model: Optional[str] = None) -> None:
        settings = get_settings()
        self.model = model or settings.openai_transcription_model
        try:
            from openai import DefaultHttpxClient, OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAITranscriptionService") from exc
        self._http_client_factory = DefaultHttpxClient
        client_kwargs: Dict[str, Any] = {"max_retries": 0}
        if settings.openai_api_key:
            client_kwargs["api_key"] = settings.openai_api_key

        try:
            self.client = OpenAI(**client_kwargs)
        except OpenAIError as exc:
            message = str(exc)
            if "api_key" in message.lower():
                raise RuntimeError(
                    "OpenAI API key not configured. Set the OPENAI_API_KEY environment variable "
                    "or SCRIBER_OPENAI_API_KEY."
                ) from exc
            raise RuntimeError(f"Failed to initialise OpenAI transcription client: {message}") from exc

    def transcribe(self, request: TranscriptionRequest, token: CancellationToken) -> bytes:
        response_format = _RESPONSE_FORMATS.get(request.format, "text")
        filename = f"{Path(request.name).stem}.wav"
        options: Dict[str, Any] = {}
        remaining = token.remaining()
        if remaining is not None:
            options["timeout"] = remaining

        http_client = self._http_client_factory()
        client = self.client.with_options(http_client=http_client)
        outcome: "queue.Queue[_Outcome]" = queue.Queue(maxsize=1)

        def _request() -> None:
            try:
                response = client.audio.transcriptions.create(
                    model=self.model,
                    file=(filename, request.audio, "audio/wav"),
                    language=request.language,
                    response_format=response_format,
                    **options,
                )
            except Exception as exc:
                outcome.put((None, exc))
            else:
                outcome.put((response, None))

        LOGGER.info(
            "Requesting OpenAI transcription for %s (%s, %s)",
            request.name,
            request.language,
            response_format,
        )
        worker = threading.Thread(target=_request, name=f"openai-{request.name}", daemon=True)
        remove_callback = token.add_callback(http_client.close)
        try:
            worker.start()
            response, error = _await_response(outcome, token)
        finally:
            remove_callback()
            http_client.close()

        if error is not None:
            raise error
        return _response_text(response).encode("utf-8")


def _await_response(outcome: "queue.Queue[_Outcome]", token: CancellationToken) -> _Outcome:
    while True:
        try:
            return outcome.get(timeout=_POLL_INTERVAL)
        except queue.Empty:
            if token.cancelled:
                LOGGER.debug("Abandoning OpenAI request: %s", token.error)
                token.raise_if_cancelled()


def _response_text(response: Any) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    if isinstance(response, bytes):
        return response.decode("utf-8", errors="replace")
    if isinstance(response, dict):
        return str(response.get("text", "") or "")
    if hasattr(response, "text"):
        return str(getattr(response, "text", "") or "")
    return str(response)


__all__ = ["OpenAITranscriptionService"]
