"""Dummy transcription service for testing or offline usage."""

from __future__ import annotations

from ...core.cancellation import CancellationToken
from .base import TranscriptionRequest, TranscriptionService


class DummyTranscriptionService(TranscriptionService):
    def __init__(self, chunk_size: int = 64 * 1024) -> None:
        self.chunk_size = chunk_size

    def transcribe(self, request: TranscriptionRequest, token: CancellationToken) -> bytes:
        received = 0
        while True:
            token.raise_if_cancelled()
            data = request.audio.read(self.chunk_size)
            if not data:
                break
            received += len(data)
        text = (
            f"Dummy {request.format} for '{request.name}' ({request.language}, "
            f"{received} bytes of audio). Replace with a real transcription backend."
        )
        return text.encode("utf-8")


__all__ = ["DummyTranscriptionService"]
