"""Transcription service abstractions."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import BinaryIO

from ...core.cancellation import CancellationToken


@dataclass
class TranscriptionRequest:
    """Audio stream plus the metadata a service needs to transcribe it."""

    name: str
    language: str
    format: str
    audio: BinaryIO


class TranscriptionService(abc.ABC):
    """Convert an audio stream into text."""

    @abc.abstractmethod
    def transcribe(self, request: TranscriptionRequest, token: CancellationToken) -> bytes:
        """Return the text for ``request``.

        Implementations must give up once ``token`` is cancelled and should not
        wait longer than ``token.remaining()``.
        """
        raise NotImplementedError


__all__ = ["TranscriptionRequest", "TranscriptionService"]
