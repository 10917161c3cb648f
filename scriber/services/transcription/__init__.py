"""Transcription services."""

from .base import TranscriptionRequest, TranscriptionService
from .dummy import DummyTranscriptionService

__all__ = ["DummyTranscriptionService", "TranscriptionRequest", "TranscriptionService"]
