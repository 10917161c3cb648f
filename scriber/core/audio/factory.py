"""Factory helpers for constructing transcoders."""

from __future__ import annotations

from typing import Optional

from ...config import Settings, get_settings
from ...logging import get_logger
from .base import Transcoder
from .ffmpeg_backend import FFmpegTranscoder
from .passthrough import PassthroughTranscoder

LOGGER = get_logger(__name__)


class TranscoderConfigurationError(RuntimeError):
    """Raised when a transcoder cannot be configured."""


def create_transcoder(backend: Optional[str] = None, settings: Optional[Settings] = None) -> Transcoder:
    """Create the :class:`Transcoder` named by ``backend`` or the configured default."""

    settings = settings or get_settings()
    name = (backend or settings.transcoder_backend or "").strip().lower()

    if name == "ffmpeg":
        LOGGER.debug(
            "Using FFmpeg transcoder (%s Hz, %s channels, %s)",
            settings.sample_rate,
            settings.channels,
            settings.bit_rate,
        )
        return FFmpegTranscoder(
            settings.ffmpeg_binary,
            sample_rate=settings.sample_rate,
            channels=settings.channels,
            bit_rate=settings.bit_rate,
            chunk_size=settings.chunk_size,
        )

    if name == "passthrough":
        return PassthroughTranscoder(chunk_size=settings.chunk_size)

    raise TranscoderConfigurationError(f"Unknown transcoder backend: {backend or name}")


__all__ = ["TranscoderConfigurationError", "create_transcoder"]
