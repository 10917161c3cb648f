"""Audio conversion package."""

from .base import Transcoder
from .pipe import PipeReader, PipeWriter, StreamPipe

__all__ = ["PipeReader", "PipeWriter", "StreamPipe", "Transcoder"]
