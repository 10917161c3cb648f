"""Transcoder that forwards already-normalised audio unchanged."""

from __future__ import annotations

from typing import BinaryIO, Optional

from ...errors import TranscodingError
from ...logging import get_logger
from ..cancellation import CancellationToken
from .base import Transcoder

LOGGER = get_logger(__name__)


class PassthroughTranscoder(Transcoder):
    name = "passthrough"

    def __init__(self, chunk_size: int = 64 * 1024) -> None:
        self.chunk_size = chunk_size

    def convert(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        token: Optional[CancellationToken] = None,
    ) -> None:
        copied = 0
        while True:
            if token is not None:
                token.raise_if_cancelled()
            try:
                data = source.read(self.chunk_size)
            except (OSError, ValueError) as exc:
                raise TranscodingError("reading input failed") from exc
            if not data:
                break
            sink.write(data)
            copied += len(data)
        LOGGER.debug("Passed %d bytes through unchanged", copied)


__all__ = ["PassthroughTranscoder"]
