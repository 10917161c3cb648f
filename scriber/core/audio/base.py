"""Audio conversion abstractions."""

from __future__ import annotations

import abc
from typing import BinaryIO, Optional

from ..cancellation import CancellationToken


class Transcoder(abc.ABC):
    """Convert an arbitrary media stream into the audio encoding sent for transcription."""

    name: str = "transcoder"

    @abc.abstractmethod
    def convert(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Stream ``source`` through the conversion into ``sink``.

        Returns once the conversion finished. ``source`` and ``sink`` are left
        open. A :class:`BrokenPipeError` raised by ``sink`` propagates
        unchanged; every other failure is reported as
        :class:`~scriber.errors.TranscodingError`.
        """


__all__ = ["Transcoder"]
