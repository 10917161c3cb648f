"""Data models used by scriber."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional, Union

from pydantic import BaseModel, ConfigDict


class OutputKind(str, Enum):
    """Kind of text artifact produced for a submission."""

    SUBTITLES = "subtitles"
    TRANSCRIPT = "transcript"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS = {
    OutputKind.SUBTITLES: ".srt",
    OutputKind.TRANSCRIPT: ".txt",
}


@dataclass
class Submission:
    """One media stream offered to the pipeline.

    ``data`` is owned by the caller until it is handed to
    :meth:`Scriber.process <scriber.core.pipeline.orchestrator.Scriber.process>`,
    which closes it exactly once.
    """

    name: str
    output_kind: Union[OutputKind, str]
    language: str
    data: Optional[BinaryIO]


class Result(BaseModel):
    """Named text artifact published once a submission completes."""

    model_config = ConfigDict(frozen=True)

    name: str
    text: bytes


def file_extension(name: str) -> str:
    """Return the suffix of ``name`` starting at the last dot of its final path element.

    Leading dots count, so ``.mp4`` has the extension ``.mp4``; a name without
    any dot has none.
    """

    base = os.path.basename(name)
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


def output_name(name: str, kind: Union[OutputKind, str]) -> str:
    """Return ``name`` with its final extension replaced for ``kind``.

    >>> output_name("lecture.mp4", OutputKind.SUBTITLES)
    'lecture.srt'
    >>> output_name("archive.tar.gz", OutputKind.TRANSCRIPT)
    'archive.tar.txt'
    """

    extension = file_extension(name)
    stem = name[: len(name) - len(extension)]
    return stem + OutputKind(kind).extension


__all__ = ["OutputKind", "Result", "Submission", "file_extension", "output_name"]
