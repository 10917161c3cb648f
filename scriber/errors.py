"""Exception hierarchy raised by the scriber pipeline."""

from __future__ import annotations

from typing import Optional


class PipelineError(RuntimeError):
    """Base error for every failure surfaced by :class:`~scriber.core.pipeline.orchestrator.Scriber`."""

    @property
    def cause(self) -> Optional[BaseException]:
        """The exception this error was raised from, if any."""

        return self.__cause__


class SubmissionValidationError(PipelineError, ValueError):
    """Raised when a submission does not satisfy its structural preconditions."""

    default_message = "submission is invalid"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class NameRequiredError(SubmissionValidationError):
    default_message = "name is required"


class ExtensionRequiredError(SubmissionValidationError):
    default_message = "extension is required"


class UnsupportedOutputKindError(SubmissionValidationError):
    default_message = "output type is not supported"


class LanguageRequiredError(SubmissionValidationError):
    default_message = "language is required"


class DataRequiredError(SubmissionValidationError):
    default_message = "data is required"


class TranscodingError(PipelineError):
    """Raised when the audio conversion subprocess cannot start or fails."""

    def __init__(
        self,
        message: str,
        *,
        diagnostics: str = "",
        returncode: Optional[int] = None,
    ) -> None:
        self.diagnostics = diagnostics
        self.returncode = returncode
        if diagnostics:
            message = f"{message}: {diagnostics}"
        super().__init__(message)


class TranscriptionError(PipelineError):
    """Raised when the transcription service fails."""


class CancelledError(PipelineError):
    """Raised when the caller cancelled the operation."""


class DeadlineExceededError(CancelledError):
    """Raised when a bounded operation ran past its deadline."""


__all__ = [
    "CancelledError",
    "DataRequiredError",
    "DeadlineExceededError",
    "ExtensionRequiredError",
    "LanguageRequiredError",
    "NameRequiredError",
    "PipelineError",
    "SubmissionValidationError",
    "TranscodingError",
    "TranscriptionError",
    "UnsupportedOutputKindError",
]
