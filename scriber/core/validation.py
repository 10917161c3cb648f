"""Structural checks applied to submissions before any work starts."""

from __future__ import annotations

from ..data.models import OutputKind, Submission, file_extension
from ..errors import (
    DataRequiredError,
    ExtensionRequiredError,
    LanguageRequiredError,
    NameRequiredError,
    UnsupportedOutputKindError,
)


def _is_supported_kind(kind: object) -> bool:
    try:
        OutputKind(kind)
    except ValueError:
        return False
    return True


def validate_submission(submission: Submission) -> None:
    """Raise the first :class:`SubmissionValidationError` ``submission`` violates."""

    if not submission.name:
        raise NameRequiredError()

    if not file_extension(submission.name):
        raise ExtensionRequiredError()

    if not _is_supported_kind(submission.output_kind):
        raise UnsupportedOutputKindError()

    if not submission.language:
        raise LanguageRequiredError()

    if submission.data is None:
        raise DataRequiredError()


__all__ = ["validate_submission"]
