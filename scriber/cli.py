"""Typer CLI entry point for scriber."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .config import get_settings, list_environment_settings
from .core.audio.base import Transcoder
from .core.audio.factory import TranscoderConfigurationError, create_transcoder
from .core.cancellation import CancellationToken
from .core.pipeline.orchestrator import Scriber
from .data.models import OutputKind, Submission
from .errors import PipelineError
from .logging import configure_logging, get_logger, level_for_verbosity
from .services.factory import ServiceConfigurationError, resolve_transcription_backend
from .services.transcription.base import TranscriptionService

app = typer.Typer(help="scriber media transcription")
LOGGER = get_logger(__name__)


def _get_transcoder(name: Optional[str]) -> Transcoder:
    try:
        return create_transcoder(name)
    except TranscoderConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _get_transcription_backend(name: Optional[str]) -> TranscriptionService:
    try:
        return resolve_transcription_backend(name)
    except ServiceConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.callback()
def main(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
) -> None:
    configure_logging(level_for_verbosity(verbose), force=True)


@app.command()
def transcribe(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Media files"),
    output_kind: OutputKind = typer.Option(OutputKind.SUBTITLES, case_sensitive=False, help="subtitles or transcript"),
    language: str = typer.Option("en", help="Spoken language of the media"),
    output_dir: Optional[Path] = typer.Option(None, help="Directory receiving the artifacts"),
    transcoder: Optional[str] = typer.Option(None, help="Transcoder backend: ffmpeg/passthrough"),
    transcription_backend: Optional[str] = typer.Option(None, help="Transcription backend: dummy/openai"),
    timeout: Optional[float] = typer.Option(None, help="Transcription deadline in seconds"),
) -> None:
    """Transcribe media files into subtitles or transcripts."""

    settings = get_settings()
    scriber = Scriber.from_settings(
        _get_transcoder(transcoder),
        _get_transcription_backend(transcription_backend),
        settings,
    )
    if timeout is not None:
        scriber.invoker.timeout = timeout

    target_dir = output_dir or settings.output_dir
    target_dir.mkdir(parents=True, exist_ok=True)

    failures = 0
    for path in files:
        token = CancellationToken()
        submission = Submission(
            name=path.name,
            output_kind=output_kind,
            language=language,
            data=path.open("rb"),
        )
        try:
            scriber.process(submission, token)
        except KeyboardInterrupt:
            token.cancel()
            typer.echo(f"{path.name}: cancelled", err=True)
            raise typer.Exit(code=130)
        except PipelineError as exc:
            failures += 1
            typer.echo(f"{path.name}: {exc}", err=True)
            continue

        result = scriber.collect().get(timeout=0)
        if result is None:  # pragma: no cover - process() publishes before returning
            failures += 1
            continue
        destination = target_dir / result.name
        destination.write_bytes(result.text)
        LOGGER.debug("Wrote %d bytes to %s", len(result.text), destination)
        typer.echo(f"{path.name} -> {destination}")

    if failures:
        raise typer.Exit(code=1)


@app.command()
def settings() -> None:
    """Show the environment-backed settings and their current values."""

    for entry in list_environment_settings():
        marker = "" if entry.is_default else "  (overridden)"
        typer.echo(f"{entry.env_name:<36} {entry.value!r}{marker}")


if __name__ == "__main__":  # pragma: no cover
    app()
