"""Tests for the command line interface."""

from __future__ import annotations

import os

import pytest
from typer.testing import CliRunner

from scriber import cli, config

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings", None)
    for key in list(os.environ):
        if key.startswith("SCRIBER_"):
            monkeypatch.delenv(key, raising=False)
    yield


def _offline_args(*extra: str) -> list[str]:
    return ["--transcoder", "passthrough", "--transcription-backend", "dummy", *extra]


def test_transcribe_writes_artifacts(tmp_path) -> None:
    media = tmp_path / "lecture.wav"
    media.write_bytes(b"\x00" * 32)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        cli.app,
        ["transcribe", str(media), *_offline_args("--output-dir", str(out_dir), "--output-kind", "transcript")],
    )

    assert result.exit_code == 0, result.output
    artifact = out_dir / "lecture.txt"
    assert artifact.exists()
    assert b"32 bytes of audio" in artifact.read_bytes()
    assert "lecture.txt" in result.output


def test_transcribe_reports_failures_and_continues(tmp_path) -> None:
    bad = tmp_path / "clip"
    bad.write_bytes(b"no extension")
    good = tmp_path / "talk.mp3"
    good.write_bytes(b"audio")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        cli.app,
        ["transcribe", str(bad), str(good), *_offline_args("--output-dir", str(out_dir))],
    )

    assert result.exit_code == 1
    assert "extension is required" in result.output
    assert (out_dir / "talk.srt").exists()


def test_transcribe_rejects_unknown_backend(tmp_path) -> None:
    media = tmp_path / "lecture.mp4"
    media.write_bytes(b"media")

    result = runner.invoke(
        cli.app,
        ["transcribe", str(media), "--transcoder", "passthrough", "--transcription-backend", "nope"],
    )

    assert result.exit_code == 2


def test_transcribe_uses_configured_backends(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SCRIBER_TRANSCODER_BACKEND", "passthrough")
    monkeypatch.setenv("SCRIBER_TRANSCRIPTION_BACKEND", "dummy")
    monkeypatch.setenv("SCRIBER_OUTPUT_DIR", str(tmp_path / "configured"))
    media = tmp_path / "memo.ogg"
    media.write_bytes(b"ogg")

    result = runner.invoke(cli.app, ["transcribe", str(media)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "configured" / "memo.srt").exists()


def test_settings_command_lists_environment_names() -> None:
    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == 0
    assert "SCRIBER_SAMPLE_RATE" in result.output
    assert "SCRIBER_TRANSCRIPTION_TIMEOUT" in result.output
