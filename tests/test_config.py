"""Tests for configuration helpers."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from scriber import config


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Ensure each test starts with a clean configuration environment."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings", None)

    for key in list(os.environ):
        if key.startswith("SCRIBER_"):
            monkeypatch.delenv(key, raising=False)

    yield


def test_defaults_match_reference_pipeline() -> None:
    settings = config.get_settings()

    assert settings.sample_rate == 5200
    assert settings.channels == 2
    assert settings.bit_rate == "32k"
    assert settings.transcription_timeout == 300.0
    assert settings.results_capacity == 10
    assert settings.output_dir == Path(".")


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SCRIBER_SAMPLE_RATE", "16000")
    monkeypatch.setenv("SCRIBER_TRANSCRIPTION_BACKEND", "dummy")

    settings = config.get_settings()

    assert settings.sample_rate == 16000
    assert settings.transcription_backend == "dummy"
    assert config.get_settings() is settings


def test_env_file_is_read(tmp_path) -> None:
    (tmp_path / ".env").write_text("SCRIBER_RESULTS_CAPACITY=4\n")

    assert config.get_settings().results_capacity == 4


def test_list_environment_settings_reflects_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SCRIBER_CHANNELS", "1")

    entries = {entry.env_name: entry for entry in config.list_environment_settings()}

    assert "SCRIBER_FFMPEG_BINARY" in entries
    assert "SCRIBER_OPENAI_API_KEY" in entries
    assert entries["SCRIBER_CHANNELS"].value == 1
    assert not entries["SCRIBER_CHANNELS"].is_default
    assert entries["SCRIBER_SAMPLE_RATE"].is_default
    assert entries["SCRIBER_OUTPUT_DIR"].default == Path(".")
