from __future__ import annotations

import io
import threading
import time
from types import SimpleNamespace

import pytest

from scriber.core.cancellation import CancellationToken
from scriber.errors import CancelledError, DeadlineExceededError
from scriber.services.transcription.base import TranscriptionRequest
from scriber.services.transcription.openai_client import OpenAITranscriptionService


class FakeHttpClient:
    """Stands in for the per-request httpx client; close() aborts pending calls."""

    instances: list["FakeHttpClient"] = []

    def __init__(self) -> None:
        self.closed = threading.Event()
        FakeHttpClient.instances.append(self)

    def close(self) -> None:
        self.closed.set()


def _make_service(response: object, block: bool = False) -> tuple[OpenAITranscriptionService, list[dict]]:
    service = object.__new__(OpenAITranscriptionService)
    service.model = "test-model"
    service._http_client_factory = FakeHttpClient

    calls: list[dict] = []

    class DummyTranscriptions:
        def __init__(self, http_client: FakeHttpClient) -> None:
            self.http_client = http_client

        def create(self, **kwargs):
            kwargs["uploaded"] = kwargs["file"][1].read()
            calls.append(kwargs)
            if block:
                self.http_client.closed.wait(5)
                raise ConnectionError("connection closed")
            return response

    def with_options(http_client: FakeHttpClient) -> SimpleNamespace:
        return SimpleNamespace(audio=SimpleNamespace(transcriptions=DummyTranscriptions(http_client)))

    service.client = SimpleNamespace(with_options=with_options)
    return service, calls


def _request(fmt: str = "subtitles") -> TranscriptionRequest:
    return TranscriptionRequest(
        name="lecture.mp4",
        language="en",
        format=fmt,
        audio=io.BytesIO(b"RIFF-audio"),
    )


def test_transcribe_requests_srt_for_subtitles() -> None:
    service, calls = _make_service("1\n00:00:00,000 --> 00:00:01,000\nhello world\n")

    with CancellationToken().child(timeout=60) as token:
        text = service.transcribe(_request("subtitles"), token)

    assert text.startswith(b"1\n00:00:00,000")
    call = calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == "srt"
    assert call["language"] == "en"
    assert call["file"][0] == "lecture.wav"
    assert call["uploaded"] == b"RIFF-audio"
    assert 0 < call["timeout"] <= 60


def test_transcribe_requests_text_for_transcripts() -> None:
    service, calls = _make_service(SimpleNamespace(text="hello world"))

    text = service.transcribe(_request("transcript"), CancellationToken())

    assert text == b"hello world"
    assert calls[0]["response_format"] == "text"
    assert "timeout" not in calls[0]


def test_transcribe_accepts_dict_responses() -> None:
    service, _ = _make_service({"text": "olá mundo"})

    assert service.transcribe(_request("transcript"), CancellationToken()) == "olá mundo".encode("utf-8")


def test_transcribe_closes_its_http_client_after_success() -> None:
    FakeHttpClient.instances.clear()
    service, _ = _make_service("hello")

    service.transcribe(_request("transcript"), CancellationToken())

    assert len(FakeHttpClient.instances) == 1
    assert FakeHttpClient.instances[0].closed.is_set()


def test_deadline_aborts_request_waiting_for_response() -> None:
    FakeHttpClient.instances.clear()
    service, calls = _make_service("never returned", block=True)

    started = time.monotonic()
    with CancellationToken().child(timeout=0.1) as token:
        with pytest.raises(DeadlineExceededError):
            service.transcribe(_request(), token)

    assert time.monotonic() - started < 1.0
    assert calls[0]["uploaded"] == b"RIFF-audio"
    assert FakeHttpClient.instances[0].closed.is_set()


def test_cancellation_aborts_request_in_flight() -> None:
    service, _ = _make_service("never returned", block=True)
    token = CancellationToken()
    threading.Timer(0.1, token.cancel).start()

    with pytest.raises(CancelledError) as excinfo:
        service.transcribe(_request(), token)

    assert excinfo.value is token.error
