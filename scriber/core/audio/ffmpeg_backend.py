"""Streaming audio conversion powered by the FFmpeg command line tool."""

from __future__ import annotations

import collections
import contextlib
import io
import shutil
import subprocess
import threading
from pathlib import Path
from typing import BinaryIO, Deque, List, Optional

from ...errors import TranscodingError
from ...logging import get_logger
from ..cancellation import CancellationToken
from .base import Transcoder

LOGGER = get_logger(__name__)

_DIAGNOSTIC_LINES = 50
_JOIN_TIMEOUT = 5.0


class FFmpegBinaryNotFoundError(TranscodingError):
    """Raised when the configured FFmpeg executable cannot be located."""

    def __init__(self, binary: str) -> None:
        super().__init__(
            f"FFmpeg binary '{binary}' was not found on PATH. Install FFmpeg or set "
            "SCRIBER_FFMPEG_BINARY to its location."
        )
        self.binary = binary


class FFmpegTranscoder(Transcoder):
    """Convert media to 16-bit PCM WAV by piping it through an FFmpeg subprocess.

    The source is fed to FFmpeg's stdin from a dedicated thread while the
    calling thread copies stdout into the sink, so neither pipe buffer can fill
    up and stall the other side. A third thread keeps the tail of stderr for
    error reports.
    """

    name = "ffmpeg"

    def __init__(
        self,
        binary: str = "ffmpeg",
        *,
        sample_rate: int = 5200,
        channels: int = 2,
        bit_rate: str = "32k",
        chunk_size: int = 64 * 1024,
    ) -> None:
        self.binary = binary
        self.sample_rate = sample_rate
        self.channels = channels
        self.bit_rate = bit_rate
        self.chunk_size = chunk_size

    def convert(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        token: Optional[CancellationToken] = None,
    ) -> None:
        executable = _resolve_binary(self.binary)
        if executable is None:
            raise FFmpegBinaryNotFoundError(self.binary)

        command = self.build_command(executable)
        LOGGER.debug("Starting FFmpeg: %s", " ".join(command))

        try:
            process = subprocess.Popen(  # noqa: S603 - required to spawn ffmpeg
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except OSError as exc:
            raise TranscodingError(f"Failed to launch FFmpeg binary '{executable}'") from exc

        assert process.stdin is not None  # narrow type for mypy
        assert process.stdout is not None
        assert process.stderr is not None

        diagnostics: Deque[str] = collections.deque(maxlen=_DIAGNOSTIC_LINES)
        feed_errors: List[BaseException] = []

        feeder = threading.Thread(
            target=self._feed_loop,
            args=(source, process.stdin, feed_errors),
            name="ffmpeg-stdin",
            daemon=True,
        )
        stderr_thread = threading.Thread(
            target=self._stderr_loop,
            args=(process.stderr, diagnostics),
            name="ffmpeg-stderr",
            daemon=True,
        )
        feeder.start()
        stderr_thread.start()

        remove_callback = token.add_callback(lambda: _kill(process)) if token is not None else None
        try:
            self._pump(process.stdout, sink)
        except BaseException:
            _kill(process)
            raise
        finally:
            returncode = process.wait()
            with contextlib.suppress(OSError):
                process.stdout.close()
            feeder.join(timeout=_JOIN_TIMEOUT)
            stderr_thread.join(timeout=_JOIN_TIMEOUT)
            if remove_callback is not None:
                remove_callback()

        if token is not None:
            token.raise_if_cancelled()

        if returncode != 0:
            raise TranscodingError(
                f"ffmpeg exited with code {returncode}",
                diagnostics="\n".join(diagnostics),
                returncode=returncode,
            )

        if feed_errors:
            raise TranscodingError("reading input failed") from feed_errors[0]

    def build_command(self, executable: str) -> List[str]:
        command: List[str] = [
            executable,
            "-hide_banner",
            "-loglevel",
            "warning",
            "-nostats",
            "-y",
        ]
        command.extend(["-i", "pipe:0"])
        command.append("-vn")
        command.extend(["-acodec", "pcm_s16le"])
        command.extend(["-ar", str(self.sample_rate)])
        command.extend(["-ac", str(self.channels)])
        command.extend(["-b:a", self.bit_rate])
        command.extend(["-f", "wav", "pipe:1"])
        return command

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _pump(self, stdout: BinaryIO, sink: BinaryIO) -> None:
        written = 0
        while True:
            data = stdout.read(self.chunk_size)
            if not data:
                break
            sink.write(data)
            written += len(data)
        LOGGER.debug("FFmpeg produced %d bytes of audio", written)

    def _feed_loop(
        self,
        source: BinaryIO,
        stdin: BinaryIO,
        errors: List[BaseException],
    ) -> None:
        try:
            while True:
                try:
                    data = source.read(self.chunk_size)
                except (OSError, ValueError) as exc:
                    errors.append(exc)
                    break
                if not data:
                    break
                stdin.write(data)
        except (BrokenPipeError, ValueError):
            # FFmpeg stopped reading; its exit status tells why.
            LOGGER.debug("FFmpeg closed its input early")
        finally:
            with contextlib.suppress(OSError):
                stdin.close()

    def _stderr_loop(self, pipe: io.BufferedReader, diagnostics: Deque[str]) -> None:
        try:
            for line in iter(pipe.readline, b""):
                text = line.decode(errors="ignore").strip()
                if text:
                    diagnostics.append(text)
                    LOGGER.debug("ffmpeg: %s", text)
        finally:
            with contextlib.suppress(OSError):
                pipe.close()


def _kill(process: subprocess.Popen) -> None:
    if process.poll() is None:
        with contextlib.suppress(OSError):
            process.kill()


def _resolve_binary(binary: str) -> Optional[str]:
    """Return the absolute path to the requested FFmpeg binary if available."""

    if not binary:
        binary = "ffmpeg"

    found = shutil.which(binary)
    if found:
        return found

    candidate = Path(binary)
    if candidate.exists():
        return str(candidate)

    return None


__all__ = ["FFmpegBinaryNotFoundError", "FFmpegTranscoder"]
