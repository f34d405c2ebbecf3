"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Sequence

import pytest

from clipchain.runner import CommandResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAMPLE_SRT = """\
1
00:00:00,000 --> 00:00:02,500
Hello there.

2
00:00:02,500 --> 00:00:05,000
Welcome back.
"""


class FakeRunner:
    """Plays ffmpeg, ffprobe and whisper without spawning processes.

    * ffprobe reports ``durations[file name]`` (or ``default_duration``).
    * ffmpeg silencedetect returns ``silence_stderr``.
    * Any other ffmpeg call writes a small file at its last argument, or an
      empty one when that file name is listed in ``empty_outputs``.
    * An ffmpeg call whose arguments contain ``fail_on`` exits 1.
    * whisper writes an SRT into ``--output_dir`` unless ``whisper_writes``
      is False.
    """

    def __init__(
        self,
        durations: dict[str, float] | None = None,
        default_duration: float = 30.0,
        silence_stderr: str = "",
        empty_outputs: Sequence[str] = (),
        fail_on: str | None = None,
        whisper_writes: bool = True,
    ):
        self.durations = durations or {}
        self.default_duration = default_duration
        self.silence_stderr = silence_stderr
        self.empty_outputs = set(empty_outputs)
        self.fail_on = fail_on
        self.whisper_writes = whisper_writes
        self.calls: list[list[str]] = []

    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append([command, *args])
        name = Path(command).name
        joined = " ".join(args)

        if name == "ffprobe":
            target = Path(args[-1]).name
            duration = self.durations.get(target, self.default_duration)
            payload = {"format": {"duration": str(duration)}, "streams": []}
            return CommandResult(0, json.dumps(payload), "")

        if name == "ffmpeg":
            if "silencedetect" in joined:
                return CommandResult(0, "", self.silence_stderr)
            if self.fail_on and self.fail_on in joined:
                return CommandResult(1, "", "Conversion failed!")
            out = Path(args[-1])
            if out.name in self.empty_outputs:
                out.write_bytes(b"")
            else:
                out.write_bytes(f"rendered by: {joined}".encode())
            return CommandResult(0, "", "")

        if "whisper" in name:
            if self.whisper_writes:
                out_dir = Path(args[args.index("--output_dir") + 1])
                (out_dir / f"{Path(args[0]).stem}.srt").write_text(SAMPLE_SRT)
            return CommandResult(0, "", "")

        raise AssertionError(f"Unexpected command: {command}")

    def ffmpeg_calls(self, marker: str = "") -> list[list[str]]:
        return [c for c in self.calls if Path(c[0]).name == "ffmpeg" and marker in " ".join(c)]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def video(tmp_path: Path) -> Path:
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"original video bytes")
    return path


@pytest.fixture
def srt_file(tmp_path: Path) -> Path:
    path = tmp_path / "existing.srt"
    path.write_text(SAMPLE_SRT)
    return path


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"
