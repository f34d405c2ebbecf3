"""Tests for the Whisper transcription analyzer."""

from pathlib import Path

import pytest

from clipchain.analyzers.transcribe import transcribe, whisper_binary
from clipchain.errors import SubtitleNotProducedError, ToolFailedError
from clipchain.runner import CommandResult

from conftest import FakeRunner


class FailingWhisper(FakeRunner):
    def run(self, command, args):
        self.calls.append([command, *args])
        return CommandResult(1, "", "RuntimeError: model not found")


def test_whisper_bin_env_override(monkeypatch):
    monkeypatch.setenv("WHISPER_BIN", "/opt/whisper/bin/whisper")
    assert whisper_binary() == "/opt/whisper/bin/whisper"


def test_writes_srt(tmp_path: Path, video: Path, monkeypatch):
    monkeypatch.setenv("WHISPER_BIN", "whisper")
    runner = FakeRunner()
    out = transcribe(video, tmp_path / "subs" / "talk.srt", model="small", runner=runner)

    assert out.read_text().startswith("1\n00:00:00,000")
    command, *args = runner.calls[0]
    assert command == "whisper"
    assert args[0] == str(video)
    assert args[args.index("--model") + 1] == "small"
    assert args[args.index("--output_format") + 1] == "srt"
    assert "--language" not in args


def test_language_passed_through(tmp_path: Path, video: Path):
    runner = FakeRunner()
    transcribe(video, tmp_path / "talk.srt", language="de", runner=runner)
    args = runner.calls[0]
    assert args[args.index("--language") + 1] == "de"


def test_no_srt_produced(tmp_path: Path, video: Path):
    with pytest.raises(SubtitleNotProducedError):
        transcribe(video, tmp_path / "talk.srt", runner=FakeRunner(whisper_writes=False))
    assert not (tmp_path / "talk.srt").exists()


def test_whisper_failure(tmp_path: Path, video: Path):
    with pytest.raises(ToolFailedError) as exc:
        transcribe(video, tmp_path / "talk.srt", runner=FailingWhisper())
    assert exc.value.returncode == 1
    assert "model not found" in exc.value.stderr_tail()
