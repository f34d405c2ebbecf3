"""Speech-to-text analyzer backed by the OpenAI Whisper CLI."""

import os
import shutil
import tempfile
from pathlib import Path

from clipchain.errors import SubtitleNotProducedError, ToolFailedError
from clipchain.logging_utils import get_logger
from clipchain.runner import CommandRunner, check_tools, default_runner

log = get_logger(__name__)

WHISPER_ENV = "WHISPER_BIN"


def whisper_binary() -> str:
    """``$WHISPER_BIN`` if set, else ``whisper`` from PATH."""
    override = os.environ.get(WHISPER_ENV)
    if override:
        return override
    return shutil.which("whisper") or "whisper"


def transcribe(
    input_path: Path,
    output_path: Path,
    model: str = "base",
    language: str | None = None,
    runner: CommandRunner | None = None,
) -> Path:
    """Transcribe ``input_path`` to an SRT file at ``output_path``.

    Raises:
        ToolNotFoundError: if the whisper binary cannot be found.
        SubtitleNotProducedError: if whisper exits cleanly without an SRT.
    """
    runner = runner or default_runner()
    binary = whisper_binary()
    check_tools(runner, binary)

    log.info("Transcribing %s (model: %s, language: %s)", input_path, model, language or "auto-detect")

    with tempfile.TemporaryDirectory(prefix="clipchain_whisper_") as tmpdir:
        args = [
            str(input_path),
            "--model", model,
            "--output_format", "srt",
            "--output_dir", tmpdir,
        ]
        if language:
            args += ["--language", language]

        result = runner.run(binary, args)
        if not result.ok:
            raise ToolFailedError(
                f"whisper failed (rc={result.returncode})",
                command=[binary, *args],
                returncode=result.returncode,
                stderr=result.stderr,
            )

        produced = sorted(Path(tmpdir).glob("*.srt"))
        if not produced:
            raise SubtitleNotProducedError("Whisper did not produce an SRT file")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(produced[0], output_path)

    with output_path.open(encoding="utf-8", errors="replace") as f:
        line_count = sum(1 for _ in f)
    log.info("Transcription complete: %s (%d lines)", output_path, line_count)
    return output_path
