"""Exception hierarchy shared by the pipeline, its stages and the CLI."""


class ClipChainError(Exception):
    """Base error for clipchain. ``exit_code`` is what the CLI exits with."""

    exit_code = 1


class ValidationError(ClipChainError, ValueError):
    """Caller input is unusable: missing file, bad flag combination, bad value."""

    exit_code = 2


class ToolNotFoundError(ClipChainError, RuntimeError):
    """An external binary (ffmpeg, ffprobe, whisper) could not be located."""

    exit_code = 3

    def __init__(self, tool: str, hint: str | None = None):
        super().__init__(f"{tool} not found on PATH")
        self.tool = tool
        self.hint = hint


class DegenerateResultError(ClipChainError):
    """The media content itself made the stage impossible."""

    exit_code = 4


class NoSpeechFoundError(DegenerateResultError):
    """Silence removal left nothing to keep."""


class SubtitleNotProducedError(DegenerateResultError):
    """The speech-to-text tool exited cleanly but wrote no subtitle file."""


class ToolFailedError(ClipChainError, RuntimeError):
    """An external tool exited non-zero."""

    exit_code = 5

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr

    def stderr_tail(self, limit: int = 500) -> str:
        return self.stderr[-limit:].strip()


class ToolTimeoutError(ToolFailedError):
    """An external tool exceeded its timeout on every attempt."""
