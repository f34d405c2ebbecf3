"""External process collaborator.

Every ffmpeg, ffprobe and whisper invocation goes through a runner, so tests
can substitute a fake that never spawns a process.
"""

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from clipchain.errors import ToolNotFoundError, ToolTimeoutError
from clipchain.logging_utils import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT = 3600.0
TIMEOUT_ENV = "CLIPCHAIN_TOOL_TIMEOUT"

INSTALL_HINTS = {
    "ffmpeg": "Install ffmpeg: brew install ffmpeg (macOS) or apt install ffmpeg (Debian/Ubuntu)",
    "ffprobe": "ffprobe ships with ffmpeg: brew install ffmpeg or apt install ffmpeg",
    "whisper": "Install: pip install openai-whisper (or set WHISPER_BIN)",
}


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        ...


def timeout_from_env() -> float:
    raw = os.environ.get(TIMEOUT_ENV)
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        log.warning("Ignoring non-numeric %s=%r", TIMEOUT_ENV, raw)
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


class SubprocessRunner:
    """Run tools as blocking subprocesses with captured text output.

    A call that exceeds ``timeout`` is retried once; a second expiry raises
    ToolTimeoutError.
    """

    def __init__(self, timeout: float | None = None, attempts: int = 2):
        self.timeout = timeout if timeout is not None else timeout_from_env()
        self.attempts = attempts

    def resolve(self, command: str) -> str:
        if os.path.sep in command:
            if os.path.isfile(command) and os.access(command, os.X_OK):
                return command
            raise ToolNotFoundError(command, INSTALL_HINTS.get(os.path.basename(command)))
        found = shutil.which(command)
        if found is None:
            raise ToolNotFoundError(command, INSTALL_HINTS.get(command))
        return found

    def run(self, command: str, args: Sequence[str]) -> CommandResult:
        cmd = [self.resolve(command), *args]
        log.debug("CMD: %s", shlex.join(cmd))

        for attempt in range(1, self.attempts + 1):
            try:
                proc = subprocess.run(
                    cmd, capture_output=True, text=True, timeout=self.timeout
                )
            except subprocess.TimeoutExpired:
                log.warning(
                    "%s timed out after %.0fs (attempt %d/%d)",
                    command, self.timeout, attempt, self.attempts,
                )
                continue
            return CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")

        raise ToolTimeoutError(
            f"{command} timed out after {self.attempts} attempts of {self.timeout:.0f}s",
            command=cmd,
        )


def check_tools(runner: CommandRunner, *tools: str) -> None:
    """Raise ToolNotFoundError if any tool is missing.

    Only meaningful for runners that can resolve binaries; fakes are skipped.
    """
    resolve = getattr(runner, "resolve", None)
    if resolve is None:
        return
    for tool in tools:
        resolve(tool)


_default_runner: SubprocessRunner | None = None


def default_runner() -> SubprocessRunner:
    global _default_runner
    if _default_runner is None:
        _default_runner = SubprocessRunner()
    return _default_runner
