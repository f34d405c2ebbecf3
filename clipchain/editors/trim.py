"""Trim editor: lossless range extraction."""

from pathlib import Path

from clipchain import ffutil
from clipchain.logging_utils import get_logger
from clipchain.manifest import TrimConfig
from clipchain.runner import CommandRunner

log = get_logger(__name__)


def apply_trim(
    input_path: Path,
    output_path: Path,
    config: TrimConfig,
    runner: CommandRunner | None = None,
) -> Path:
    if config.end is not None:
        bound = f"end {config.end}"
    elif config.duration is not None:
        bound = f"{config.duration}s from start"
    else:
        bound = "end of video"
    log.info("Trimming from %s to %s", config.start or "beginning", bound)

    return ffutil.extract_range(
        input_path,
        output_path,
        start=config.start,
        end=config.end,
        duration=config.duration,
        runner=runner,
    )
