"""Caption editor: burns a subtitle file into the video."""

from pathlib import Path

from clipchain import ffutil
from clipchain.filters import SubtitleBurnFilter
from clipchain.logging_utils import get_logger
from clipchain.runner import CommandRunner

log = get_logger(__name__)


def burn_captions(
    input_path: Path,
    subtitle_path: Path,
    output_path: Path,
    style: str = "standard",
    runner: CommandRunner | None = None,
) -> Path:
    """Hard-burn subtitles into video using a named style preset."""
    burn = SubtitleBurnFilter(subtitle_path=str(subtitle_path), style=style)
    log.info("Burning captions from %s (style: %s)", subtitle_path, style)
    ffutil.filter_video(
        input_path, output_path, video_filter=burn.to_filter(), copy_audio=True, runner=runner
    )
    return output_path
