"""Text overlay editor."""

from pathlib import Path

from clipchain import ffutil
from clipchain.filters import DrawTextFilter
from clipchain.logging_utils import get_logger
from clipchain.manifest import OverlayConfig
from clipchain.runner import CommandRunner

log = get_logger(__name__)


def overlay_filter(config: OverlayConfig) -> DrawTextFilter:
    return DrawTextFilter(
        text=config.text,
        start=config.start_seconds,
        end=config.end_seconds,
        position=config.position,
        fontsize=config.fontsize,
        fontcolor=config.fontcolor,
        background=config.background,
    )


def apply_overlay(
    input_path: Path,
    output_path: Path,
    config: OverlayConfig,
    runner: CommandRunner | None = None,
) -> DrawTextFilter:
    drawtext = overlay_filter(config)
    log.info(
        "Overlaying %r at %s, visible %.3fs -> %.3fs",
        config.text, config.position, drawtext.start, drawtext.visible_until,
    )
    ffutil.filter_video(
        input_path, output_path, video_filter=drawtext.to_filter(), copy_audio=True, runner=runner
    )
    return drawtext
