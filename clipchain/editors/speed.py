"""Speed editor: pitch-preserving playback speed change."""

from pathlib import Path

from clipchain import ffutil
from clipchain.filters import TempoPlan, build_tempo_plan
from clipchain.logging_utils import get_logger
from clipchain.runner import CommandRunner

log = get_logger(__name__)


def apply_speed(
    input_path: Path,
    output_path: Path,
    factor: float,
    runner: CommandRunner | None = None,
) -> TempoPlan:
    """Rescale video timestamps and chain atempo stages in a single encode."""
    plan = build_tempo_plan(factor)
    log.info("Changing speed to %gx (atempo stages: %s)", factor, list(plan.stages))
    ffutil.filter_video(
        input_path,
        output_path,
        video_filter=plan.video_filter(),
        audio_filter=plan.audio_filter(),
        runner=runner,
    )
    return plan
