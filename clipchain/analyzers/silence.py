"""Silence detection analyzer and keep-segment planner."""

from pathlib import Path
from typing import Iterable

from clipchain import ffutil
from clipchain.errors import DegenerateResultError
from clipchain.logging_utils import get_logger
from clipchain.manifest import JumpCutConfig
from clipchain.models import KeepSegment, SilenceEvent, TimeRange
from clipchain.runner import CommandRunner

log = get_logger(__name__)


def plan_keep_segments(
    events: Iterable[SilenceEvent],
    duration: float,
    padding: float,
    min_duration: float = 0.0,
) -> list[KeepSegment]:
    """Turn ordered silence events into the spans of media to keep.

    Each silence is shrunk by ``padding`` at both ends, so speech onsets and
    tails survive the cut. A keep segment runs from the previous padded
    silence end to ``silence_start + padding``; a trailing segment covers
    whatever follows the last silence.

    Padding wider than half a silence gap makes neighbouring segments overlap
    in source time. They are not merged: the overlap plays twice.

    Events shorter than ``min_duration`` are ignored. An empty event stream
    yields one segment covering the whole media; silence over the whole media
    (with no padding) yields none.
    """
    if duration <= 0:
        raise ValueError(f"Media duration must be positive, got {duration}")
    if padding < 0:
        raise ValueError(f"Padding must not be negative, got {padding}")

    segments: list[KeepSegment] = []
    cursor = 0.0

    for event in events:
        silence_end = event.resolve_end(duration)
        if silence_end - event.start < min_duration:
            continue

        segment_end = min(event.start + padding, duration)
        if cursor < segment_end:
            if segments and cursor <= segments[-1].start:
                # Cursor never moved (silence shorter than padding at t=0): extend
                # the previous segment rather than emit one with the same start.
                last = segments[-1]
                segments[-1] = KeepSegment(
                    index=last.index, range=TimeRange(last.start, max(last.end, segment_end))
                )
            else:
                segments.append(
                    KeepSegment(index=len(segments), range=TimeRange(cursor, segment_end))
                )
        cursor = max(0.0, silence_end - padding)

    if cursor < duration:
        segments.append(KeepSegment(index=len(segments), range=TimeRange(cursor, duration)))

    return segments


def analyze_silence(
    input_path: Path,
    config: JumpCutConfig,
    runner: CommandRunner | None = None,
) -> tuple[list[SilenceEvent], list[KeepSegment], float]:
    """Probe, detect silence and plan keep segments.

    Returns ``(events, segments, duration)``.
    """
    duration = ffutil.probe_duration(input_path, runner)
    if duration <= 0:
        raise DegenerateResultError(
            f"Cannot remove silence from {input_path}: probed duration is {duration}s"
        )

    events = ffutil.detect_silence(
        input_path,
        threshold_db=config.threshold_db,
        min_duration=config.min_duration,
        duration=duration,
        runner=runner,
    )
    log.info(
        "Found %d silence periods in %.1fs (threshold %sdB, min %.2fs, padding %.2fs)",
        len(events), duration, config.threshold_db, config.min_duration, config.padding,
    )

    if not events:
        return events, [KeepSegment(index=0, range=TimeRange(0.0, duration))], duration

    segments = plan_keep_segments(events, duration, config.padding)
    return events, segments, duration
