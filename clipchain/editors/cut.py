"""Jump-cut editor: extracts keep segments losslessly and joins them."""

import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from clipchain import ffutil
from clipchain.analyzers.silence import analyze_silence
from clipchain.errors import NoSpeechFoundError
from clipchain.logging_utils import get_logger
from clipchain.manifest import JumpCutConfig
from clipchain.models import KeepSegment, MediaAsset
from clipchain.runner import CommandRunner
from clipchain.timecode import format_timestamp

log = get_logger(__name__)


@dataclass
class JumpCutResult:
    output_path: Path
    duration_original: float
    duration_final: float
    segments_kept: int = 0
    silences_detected: int = 0

    @property
    def removed_seconds(self) -> float:
        return self.duration_original - self.duration_final

    @property
    def removed_percent(self) -> float:
        if self.duration_original <= 0:
            return 0.0
        return self.removed_seconds / self.duration_original * 100


def _extract_one(
    asset: MediaAsset,
    segment: KeepSegment,
    work_dir: Path,
    runner: CommandRunner | None,
) -> KeepSegment | None:
    clip_path = work_dir / f"seg_{segment.index:04d}{asset.extension}"
    log.debug(
        "Extracting segment %d: %s -> %s",
        segment.index,
        format_timestamp(segment.start, millis=True),
        format_timestamp(segment.end, millis=True),
    )
    # Open-ended extraction for the tail avoids truncating on probe rounding
    end = None if segment.end >= asset.duration else segment.end
    ffutil.extract_range(asset.path, clip_path, start=segment.start, end=end, runner=runner)

    if not clip_path.exists() or clip_path.stat().st_size == 0:
        log.warning(
            "Discarding empty segment %d [%.3f, %.3f]", segment.index, segment.start, segment.end
        )
        return None
    return segment.with_path(clip_path)


def extract_and_join(
    asset: MediaAsset,
    segments: Sequence[KeepSegment],
    output_path: Path,
    work_dir: Path,
    runner: CommandRunner | None = None,
    max_workers: int = 1,
) -> list[KeepSegment]:
    """Stream-copy each keep segment to its own clip, then concatenate in order.

    Returns the segments that survived extraction, each carrying its clip path.

    Raises:
        NoSpeechFoundError: if no segment produced a non-empty clip.
    """
    if max_workers > 1 and len(segments) > 1:
        log.debug("Extracting %d segments with %d workers", len(segments), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            extracted = list(
                executor.map(lambda s: _extract_one(asset, s, work_dir, runner), segments)
            )
    else:
        extracted = [_extract_one(asset, s, work_dir, runner) for s in segments]

    kept = [s for s in extracted if s is not None]
    if not kept:
        raise NoSpeechFoundError("No non-silent segments found; entire video would be removed")

    log.info("Concatenating %d segments", len(kept))
    ffutil.concat_files(
        [s.path for s in kept], output_path, work_dir / "concat.txt", runner=runner
    )
    return kept


def apply_jumpcut(
    input_path: Path,
    output_path: Path,
    config: JumpCutConfig,
    work_dir: Path,
    runner: CommandRunner | None = None,
) -> JumpCutResult:
    """Remove silence from ``input_path`` and write the result to ``output_path``.

    When no silence is detected the input is copied unchanged.
    """
    events, segments, duration = analyze_silence(input_path, config, runner)

    if not events:
        log.info("No silence detected; copying input as-is")
        shutil.copyfile(input_path, output_path)
        return JumpCutResult(
            output_path=output_path,
            duration_original=duration,
            duration_final=duration,
            segments_kept=1,
        )

    kept = extract_and_join(
        MediaAsset(path=input_path, duration=duration),
        segments,
        output_path,
        work_dir,
        runner=runner,
        max_workers=config.max_workers,
    )

    result = JumpCutResult(
        output_path=output_path,
        duration_original=duration,
        duration_final=ffutil.probe_duration(output_path, runner),
        segments_kept=len(kept),
        silences_detected=len(events),
    )
    log.info(
        "Original: %.1fs -> Edited: %.1fs (removed %.1fs / %.0f%%)",
        result.duration_original, result.duration_final,
        result.removed_seconds, result.removed_percent,
    )
    return result
