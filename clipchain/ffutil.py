"""FFmpeg/ffprobe command helpers."""

import json
import re
from pathlib import Path
from typing import Sequence

from clipchain.errors import ToolFailedError
from clipchain.models import ProbeResult, SilenceEvent
from clipchain.runner import CommandResult, CommandRunner, check_tools, default_runner
from clipchain.timecode import format_seconds

_NUMBER = r"(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)"
_SILENCE_START_RE = re.compile(rf"silence_start: {_NUMBER}")
_SILENCE_END_RE = re.compile(rf"silence_end: {_NUMBER}")


def check_ffmpeg(runner: CommandRunner | None = None) -> None:
    """Raise ToolNotFoundError if ffmpeg/ffprobe are not on PATH."""
    check_tools(runner or default_runner(), "ffmpeg", "ffprobe")


def run_ffmpeg(
    args: Sequence[str], what: str, runner: CommandRunner | None = None
) -> CommandResult:
    """Run ``ffmpeg -y <args>`` and raise ToolFailedError on a non-zero exit."""
    runner = runner or default_runner()
    full_args = ["-y", "-hide_banner", *args]
    result = runner.run("ffmpeg", full_args)
    if not result.ok:
        raise ToolFailedError(
            f"ffmpeg {what} failed (rc={result.returncode})",
            command=["ffmpeg", *full_args],
            returncode=result.returncode,
            stderr=result.stderr,
        )
    return result


def probe(input_path: Path, runner: CommandRunner | None = None) -> ProbeResult:
    """Extract media metadata via ffprobe."""
    runner = runner or default_runner()
    args = [
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    result = runner.run("ffprobe", args)
    if not result.ok:
        raise ToolFailedError(
            f"ffprobe failed on {input_path} (rc={result.returncode})",
            command=["ffprobe", *args],
            returncode=result.returncode,
            stderr=result.stderr,
        )
    try:
        data = json.loads(result.stdout)
        duration = float(data["format"]["duration"])
    except (ValueError, KeyError, TypeError) as e:
        raise ToolFailedError(
            f"ffprobe returned no usable duration for {input_path}: {e}",
            command=["ffprobe", *args],
            returncode=result.returncode,
            stderr=result.stderr,
        ) from e

    streams = data.get("streams", [])
    video_stream = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio_stream = next((s for s in streams if s.get("codec_type") == "audio"), None)

    fps = None
    if video_stream and "/" in video_stream.get("r_frame_rate", ""):
        num, den = video_stream["r_frame_rate"].split("/")
        if int(den):
            fps = int(num) / int(den)

    return ProbeResult(
        duration=duration,
        has_video=video_stream is not None,
        has_audio=audio_stream is not None,
        width=int(video_stream["width"]) if video_stream and "width" in video_stream else None,
        height=int(video_stream["height"]) if video_stream and "height" in video_stream else None,
        fps=fps,
    )


def probe_duration(input_path: Path, runner: CommandRunner | None = None) -> float:
    return probe(input_path, runner).duration


def parse_silence_events(stderr: str, duration: float | None = None) -> list[SilenceEvent]:
    """Parse silencedetect output from ffmpeg stderr into SilenceEvents.

    A trailing ``silence_start`` without a matching ``silence_end`` means the
    silence runs to EOF: its end is ``duration`` when known, else None.
    Starts reported slightly below zero are clamped to zero.
    """
    starts = [max(0.0, float(m)) for m in _SILENCE_START_RE.findall(stderr)]
    ends = [max(0.0, float(m)) for m in _SILENCE_END_RE.findall(stderr)]

    events: list[SilenceEvent] = []
    for i, start in enumerate(starts):
        if i < len(ends):
            events.append(SilenceEvent(start=start, end=max(start, ends[i])))
        else:
            events.append(SilenceEvent(start=start, end=duration))
    return events


def detect_silence(
    input_path: Path,
    threshold_db: float,
    min_duration: float,
    duration: float | None = None,
    runner: CommandRunner | None = None,
) -> list[SilenceEvent]:
    """Run FFmpeg silencedetect and return silence events in time order."""
    runner = runner or default_runner()
    args = [
        "-hide_banner",
        "-i", str(input_path),
        "-af", f"silencedetect=noise={threshold_db}dB:d={min_duration}",
        "-f", "null", "-",
    ]
    result = runner.run("ffmpeg", args)

    # silencedetect reports on stderr; a non-zero exit with output still parses
    if not result.ok and not result.stderr:
        raise ToolFailedError(
            f"ffmpeg silencedetect failed (rc={result.returncode}) with no output",
            command=["ffmpeg", *args],
            returncode=result.returncode,
        )

    return parse_silence_events(result.stderr, duration=duration)


def extract_range(
    input_path: Path,
    output_path: Path,
    start: float | str | None = None,
    end: float | str | None = None,
    duration: float | str | None = None,
    runner: CommandRunner | None = None,
) -> Path:
    """Stream-copy a sub-range so the output timeline starts at zero."""
    args = ["-i", str(input_path)]
    if start is not None:
        args += ["-ss", _time_arg(start)]
    if end is not None:
        args += ["-to", _time_arg(end)]
    elif duration is not None:
        args += ["-t", _time_arg(duration)]
    args += ["-c", "copy", "-avoid_negative_ts", "make_zero", str(output_path)]
    run_ffmpeg(args, "extract", runner)
    return output_path


def write_concat_list(paths: Sequence[Path], list_path: Path) -> Path:
    lines = []
    for p in paths:
        escaped = str(p.resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


def concat_files(
    clip_paths: Sequence[Path],
    output_path: Path,
    list_path: Path,
    runner: CommandRunner | None = None,
) -> None:
    """Losslessly join clips in order with the concat demuxer."""
    if not clip_paths:
        raise ValueError("concat_files called with empty clip list")

    write_concat_list(clip_paths, list_path)
    args = [
        "-f", "concat",
        "-safe", "0",
        "-i", str(list_path),
        "-c", "copy",
        str(output_path),
    ]
    run_ffmpeg(args, "concat", runner)


def filter_video(
    input_path: Path,
    output_path: Path,
    video_filter: str | None = None,
    audio_filter: str | None = None,
    copy_audio: bool = False,
    runner: CommandRunner | None = None,
) -> None:
    """Re-encode through a video and/or audio filter chain."""
    args = ["-i", str(input_path)]
    if video_filter:
        args += ["-vf", video_filter]
    if audio_filter:
        args += ["-af", audio_filter]
    elif copy_audio:
        args += ["-c:a", "copy"]
    args.append(str(output_path))
    run_ffmpeg(args, "filter", runner)


def _time_arg(value: float | str) -> str:
    if isinstance(value, str):
        return value
    return format_seconds(value)
