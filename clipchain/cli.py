"""Thin CLI entry point: builds a PipelineConfig and calls the engine."""

import argparse
import sys
import tempfile
from pathlib import Path

from clipchain.analyzers.transcribe import transcribe
from clipchain.editors.captions import burn_captions
from clipchain.editors.cut import apply_jumpcut
from clipchain.editors.overlay import apply_overlay
from clipchain.editors.speed import apply_speed
from clipchain.editors.trim import apply_trim
from clipchain.engine import process
from clipchain.errors import ClipChainError, ToolFailedError, ToolNotFoundError, ValidationError
from clipchain.filters import CAPTION_STYLES, OVERLAY_POSITIONS
from clipchain.ffutil import check_ffmpeg
from clipchain.logging_utils import setup_logging
from clipchain.manifest import (
    CaptionConfig,
    JumpCutConfig,
    OverlayConfig,
    PipelineConfig,
    SpeedConfig,
    TrimConfig,
    load_manifest,
)


class UsageParser(argparse.ArgumentParser):
    """Print usage to stdout on bad flags; the error itself goes to stderr."""

    def error(self, message: str):
        self.print_usage(sys.stdout)
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(2)


def default_output(input_path: Path, suffix: str) -> Path:
    return input_path.with_name(f"{input_path.stem}_{suffix}{input_path.suffix}")


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("input", type=Path, help="Input video file")
    p.add_argument("--output", "-o", type=Path, help="Output file path")


def build_parser() -> UsageParser:
    parser = UsageParser(
        prog="clipchain",
        description="clipchain: ffmpeg + whisper video editing pipeline.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # --- edit: the full pipeline ---
    edit = sub.add_parser("edit", help="Run several editing stages in a fixed order")
    edit.add_argument("input", type=Path, nargs="?", help="Input video file")
    edit.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    edit.add_argument("--output", "-o", type=Path, help="Final output path")
    edit.add_argument("--trim-start", help="Trim: start time (HH:MM:SS or seconds)")
    edit.add_argument("--trim-end", help="Trim: end time")
    edit.add_argument("--trim-duration", help="Trim: duration from start")
    edit.add_argument("--jumpcut", action="store_true", help="Remove silence/dead air")
    edit.add_argument("--jumpcut-threshold", type=float, default=-30.0, help="Silence threshold in dB")
    edit.add_argument("--jumpcut-duration", type=float, default=0.5, help="Minimum silence to cut (seconds)")
    edit.add_argument("--jumpcut-padding", type=float, default=0.1, help="Padding around speech (seconds)")
    edit.add_argument("--jumpcut-workers", type=int, default=1, help="Parallel segment extractions")
    edit.add_argument("--speed", type=float, help="Speed factor (1.5 = 1.5x, 0.5 = half speed)")
    edit.add_argument("--caption", action="store_true", help="Transcribe and burn in captions")
    edit.add_argument("--caption-style", choices=sorted(CAPTION_STYLES), default="standard")
    edit.add_argument("--caption-model", default="base", help="Whisper model size")
    edit.add_argument("--caption-language", help="Language code (default: auto-detect)")
    edit.add_argument("--caption-srt", type=Path, help="Use an existing SRT instead of transcribing")
    edit.add_argument("--overlay-text", help="Text to overlay")
    edit.add_argument("--overlay-start", default="0", help="Overlay start time")
    edit.add_argument("--overlay-end", help="Overlay end time (default: start + 5s)")
    edit.add_argument("--overlay-position", choices=list(OVERLAY_POSITIONS), default="center")
    edit.add_argument("--overlay-fontsize", type=int, default=48)
    edit.add_argument("--overlay-fontcolor", default="white")
    edit.add_argument("--overlay-bg", help="Background box color, e.g. black@0.5")

    # --- single stages ---
    trim = sub.add_parser("trim", help="Trim video by start/end timestamps")
    _add_common(trim)
    trim.add_argument("--start", help="Start time (HH:MM:SS or seconds)")
    bound = trim.add_mutually_exclusive_group()
    bound.add_argument("--end", help="End time")
    bound.add_argument("--duration", help="Duration from start")

    jc = sub.add_parser("jumpcut", help="Remove silence/dead air")
    _add_common(jc)
    jc.add_argument("--threshold", type=float, default=-30.0, help="Silence threshold in dB")
    jc.add_argument("--duration", type=float, default=0.5, help="Minimum silence to cut (seconds)")
    jc.add_argument("--padding", type=float, default=0.1, help="Padding around speech (seconds)")
    jc.add_argument("--workers", type=int, default=1, help="Parallel segment extractions")

    sp = sub.add_parser("speed", help="Change playback speed")
    _add_common(sp)
    sp.add_argument("--factor", type=float, required=True, help="Speed factor")

    tr = sub.add_parser("transcribe", help="Transcribe video/audio to SRT with Whisper")
    _add_common(tr)
    tr.add_argument("--model", default="base", help="Whisper model: tiny, base, small, medium, large")
    tr.add_argument("--language", help="Language code (default: auto-detect)")

    cap = sub.add_parser("caption", help="Burn SRT captions into video")
    _add_common(cap)
    cap.add_argument("srt", type=Path, help="Subtitle file")
    cap.add_argument("--style", choices=sorted(CAPTION_STYLES), default="standard")

    ov = sub.add_parser("overlay", help="Add a text overlay")
    _add_common(ov)
    ov.add_argument("--text", required=True, help="Text to overlay")
    ov.add_argument("--start", default="0", help="When to show text")
    ov.add_argument("--end", help="When to hide text (default: start + 5s)")
    ov.add_argument("--position", choices=list(OVERLAY_POSITIONS), default="center")
    ov.add_argument("--fontsize", type=int, default=48)
    ov.add_argument("--fontcolor", default="white")
    ov.add_argument("--bg", help="Background box color, e.g. black@0.5")

    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    """Build the immutable pipeline config for ``edit``."""
    if args.manifest:
        return load_manifest(args.manifest)
    if args.input is None:
        raise ValidationError("provide either an INPUT video or --manifest")

    trim_enabled = any(v is not None for v in (args.trim_start, args.trim_end, args.trim_duration))
    return PipelineConfig(
        input=args.input,
        output=args.output or default_output(args.input, "edited"),
        trim=TrimConfig(
            enabled=trim_enabled,
            start=args.trim_start,
            end=args.trim_end,
            duration=args.trim_duration,
        ),
        jumpcut=JumpCutConfig(
            enabled=args.jumpcut,
            threshold_db=args.jumpcut_threshold,
            min_duration=args.jumpcut_duration,
            padding=args.jumpcut_padding,
            max_workers=args.jumpcut_workers,
        ),
        speed=SpeedConfig(
            enabled=args.speed is not None,
            factor=args.speed if args.speed is not None else 1.0,
        ),
        caption=CaptionConfig(
            enabled=args.caption,
            style=args.caption_style,
            model=args.caption_model,
            language=args.caption_language,
            subtitle_path=args.caption_srt,
        ),
        overlay=OverlayConfig(
            enabled=args.overlay_text is not None,
            text=args.overlay_text or "",
            start=args.overlay_start,
            end=args.overlay_end,
            position=args.overlay_position,
            fontsize=args.overlay_fontsize,
            fontcolor=args.overlay_fontcolor,
            background=args.overlay_bg,
        ),
    )


def _require_input(path: Path) -> None:
    if not path.is_file():
        raise ValidationError(f"Input video not found: {path}")


def _run_edit(args: argparse.Namespace) -> None:
    config = config_from_args(args)

    def on_progress(stage: str, frac: float) -> None:
        print(f"  [{frac:3.0%}] {stage}")

    result = process(config, on_progress=on_progress)

    print()
    print(f"Done! Output: {result.output_path}")
    print(f"  Stages: {', '.join(result.stages_run) or 'none'}")
    print(f"  Duration: {result.duration_original:.1f}s -> {result.duration_final:.1f}s")
    if result.segments_removed:
        print(f"  Silent segments removed: {result.segments_removed} ({result.removed_seconds:.1f}s)")
    if result.caption_path:
        print(f"  Captions: {result.caption_path}")


def _run_trim(args: argparse.Namespace) -> None:
    _require_input(args.input)
    config = TrimConfig(enabled=True, start=args.start, end=args.end, duration=args.duration)
    check_ffmpeg()
    output = args.output or default_output(args.input, "trimmed")
    apply_trim(args.input, output, config)
    print(f"Output: {output}")


def _run_jumpcut(args: argparse.Namespace) -> None:
    _require_input(args.input)
    config = JumpCutConfig(
        enabled=True,
        threshold_db=args.threshold,
        min_duration=args.duration,
        padding=args.padding,
        max_workers=args.workers,
    )
    check_ffmpeg()
    output = args.output or default_output(args.input, "jumpcut")
    with tempfile.TemporaryDirectory(prefix="clipchain_") as tmp:
        result = apply_jumpcut(args.input, output, config, Path(tmp))
    print(f"Output: {output}")
    print(
        f"Original: {result.duration_original:.1f}s -> Edited: {result.duration_final:.1f}s "
        f"(removed {result.removed_seconds:.1f}s / {result.removed_percent:.0f}%)"
    )


def _run_speed(args: argparse.Namespace) -> None:
    _require_input(args.input)
    config = SpeedConfig(enabled=True, factor=args.factor)
    check_ffmpeg()
    output = args.output or default_output(args.input, "speed")
    apply_speed(args.input, output, config.factor)
    print(f"Speed adjusted to {config.factor}x")
    print(f"Output: {output}")


def _run_transcribe(args: argparse.Namespace) -> None:
    _require_input(args.input)
    output = args.output or args.input.with_suffix(".srt")
    transcribe(args.input, output, model=args.model, language=args.language)
    print(output)


def _run_caption(args: argparse.Namespace) -> None:
    _require_input(args.input)
    if not args.srt.is_file():
        raise ValidationError(f"SRT file not found: {args.srt}")
    check_ffmpeg()
    output = args.output or default_output(args.input, "captioned")
    burn_captions(args.input, args.srt, output, style=args.style)
    print(f"Output: {output}")


def _run_overlay(args: argparse.Namespace) -> None:
    _require_input(args.input)
    config = OverlayConfig(
        enabled=True,
        text=args.text,
        start=args.start,
        end=args.end,
        position=args.position,
        fontsize=args.fontsize,
        fontcolor=args.fontcolor,
        background=args.bg,
    )
    check_ffmpeg()
    output = args.output or default_output(args.input, "overlay")
    apply_overlay(args.input, output, config)
    print(f"Output: {output}")


COMMANDS = {
    "edit": _run_edit,
    "trim": _run_trim,
    "jumpcut": _run_jumpcut,
    "speed": _run_speed,
    "transcribe": _run_transcribe,
    "caption": _run_caption,
    "overlay": _run_overlay,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help(sys.stdout)
        return 1

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stdout)
        return 1

    setup_logging("DEBUG" if args.verbose else None, force=True)

    try:
        COMMANDS[args.command](args)
    except ValidationError as e:
        parser.print_usage(sys.stdout)
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except ToolNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.hint:
            print(e.hint, file=sys.stderr)
        return e.exit_code
    except ToolFailedError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.stderr:
            print(e.stderr_tail(), file=sys.stderr)
        return e.exit_code
    except ClipChainError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
