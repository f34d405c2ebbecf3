"""Orchestrator: runs the editing pipeline defined by a PipelineConfig."""

import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from clipchain import ffutil
from clipchain.analyzers.transcribe import transcribe
from clipchain.editors.captions import burn_captions
from clipchain.editors.cut import apply_jumpcut
from clipchain.editors.overlay import apply_overlay
from clipchain.editors.speed import apply_speed
from clipchain.editors.trim import apply_trim
from clipchain.errors import ValidationError
from clipchain.logging_utils import get_logger
from clipchain.manifest import PipelineConfig
from clipchain.runner import CommandRunner, default_runner

log = get_logger(__name__)

ProgressCallback = Callable[[str, float], None]


@dataclass
class EngineResult:
    output_path: Path
    stages_run: list[str] = field(default_factory=list)
    duration_original: float = 0.0
    duration_final: float = 0.0
    segments_removed: int = 0
    removed_seconds: float = 0.0
    caption_path: Path | None = None
    work_dir: Path | None = None


@dataclass
class StageContext:
    """Per-run state handed to each stage."""

    config: PipelineConfig
    work_dir: Path
    runner: CommandRunner
    result: EngineResult


@dataclass(frozen=True)
class Stage:
    name: str
    enabled: Callable[[PipelineConfig], bool]
    apply: Callable[[StageContext, Path, Path], None]


def _trim(ctx: StageContext, src: Path, dst: Path) -> None:
    apply_trim(src, dst, ctx.config.trim, runner=ctx.runner)


def _jumpcut(ctx: StageContext, src: Path, dst: Path) -> None:
    cut = apply_jumpcut(src, dst, ctx.config.jumpcut, ctx.work_dir, runner=ctx.runner)
    ctx.result.segments_removed = cut.silences_detected
    ctx.result.removed_seconds = cut.removed_seconds


def _speed(ctx: StageContext, src: Path, dst: Path) -> None:
    apply_speed(src, dst, ctx.config.speed.factor, runner=ctx.runner)


def _caption(ctx: StageContext, src: Path, dst: Path) -> None:
    caption = ctx.config.caption
    if caption.subtitle_path is not None:
        log.info("Using existing subtitles: %s", caption.subtitle_path)
        srt = Path(caption.subtitle_path)
    else:
        srt = transcribe(
            src,
            ctx.work_dir / "captions.srt",
            model=caption.model,
            language=caption.language,
            runner=ctx.runner,
        )
        ctx.result.caption_path = srt
    burn_captions(src, srt, dst, style=caption.style, runner=ctx.runner)


def _overlay(ctx: StageContext, src: Path, dst: Path) -> None:
    apply_overlay(src, dst, ctx.config.overlay, runner=ctx.runner)


# Execution order is fixed here, independent of how options were supplied.
STAGES: tuple[Stage, ...] = (
    Stage("trim", lambda c: c.trim.enabled, _trim),
    Stage("jumpcut", lambda c: c.jumpcut.enabled, _jumpcut),
    Stage("speed", lambda c: c.speed.enabled, _speed),
    Stage("caption", lambda c: c.caption.enabled, _caption),
    Stage("overlay", lambda c: c.overlay.enabled, _overlay),
)


def process(
    config: PipelineConfig,
    runner: CommandRunner | None = None,
    on_progress: ProgressCallback | None = None,
) -> EngineResult:
    """Execute the full editing pipeline.

    Every intermediate lives in a temporary work directory that is removed
    when this returns or raises. The final artifact is copied to
    ``config.output`` only after every enabled stage succeeded.

    Args:
        config: Validated pipeline configuration.
        runner: Command runner for external tools (defaults to subprocesses).
        on_progress: Optional callback(stage_name, fraction_complete).
    """
    runner = runner or default_runner()

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    if not config.input.is_file():
        raise ValidationError(f"Input video not found: {config.input}")

    ffutil.check_ffmpeg(runner)

    enabled = [s for s in STAGES if s.enabled(config)]
    result = EngineResult(output_path=config.output)

    _progress("Probing video metadata", 0.0)
    result.duration_original = ffutil.probe_duration(config.input, runner)

    with tempfile.TemporaryDirectory(prefix="clipchain_") as tmp:
        work_dir = Path(tmp)
        result.work_dir = work_dir
        ext = config.input.suffix
        current = config.input

        for step, stage in enumerate(enabled, 1):
            _progress(stage.name, (step - 1) / max(len(enabled), 1))
            log.info("--- Step %d/%d: %s ---", step, len(enabled), stage.name)
            nxt = work_dir / f"step_{step}{ext}"
            stage.apply(StageContext(config, work_dir, runner, result), current, nxt)
            current = nxt
            result.stages_run.append(stage.name)

        _progress("Finalizing output", 0.95)
        config.output.parent.mkdir(parents=True, exist_ok=True)

        # Caption sidecar lives in the work dir; keep a copy beside the output
        if result.caption_path is not None:
            sidecar = config.output.with_suffix(".srt")
            shutil.copyfile(result.caption_path, sidecar)
            result.caption_path = sidecar

        if current.resolve() != config.output.resolve():
            shutil.copy2(current, config.output)

    result.duration_final = ffutil.probe_duration(config.output, runner)
    _progress("Done", 1.0)
    return result
