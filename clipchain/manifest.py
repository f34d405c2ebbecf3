"""Pipeline configuration: the immutable contract between CLI and engine."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from clipchain.errors import ValidationError
from clipchain.filters import CAPTION_STYLES, OVERLAY_POSITIONS
from clipchain.timecode import parse_timestamp


def _timestamp(value: str, name: str) -> float:
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise ValidationError(f"{name}: {e}") from None


@dataclass(frozen=True)
class TrimConfig:
    """Range extraction. ``end`` and ``duration`` are alternatives."""

    enabled: bool = False
    start: str | None = None
    end: str | None = None
    duration: str | None = None

    def __post_init__(self) -> None:
        if not self.enabled:
            return
        if self.start is None and self.end is None and self.duration is None:
            raise ValidationError("Trim: specify at least start, end, or duration")
        if self.end is not None and self.duration is not None:
            raise ValidationError("Trim: end and duration are mutually exclusive")
        start = _timestamp(self.start, "trim start") if self.start is not None else 0.0
        if self.end is not None and _timestamp(self.end, "trim end") <= start:
            raise ValidationError("Trim: end must be after start")
        if self.duration is not None and _timestamp(self.duration, "trim duration") <= 0:
            raise ValidationError("Trim: duration must be positive")


@dataclass(frozen=True)
class JumpCutConfig:
    """Configuration for silence detection and removal."""

    enabled: bool = False
    threshold_db: float = -30.0
    min_duration: float = 0.5
    padding: float = 0.1
    max_workers: int = 1

    def __post_init__(self) -> None:
        if not self.enabled:
            return
        if self.threshold_db > 0:
            raise ValidationError(f"Jump cut threshold must be <= 0 dB, got {self.threshold_db}")
        if self.min_duration <= 0:
            raise ValidationError("Jump cut minimum silence duration must be positive")
        if self.padding < 0:
            raise ValidationError("Jump cut padding must not be negative")
        if self.max_workers < 1:
            raise ValidationError("Jump cut workers must be at least 1")


@dataclass(frozen=True)
class SpeedConfig:
    enabled: bool = False
    factor: float = 1.0

    def __post_init__(self) -> None:
        if self.enabled and not self.factor > 0:
            raise ValidationError(f"Speed factor must be positive, got {self.factor}")


@dataclass(frozen=True)
class CaptionConfig:
    """Configuration for captioning via the whisper CLI and burn-in."""

    enabled: bool = False
    style: str = "standard"
    model: str = "base"
    language: str | None = None
    subtitle_path: Path | None = None

    def __post_init__(self) -> None:
        if not self.enabled:
            return
        if self.style not in CAPTION_STYLES:
            raise ValidationError(
                f"Unknown caption style {self.style!r}; use one of: {', '.join(CAPTION_STYLES)}"
            )
        if self.subtitle_path is not None and not Path(self.subtitle_path).is_file():
            raise ValidationError(f"Subtitle file not found: {self.subtitle_path}")


@dataclass(frozen=True)
class OverlayConfig:
    enabled: bool = False
    text: str = ""
    start: str = "0"
    end: str | None = None
    position: str = "center"
    fontsize: int = 48
    fontcolor: str = "white"
    background: str | None = None

    def __post_init__(self) -> None:
        if not self.enabled:
            return
        if not self.text:
            raise ValidationError("Overlay: text is required")
        if self.position not in OVERLAY_POSITIONS:
            raise ValidationError(
                f"Unknown position {self.position!r}; use one of: {', '.join(OVERLAY_POSITIONS)}"
            )
        if self.fontsize <= 0:
            raise ValidationError("Overlay: font size must be positive")
        start = _timestamp(self.start, "overlay start")
        if self.end is not None and _timestamp(self.end, "overlay end") <= start:
            raise ValidationError("Overlay: end must be after start")

    @property
    def start_seconds(self) -> float:
        return parse_timestamp(self.start)

    @property
    def end_seconds(self) -> float | None:
        return parse_timestamp(self.end) if self.end is not None else None


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level run configuration, built once and never mutated."""

    input: Path
    output: Path
    version: str = "1"
    trim: TrimConfig = field(default_factory=TrimConfig)
    jumpcut: JumpCutConfig = field(default_factory=JumpCutConfig)
    speed: SpeedConfig = field(default_factory=SpeedConfig)
    caption: CaptionConfig = field(default_factory=CaptionConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)


_SECTIONS = {
    "trim": TrimConfig,
    "jumpcut": JumpCutConfig,
    "speed": SpeedConfig,
    "caption": CaptionConfig,
    "overlay": OverlayConfig,
}


def load_manifest(path: str | Path) -> PipelineConfig:
    """Load and validate a pipeline config from a JSON manifest."""
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise ValidationError(f"Cannot read manifest {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Manifest {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Manifest must be a JSON object")
    if "input" not in data or "output" not in data:
        raise ValidationError("Manifest must contain 'input' and 'output' fields")

    sections = {}
    for name, cls in _SECTIONS.items():
        section = data.get(name)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ValidationError(f"Manifest section '{name}' must be an object")
        try:
            sections[name] = cls(**section)
        except TypeError as e:
            raise ValidationError(f"Manifest section '{name}': {e}") from None

    caption = sections.get("caption")
    if caption is not None and caption.subtitle_path is not None:
        sections["caption"] = CaptionConfig(
            enabled=caption.enabled,
            style=caption.style,
            model=caption.model,
            language=caption.language,
            subtitle_path=Path(caption.subtitle_path),
        )

    return PipelineConfig(
        version=str(data.get("version", "1")),
        input=Path(data["input"]),
        output=Path(data["output"]),
        **sections,
    )
