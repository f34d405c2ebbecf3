"""Typed builders for the ffmpeg filter expressions clipchain emits.

All escaping for filtergraph syntax lives here so each rule is applied in
one place and can be unit tested without running ffmpeg.
"""

import math
from dataclasses import dataclass

from clipchain.timecode import format_seconds

# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------


def _escape_quoted(value: str) -> str:
    """Escape a value placed between single quotes in a filter argument.

    ffmpeg unquotes filter arguments twice: once when parsing the graph and
    once when splitting the filter's options. Inside the quotes ``\\`` and
    ``:`` only need escaping for the second pass. A quote closes the quoted
    run, is emitted as ``\\\\\\'`` (which becomes ``\\'`` then ``'``) and
    the run reopens.
    """
    value = value.replace("\\", "\\\\")
    value = value.replace(":", "\\:")
    value = value.replace("'", "'\\\\\\''")
    return value


def escape_filter_path(path: str) -> str:
    """Escape a file path for use inside a quoted filter option value."""
    return _escape_quoted(path)


def escape_drawtext(text: str) -> str:
    """Escape overlay text for a single-quoted drawtext ``text=`` value."""
    return _escape_quoted(text)


# ---------------------------------------------------------------------------
# Tempo chain
# ---------------------------------------------------------------------------

ATEMPO_MIN = 0.5
ATEMPO_MAX = 2.0


@dataclass(frozen=True)
class TempoPlan:
    """atempo stages whose product is the requested speed factor."""

    factor: float
    stages: tuple[float, ...]

    @property
    def product(self) -> float:
        return math.prod(self.stages)

    @property
    def video_pts_multiplier(self) -> float:
        return 1.0 / self.factor

    def audio_filter(self) -> str:
        return ",".join(f"atempo={format_seconds(s)}" for s in self.stages)

    def video_filter(self) -> str:
        return f"setpts={self.video_pts_multiplier:.9g}*PTS"


def build_tempo_plan(factor: float) -> TempoPlan:
    """Split a speed factor into atempo stages each within [0.5, 2.0].

    The last stage carries the remainder and is always present, so
    ``build_tempo_plan(4.0)`` gives ``(2.0, 2.0, 1.0)``.
    """
    if not math.isfinite(factor) or factor <= 0:
        raise ValueError(f"Speed factor must be a positive number, got {factor}")

    stages: list[float] = []
    remaining = factor
    while remaining >= ATEMPO_MAX:
        stages.append(ATEMPO_MAX)
        remaining /= ATEMPO_MAX
    while remaining <= ATEMPO_MIN:
        stages.append(ATEMPO_MIN)
        remaining /= ATEMPO_MIN
    stages.append(remaining)
    return TempoPlan(factor=factor, stages=tuple(stages))


# ---------------------------------------------------------------------------
# Subtitle burn-in
# ---------------------------------------------------------------------------

CAPTION_STYLES: dict[str, dict[str, str]] = {
    # Bold, centered, large impact captions
    "hormozi": {
        "FontName": "Arial Black",
        "FontSize": "28",
        "Bold": "1",
        "PrimaryColour": "&H00FFFFFF",
        "OutlineColour": "&H00000000",
        "BackColour": "&H80000000",
        "Outline": "3",
        "Shadow": "2",
        "Alignment": "10",
        "MarginV": "40",
    },
    # Traditional bottom subtitles with a background box
    "standard": {
        "FontName": "Arial",
        "FontSize": "20",
        "PrimaryColour": "&H00FFFFFF",
        "OutlineColour": "&H00000000",
        "BackColour": "&H80000000",
        "Outline": "1",
        "Shadow": "1",
        "Alignment": "2",
        "BorderStyle": "4",
        "MarginV": "30",
    },
    # Small lower-third
    "minimal": {
        "FontName": "Helvetica Neue",
        "FontSize": "16",
        "PrimaryColour": "&H00FFFFFF",
        "OutlineColour": "&H40000000",
        "Outline": "1",
        "Shadow": "0",
        "Alignment": "1",
        "MarginV": "20",
        "MarginL": "40",
    },
}


@dataclass(frozen=True)
class SubtitleBurnFilter:
    subtitle_path: str
    style: str = "standard"

    def __post_init__(self) -> None:
        if self.style not in CAPTION_STYLES:
            raise ValueError(
                f"Unknown caption style {self.style!r}; use one of: {', '.join(CAPTION_STYLES)}"
            )

    def force_style(self) -> str:
        return ",".join(f"{k}={v}" for k, v in CAPTION_STYLES[self.style].items())

    def to_filter(self) -> str:
        path = escape_filter_path(self.subtitle_path)
        return f"subtitles='{path}':force_style='{self.force_style()}'"


# ---------------------------------------------------------------------------
# Text overlay
# ---------------------------------------------------------------------------

OVERLAY_MARGIN = 20

OVERLAY_POSITIONS: dict[str, tuple[str, str]] = {
    "center": ("(w-text_w)/2", "(h-text_h)/2"),
    "top": ("(w-text_w)/2", f"{OVERLAY_MARGIN}"),
    "bottom": ("(w-text_w)/2", f"h-text_h-{OVERLAY_MARGIN}"),
    "top-left": (f"{OVERLAY_MARGIN}", f"{OVERLAY_MARGIN}"),
    "top-right": (f"w-text_w-{OVERLAY_MARGIN}", f"{OVERLAY_MARGIN}"),
    "bottom-left": (f"{OVERLAY_MARGIN}", f"h-text_h-{OVERLAY_MARGIN}"),
    "bottom-right": (f"w-text_w-{OVERLAY_MARGIN}", f"h-text_h-{OVERLAY_MARGIN}"),
}

DEFAULT_OVERLAY_SECONDS = 5.0


@dataclass(frozen=True)
class DrawTextFilter:
    """A drawtext overlay visible for ``start <= t < end``."""

    text: str
    start: float = 0.0
    end: float | None = None
    position: str = "center"
    fontsize: int = 48
    fontcolor: str = "white"
    background: str | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Overlay text must not be empty")
        if self.position not in OVERLAY_POSITIONS:
            raise ValueError(
                f"Unknown position {self.position!r}; use one of: {', '.join(OVERLAY_POSITIONS)}"
            )
        if self.fontsize <= 0:
            raise ValueError(f"Font size must be positive, got {self.fontsize}")
        if self.end is not None and self.end <= self.start:
            raise ValueError(f"Overlay end ({self.end}) must be after start ({self.start})")

    @property
    def visible_until(self) -> float:
        return self.end if self.end is not None else self.start + DEFAULT_OVERLAY_SECONDS

    def enable_expr(self) -> str:
        start = format_seconds(self.start)
        end = format_seconds(self.visible_until)
        return f"gte(t,{start})*lt(t,{end})"

    def to_filter(self) -> str:
        x, y = OVERLAY_POSITIONS[self.position]
        parts = [
            f"drawtext=text='{escape_drawtext(self.text)}'",
            "expansion=none",
            f"x={x}",
            f"y={y}",
            f"fontsize={self.fontsize}",
            f"fontcolor={self.fontcolor}",
        ]
        if self.background:
            parts += ["box=1", f"boxcolor={self.background}", "boxborderw=10"]
        parts.append(f"enable='{self.enable_expr()}'")
        return ":".join(parts)
