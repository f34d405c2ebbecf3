"""Shared data types used across clipchain."""

from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True)
class TimeRange:
    """A start/end time pair in seconds."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"TimeRange start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(
                f"TimeRange end ({self.end}) must not precede start ({self.start})"
            )

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class SilenceEvent:
    """One detected silence. ``end`` is None when silence runs to end of media."""

    start: float
    end: float | None = None

    def resolve_end(self, duration: float) -> float:
        return duration if self.end is None else self.end


@dataclass(frozen=True)
class MediaAsset:
    """A media file together with its probed duration."""

    path: Path
    duration: float

    @property
    def extension(self) -> str:
        return self.path.suffix

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass(frozen=True)
class KeepSegment:
    """A span of source media to retain, plus its sub-clip once extracted."""

    index: int
    range: TimeRange
    path: Path | None = None

    @property
    def start(self) -> float:
        return self.range.start

    @property
    def end(self) -> float:
        return self.range.end

    def with_path(self, path: Path) -> "KeepSegment":
        return replace(self, path=path)


@dataclass
class ProbeResult:
    """Metadata extracted from a media file via ffprobe."""

    duration: float
    has_video: bool = True
    has_audio: bool = True
    width: int | None = None
    height: int | None = None
    fps: float | None = None
