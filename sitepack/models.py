"""Data models used throughout the build pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class RegionKind(str, Enum):
    TEXT = "text"
    STYLE = "style"
    SCRIPT = "script"


@dataclass
class Region:
    """A contiguous slice of the source document.

    ``content`` holds the inner text for style and script regions and the raw
    markup for text regions. The opening and closing tags are kept verbatim so
    rendering is lossless.
    """

    kind: RegionKind
    content: str
    open_tag: str = ""
    close_tag: str = ""

    def render(self) -> str:
        return f"{self.open_tag}{self.content}{self.close_tag}"


@dataclass
class ImageAsset:
    """Raster image discovered in the images directory."""

    path: Path
    relative_path: Path
    size_bytes: int = 0
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class ImageResult:
    """Outcome of optimizing a single image."""

    asset: ImageAsset
    outputs: List[Path]
    optimized_bytes: int
    resized: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class ImageStats:
    """Aggregate image counters, used for reporting only."""

    count: int = 0
    original_bytes: int = 0
    optimized_bytes: int = 0
    failures: int = 0
    copied: int = 0

    def add(self, result: ImageResult) -> None:
        self.count += 1
        self.original_bytes += result.asset.size_bytes
        self.optimized_bytes += result.optimized_bytes
        if result.failed:
            self.failures += 1


@dataclass
class BuildStats:
    """Byte-size summary for a finished build."""

    source_bytes: int
    html_bytes: int
    css_bytes: int = 0
    images: ImageStats = field(default_factory=ImageStats)

    @property
    def output_bytes(self) -> int:
        return self.html_bytes + self.css_bytes

    @property
    def savings_percent(self) -> float:
        if not self.source_bytes:
            return 0.0
        return (1 - self.output_bytes / self.source_bytes) * 100
