"""Configuration objects and constants for the site build."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("sitepack")

CSS_MODE_INLINE = "inline"
CSS_MODE_EXTERNAL = "external"
CSS_MODES = (CSS_MODE_INLINE, CSS_MODE_EXTERNAL)

THEME_ENV_VAR = "SITEPACK_THEME"

DEFAULT_COLORS: Dict[str, str] = {
    "travertino": "#E8E0D5",
    "terracotta": "#C4703D",
    "bronzo": "#8B6914",
    "notte": "#1a1a2e",
    "oliva": "#4A5043",
}

DEFAULT_FONT_FAMILIES: Dict[str, List[str]] = {
    "serif": ["Cormorant Garamond", "Georgia", "serif"],
    "sans": ["Montserrat", "system-ui", "sans-serif"],
}


@dataclass
class ThemeConfig:
    """Color and font tokens consumed by the utility CSS generator."""

    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))
    font_families: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FONT_FAMILIES.items()}
    )


@dataclass
class ImageSettings:
    """Resize ceilings and encoder settings for raster images."""

    large_threshold: int = 1200
    large_max_width: int = 1920
    small_max_width: int = 800
    jpeg_quality: int = 80
    webp_quality: int = 80

    def ceiling_for(self, width: int) -> int:
        """Return the maximum output width for an image of ``width`` pixels."""
        if width > self.large_threshold:
            return self.large_max_width
        return self.small_max_width


@dataclass
class BuildConfig:
    """Top-level settings that control a single build run."""

    source_path: Path = Path("src/index.html")
    output_dir: Path = Path("dist")
    images_dir: Optional[Path] = Path("src/images")
    cname_path: Optional[Path] = Path("CNAME")
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    css_mode: str = CSS_MODE_EXTERNAL
    content_globs: Tuple[str, ...] = ("**/*.html",)
    optimize_images: bool = True
    workers: int = 1
    images: ImageSettings = field(default_factory=ImageSettings)

    def __post_init__(self) -> None:
        if self.css_mode not in CSS_MODES:
            raise ValueError(
                f"Unknown CSS mode {self.css_mode!r}; expected one of {', '.join(CSS_MODES)}"
            )
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @property
    def content_root(self) -> Path:
        return self.source_path.parent

    def content_files(self) -> List[Path]:
        """Files scanned for utility class usage."""
        found = {self.source_path}
        root = self.content_root
        if root.is_dir():
            for pattern in self.content_globs:
                found.update(path for path in root.glob(pattern) if path.is_file())
        return sorted(found)


def _string_map(value: object, key: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ValueError(f"Theme '{key}' must be an object")
    colors: Dict[str, str] = {}
    for name, color in value.items():
        if isinstance(color, dict):
            # Nested shades: {"blue": {"500": "#3b82f6"}} -> "blue-500"
            for shade, shade_value in color.items():
                suffix = "" if shade == "DEFAULT" else f"-{shade}"
                colors[f"{name}{suffix}"] = str(shade_value)
        else:
            colors[str(name)] = str(color)
    return colors


def _font_map(value: object) -> Dict[str, List[str]]:
    if not isinstance(value, dict):
        raise ValueError("Theme 'fontFamily' must be an object")
    families: Dict[str, List[str]] = {}
    for name, stack in value.items():
        if isinstance(stack, str):
            families[str(name)] = [part.strip() for part in stack.split(",") if part.strip()]
        elif isinstance(stack, list):
            families[str(name)] = [str(part) for part in stack]
        else:
            raise ValueError(f"Font family {name!r} must be a string or list")
    return families


def load_theme(path: Path) -> ThemeConfig:
    """Load a theme from JSON.

    Accepts either a flat ``{"colors": ..., "fontFamily": ...}`` object or the
    Tailwind ``{"theme": {"extend": {...}}}`` shape. Tokens extend the defaults.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Theme file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Theme file {path} must contain a JSON object")

    section = data
    if "theme" in section:
        section = section["theme"] or {}
        if "extend" in section:
            section = section["extend"] or {}

    theme = ThemeConfig()
    if "colors" in section:
        theme.colors.update(_string_map(section["colors"], "colors"))
    fonts = section.get("fontFamily", section.get("font_families"))
    if fonts is not None:
        theme.font_families.update(_font_map(fonts))
    logger.debug(
        "Loaded theme from %s (%d colors, %d font families)",
        path,
        len(theme.colors),
        len(theme.font_families),
    )
    return theme


def _resolve_env_theme() -> Optional[Path]:
    override = os.getenv(THEME_ENV_VAR)
    if not override:
        return None
    override_path = Path(override).expanduser()
    if override_path.exists():
        logger.debug("%s override detected at %s", THEME_ENV_VAR, override_path)
        return override_path
    logger.warning(
        "%s is set to %s but the path does not exist; falling back to the default theme",
        THEME_ENV_VAR,
        override_path,
    )
    return None


def resolve_theme(path: Optional[Path]) -> ThemeConfig:
    """Pick the theme from an explicit path, the environment, or the defaults."""
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Theme file does not exist: {path}")
        return load_theme(path)
    env_path = _resolve_env_theme()
    if env_path:
        return load_theme(env_path)
    return ThemeConfig()
