"""Utility helpers for size reporting and path handling."""

from __future__ import annotations

import shutil
from pathlib import Path


def format_kb(size_bytes: int) -> str:
    """Render a byte count as kilobytes with one decimal."""
    return f"{size_bytes / 1024:.1f} KB"


def savings(original: int, optimized: int) -> float:
    if not original:
        return 0.0
    return (1 - optimized / original) * 100


def reset_directory(path: Path) -> Path:
    """Remove ``path`` if it exists and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def copy_file(source: Path, destination: Path) -> int:
    """Copy a file verbatim, creating parent folders; returns bytes copied."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination.stat().st_size
