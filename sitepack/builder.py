"""High-level orchestration of a single site build."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import CSS_MODE_EXTERNAL, BuildConfig
from .document import SourceDocument
from .images import copy_images, optimize_images
from .minify import minify_css, minify_html, minify_js
from .models import BuildStats, ImageStats
from .styles import build_style_bundle, collect_class_candidates, generate_css
from .utils import copy_file, format_kb, reset_directory, savings

logger = logging.getLogger("sitepack")

STYLESHEET_NAME = "styles.css"


@dataclass
class AssembledPage:
    """HTML ready to write, plus the stylesheet when it is split out."""

    html: str
    css: str
    stylesheet: Optional[str]


def load_source(path: Path) -> str:
    if not path.is_file():
        raise FileNotFoundError(f"Source HTML does not exist: {path}")
    return path.read_text(encoding="utf-8")


def build_styles(config: BuildConfig, document: SourceDocument) -> str:
    """Generated utility CSS followed by the page's own inline styles, minified."""
    candidates = collect_class_candidates(config.content_files())
    generated = generate_css(candidates, config.theme)
    logger.info("Generated utility CSS for %d class candidate(s)", len(candidates))

    style = document.first_style()
    custom = style.content if style is not None else ""
    if style is not None:
        logger.info("Extracted inline styles (%d characters)", len(custom))
    return minify_css(build_style_bundle(generated, custom))


def assemble_page(config: BuildConfig, html: str) -> AssembledPage:
    """Strip framework loaders, swap in built CSS and the minified script."""
    document = SourceDocument.parse(html)
    css = build_styles(config, document)
    logger.info("Minified CSS (%s)", format_kb(len(css.encode("utf-8"))))

    for region in document.framework_scripts():
        document.remove(region)

    if config.css_mode == CSS_MODE_EXTERNAL:
        markup = f'<link rel="stylesheet" href="{STYLESHEET_NAME}">'
        stylesheet: Optional[str] = css
    else:
        markup = f"<style>{css}</style>"
        stylesheet = None

    style = document.first_style()
    if style is not None:
        document.replace(style, markup)
    else:
        document.insert_before_head_close(markup)

    script = document.body_script()
    if script is not None:
        script.content = minify_js(script.content)
        logger.info("Minified inline JavaScript")

    final_html = minify_html(document.render())
    logger.info("Minified HTML")
    return AssembledPage(html=final_html, css=css, stylesheet=stylesheet)


def process_images(config: BuildConfig) -> ImageStats:
    if config.images_dir is None or not config.images_dir.is_dir():
        logger.info("No images directory; skipping image optimization")
        return ImageStats()
    target = config.output_dir / "images"
    if not config.optimize_images:
        stats = copy_images(config.images_dir, target)
        logger.info("Copied %d image file(s)", stats.copied)
        return stats
    return optimize_images(config.images_dir, target, config.images, config.workers)


def log_stats(stats: BuildStats) -> None:
    logger.info(
        "Build stats: source %s -> output %s (saved %.1f%%)",
        format_kb(stats.source_bytes),
        format_kb(stats.output_bytes),
        stats.savings_percent,
    )
    images = stats.images
    if images.count:
        logger.info(
            "Images: %d processed, %s -> %s (saved %.1f%%, %d failed)",
            images.count,
            format_kb(images.original_bytes),
            format_kb(images.optimized_bytes),
            savings(images.original_bytes, images.optimized_bytes),
            images.failures,
        )


def run_build(config: BuildConfig) -> BuildStats:
    """Run every stage in order; any unrecovered error propagates."""
    start = time.perf_counter()

    reset_directory(config.output_dir)
    logger.info("Cleaned output directory %s", config.output_dir)

    html = load_source(config.source_path)
    logger.info("Read source HTML %s", config.source_path)

    page = assemble_page(config, html)
    (config.output_dir / "index.html").write_text(page.html, encoding="utf-8")
    css_bytes = 0
    if page.stylesheet is not None:
        (config.output_dir / STYLESHEET_NAME).write_text(page.stylesheet, encoding="utf-8")
        css_bytes = len(page.stylesheet.encode("utf-8"))
        logger.info("Wrote %s", STYLESHEET_NAME)

    image_stats = process_images(config)

    if config.cname_path is not None and config.cname_path.is_file():
        copy_file(config.cname_path, config.output_dir / config.cname_path.name)
        logger.info("Copied %s", config.cname_path.name)

    stats = BuildStats(
        source_bytes=len(html.encode("utf-8")),
        html_bytes=len(page.html.encode("utf-8")),
        css_bytes=css_bytes,
        images=image_stats,
    )
    log_stats(stats)
    logger.info(
        "Build complete in %.2fs; output in %s",
        time.perf_counter() - start,
        config.output_dir,
    )
    return stats
