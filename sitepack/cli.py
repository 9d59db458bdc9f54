"""Command-line entry point for the site build."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Sequence

from .builder import run_build
from .config import CSS_MODE_EXTERNAL, CSS_MODES, BuildConfig, ImageSettings, resolve_theme
from .images import optimize_images
from .utils import format_kb, savings

logger = logging.getLogger("sitepack.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return ("build",)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("build", *argv)


def _add_build_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        default=Path("src/index.html"),
        type=Path,
        help="Source HTML file with inline styles and script",
    )
    parser.add_argument(
        "--output",
        default=Path("dist"),
        type=Path,
        help="Directory that receives the deployable bundle (cleared first)",
    )
    parser.add_argument(
        "--images",
        default=Path("src/images"),
        type=Path,
        help="Directory of images to optimize, if present",
    )
    parser.add_argument(
        "--cname",
        default=Path("CNAME"),
        type=Path,
        help="Domain-pin file copied into the bundle, if present",
    )
    parser.add_argument(
        "--theme",
        default=None,
        type=Path,
        help="JSON file with color and font tokens (defaults to $SITEPACK_THEME or built-ins)",
    )
    parser.add_argument(
        "--css-mode",
        choices=CSS_MODES,
        default=CSS_MODE_EXTERNAL,
        help="Write styles.css and link it, or inline the CSS into index.html",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Copy images verbatim instead of optimizing them",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of images to process in parallel",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_images_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", type=Path, help="Directory of images to optimize")
    parser.add_argument(
        "--output",
        default=Path("dist/images"),
        type=Path,
        help="Directory where optimized images should be written",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of images to process in parallel",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build a static site bundle: purged utility CSS, minified HTML/JS, optimized images.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build the site into the output directory")
    _add_build_arguments(build_parser)

    images_parser = subparsers.add_parser("images", help="Only optimize a directory of images")
    _add_images_arguments(images_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_build(args: argparse.Namespace) -> None:
    config = BuildConfig(
        source_path=args.source,
        output_dir=args.output,
        images_dir=args.images,
        cname_path=args.cname,
        theme=resolve_theme(args.theme),
        css_mode=args.css_mode,
        optimize_images=not args.no_images,
        workers=args.jobs,
    )
    run_build(config)


def _run_images(args: argparse.Namespace) -> None:
    if not args.source.is_dir():
        raise FileNotFoundError(f"Image directory does not exist: {args.source}")
    if args.jobs < 1:
        raise ValueError("--jobs must be at least 1")
    args.output.mkdir(parents=True, exist_ok=True)

    overall_start = time.perf_counter()
    stats = optimize_images(args.source, args.output, ImageSettings(), workers=args.jobs)
    logger.info(
        "Finished in %.2fs: %d image(s), %s -> %s (saved %.1f%%, %d failed, %d copied)",
        time.perf_counter() - overall_start,
        stats.count,
        format_kb(stats.original_bytes),
        format_kb(stats.optimized_bytes),
        savings(stats.original_bytes, stats.optimized_bytes),
        stats.failures,
        stats.copied,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        if args.command == "build":
            _run_build(args)
        else:
            _run_images(args)
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Build failed: %s", exc)
        logger.debug("Traceback", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
