"""Raster image optimization: resize, then JPEG + WebP derivatives."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from filetype import guess
from PIL import Image, ImageOps

from .config import ImageSettings
from .models import ImageAsset, ImageResult, ImageStats
from .utils import copy_file

logger = logging.getLogger("sitepack.images")

RASTER_IMAGE_TYPES = {"jpg", "jpeg", "png", "webp", "bmp", "tif", "tiff"}


def detect_image_format(path: Path) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    with path.open("rb") as handle:
        header = handle.read(261)
    kind = guess(header)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def is_raster_image(path: Path) -> bool:
    """Raster images are selected by extension, or by signature when unknown."""
    suffix = path.suffix.lower().lstrip(".")
    if suffix in RASTER_IMAGE_TYPES:
        return True
    if suffix:
        return False
    try:
        detected = detect_image_format(path)
    except OSError as exc:
        logger.debug("Could not read signature of %s: %s", path, exc)
        return False
    return detected in RASTER_IMAGE_TYPES


def derived_paths(output_dir: Path, relative_path: Path) -> Tuple[Path, Path]:
    """JPEG and WebP output paths, named by extension substitution."""
    target = output_dir / relative_path
    return target.with_suffix(".jpg"), target.with_suffix(".webp")


def _fit_width(image: Image.Image, ceiling: int) -> Tuple[Image.Image, bool]:
    width, height = image.size
    if width <= ceiling:
        return image, False
    scale = ceiling / float(width)
    new_size = (ceiling, max(1, round(height * scale)))
    return image.resize(new_size, Image.Resampling.LANCZOS), True


def _flatten_for_jpeg(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _webp_ready(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "RGBA"):
        return image
    if "A" in image.mode or "transparency" in image.info:
        return image.convert("RGBA")
    return image.convert("RGB")


def optimize_image(
    asset: ImageAsset,
    output_dir: Path,
    settings: ImageSettings,
) -> ImageResult:
    """Write the JPEG and WebP derivatives for one asset.

    Any failure removes partial output and copies the original through
    unchanged; its original size is then reported as the optimized size.
    """
    jpeg_path, webp_path = derived_paths(output_dir, asset.relative_path)
    try:
        asset.size_bytes = asset.path.stat().st_size
        with Image.open(asset.path) as raw_image:
            image = ImageOps.exif_transpose(raw_image)
            image.load()
        asset.width, asset.height = image.size
        ceiling = settings.ceiling_for(asset.width)
        image, resized = _fit_width(image, ceiling)

        jpeg_path.parent.mkdir(parents=True, exist_ok=True)
        _flatten_for_jpeg(image).save(
            jpeg_path,
            format="JPEG",
            quality=settings.jpeg_quality,
            optimize=True,
            progressive=True,
        )
        _webp_ready(image).save(
            webp_path,
            format="WEBP",
            quality=settings.webp_quality,
            method=6,
        )
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Failed to optimize %s (%s); copying original", asset.relative_path, exc)
        for partial in (jpeg_path, webp_path):
            partial.unlink(missing_ok=True)
        fallback = output_dir / asset.relative_path
        outputs: List[Path] = []
        try:
            asset.size_bytes = copy_file(asset.path, fallback)
            outputs.append(fallback)
        except OSError as copy_exc:
            logger.error("Could not copy %s: %s", asset.relative_path, copy_exc)
        return ImageResult(
            asset=asset,
            outputs=outputs,
            optimized_bytes=asset.size_bytes,
            error=str(exc) or exc.__class__.__name__,
        )

    jpeg_bytes = jpeg_path.stat().st_size
    webp_bytes = webp_path.stat().st_size
    logger.debug(
        "Optimized %s (%dpx%s): jpg %d bytes, webp %d bytes",
        asset.relative_path,
        asset.width,
        f" -> {image.size[0]}px" if resized else "",
        jpeg_bytes,
        webp_bytes,
    )
    return ImageResult(
        asset=asset,
        outputs=[jpeg_path, webp_path],
        optimized_bytes=min(jpeg_bytes, webp_bytes),
        resized=resized,
    )


def discover_images(images_dir: Path) -> Tuple[List[ImageAsset], List[Path]]:
    """Split a directory into raster assets and files to copy verbatim."""
    assets: List[ImageAsset] = []
    passthrough: List[Path] = []
    stems: Dict[Path, Path] = {}
    for path in sorted(images_dir.rglob("*")):
        if not path.is_file():
            continue
        if is_raster_image(path):
            relative_path = path.relative_to(images_dir)
            stem = relative_path.with_suffix("")
            if stem in stems:
                logger.warning(
                    "%s and %s share derivative names; %s wins",
                    stems[stem],
                    relative_path,
                    relative_path,
                )
            stems[stem] = relative_path
            assets.append(ImageAsset(path=path, relative_path=relative_path))
        else:
            passthrough.append(path)
    return assets, passthrough


def optimize_assets(
    assets: Iterable[ImageAsset],
    output_dir: Path,
    settings: ImageSettings,
    workers: int = 1,
) -> List[ImageResult]:
    """Process assets independently, optionally on a thread pool."""
    assets = list(assets)
    if workers > 1 and len(assets) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(
                pool.map(lambda asset: optimize_image(asset, output_dir, settings), assets)
            )
    return [optimize_image(asset, output_dir, settings) for asset in assets]


def optimize_images(
    images_dir: Path,
    output_dir: Path,
    settings: ImageSettings,
    workers: int = 1,
) -> ImageStats:
    """Optimize every raster image under ``images_dir`` into ``output_dir``."""
    stats = ImageStats()
    if not images_dir.is_dir():
        return stats

    assets, passthrough = discover_images(images_dir)
    for path in passthrough:
        try:
            copy_file(path, output_dir / path.relative_to(images_dir))
        except OSError as exc:
            logger.error("Could not copy %s: %s", path.relative_to(images_dir), exc)
            stats.failures += 1
            continue
        stats.copied += 1
        logger.debug("Copied %s", path.relative_to(images_dir))

    if assets:
        logger.info("Optimizing %d image%s", len(assets), "s" if len(assets) != 1 else "")
    for result in optimize_assets(assets, output_dir, settings, workers):
        stats.add(result)
    return stats


def copy_images(images_dir: Path, output_dir: Path) -> ImageStats:
    """Copy the images directory verbatim, without optimization."""
    stats = ImageStats()
    if not images_dir.is_dir():
        return stats
    for path in sorted(images_dir.rglob("*")):
        if path.is_file():
            copy_file(path, output_dir / path.relative_to(images_dir))
            stats.copied += 1
    return stats
