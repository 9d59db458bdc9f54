from pathlib import Path

import pytest

from sitepack.builder import run_build
from sitepack.config import CSS_MODE_INLINE, BuildConfig

from conftest import make_image


def _config(site: Path, **overrides) -> BuildConfig:
    values = dict(
        source_path=site / "src" / "index.html",
        output_dir=site / "dist",
        images_dir=site / "src" / "images",
        cname_path=site / "CNAME",
    )
    values.update(overrides)
    return BuildConfig(**values)


def test_external_css_build(site):
    stats = run_build(_config(site))
    dist = site / "dist"
    html = (dist / "index.html").read_text(encoding="utf-8")
    css = (dist / "styles.css").read_text(encoding="utf-8")

    assert "cdn.tailwindcss.com" not in html
    assert "tailwind.config" not in html
    assert "<style>" not in html
    assert ".a{color:red}" not in html
    assert 'href="styles.css"' in html or "href=styles.css" in html
    assert "<script>console.log('hi');</script>" in html
    assert "// note" not in html
    assert "<!-- hero -->" not in html

    assert ".bg-travertino{background-color:#E8E0D5}" in css
    assert css.rstrip().endswith(".a{color:red}")
    assert (dist / "CNAME").read_text(encoding="utf-8") == "casa.example.com\n"
    assert stats.css_bytes == len(css.encode("utf-8"))
    assert stats.images.count == 0


def test_inline_css_build(site):
    run_build(_config(site, css_mode=CSS_MODE_INLINE))
    dist = site / "dist"
    html = (dist / "index.html").read_text(encoding="utf-8")
    assert not (dist / "styles.css").exists()
    assert "<style>.a{color:red}</style>" not in html
    assert ".text-notte{color:#1a1a2e}" in html
    assert "styles.css" not in html


def test_style_inserted_when_source_has_none(tmp_path):
    source = tmp_path / "index.html"
    source.write_text(
        "<html><head><title>x</title></head><body class='p-4'><p>x</p></body></html>",
        encoding="utf-8",
    )
    config = BuildConfig(
        source_path=source,
        output_dir=tmp_path / "dist",
        images_dir=None,
        cname_path=None,
        css_mode=CSS_MODE_INLINE,
    )
    run_build(config)
    html = (tmp_path / "dist" / "index.html").read_text(encoding="utf-8")
    assert html.index(".p-4{padding:1rem}") < html.index("<body")


def test_output_directory_is_reset(site):
    stale = site / "dist" / "old.txt"
    stale.parent.mkdir()
    stale.write_text("stale", encoding="utf-8")
    run_build(_config(site))
    assert not stale.exists()


def test_images_are_optimized(site):
    make_image(site / "src" / "images" / "hero.png", 1000, 500)
    stats = run_build(_config(site))
    images = site / "dist" / "images"
    assert (images / "hero.jpg").exists()
    assert (images / "hero.webp").exists()
    assert stats.images.count == 1
    assert stats.images.failures == 0


def test_images_copied_when_optimization_disabled(site):
    source = make_image(site / "src" / "images" / "hero.png", 1000, 500)
    stats = run_build(_config(site, optimize_images=False))
    copied = site / "dist" / "images" / "hero.png"
    assert copied.read_bytes() == source.read_bytes()
    assert not (site / "dist" / "images" / "hero.webp").exists()
    assert stats.images.copied == 1


def test_missing_source_is_fatal(tmp_path):
    config = BuildConfig(source_path=tmp_path / "missing.html", output_dir=tmp_path / "dist")
    with pytest.raises(FileNotFoundError):
        run_build(config)


def test_stats_report_savings(site):
    stats = run_build(_config(site))
    assert stats.source_bytes == len((site / "src" / "index.html").read_bytes())
    assert stats.output_bytes == stats.html_bytes + stats.css_bytes
    expected = (1 - stats.output_bytes / stats.source_bytes) * 100
    assert stats.savings_percent == pytest.approx(expected)
