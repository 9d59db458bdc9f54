import json
import logging
from pathlib import Path

import pytest

from sitepack.config import (
    THEME_ENV_VAR,
    BuildConfig,
    ImageSettings,
    ThemeConfig,
    load_theme,
    resolve_theme,
)


def test_default_theme_tokens():
    theme = ThemeConfig()
    assert theme.colors["terracotta"] == "#C4703D"
    assert theme.font_families["sans"][0] == "Montserrat"


def test_load_theme_accepts_tailwind_shape(tmp_path):
    path = tmp_path / "theme.json"
    path.write_text(
        json.dumps(
            {
                "theme": {
                    "extend": {
                        "colors": {"mare": "#1d4e89", "sabbia": {"100": "#f4ead5", "DEFAULT": "#e0c9a6"}},
                        "fontFamily": {"display": "Playfair Display, serif"},
                    }
                }
            }
        ),
        encoding="utf-8",
    )
    theme = load_theme(path)
    assert theme.colors["mare"] == "#1d4e89"
    assert theme.colors["sabbia-100"] == "#f4ead5"
    assert theme.colors["sabbia"] == "#e0c9a6"
    assert theme.colors["travertino"] == "#E8E0D5"
    assert theme.font_families["display"] == ["Playfair Display", "serif"]


def test_load_theme_rejects_bad_shapes(tmp_path):
    path = tmp_path / "theme.json"
    path.write_text(json.dumps({"colors": ["red"]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_theme(path)


def test_resolve_theme_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env-theme.json"
    path.write_text(json.dumps({"colors": {"brand": "#000"}}), encoding="utf-8")
    monkeypatch.setenv(THEME_ENV_VAR, str(path))
    assert resolve_theme(None).colors["brand"] == "#000"


def test_resolve_theme_env_missing_falls_back(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv(THEME_ENV_VAR, str(tmp_path / "missing.json"))
    with caplog.at_level(logging.WARNING):
        theme = resolve_theme(None)
    assert theme == ThemeConfig()
    assert "does not exist" in caplog.text


def test_resolve_theme_explicit_missing_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        resolve_theme(tmp_path / "nope.json")


def test_image_ceilings():
    settings = ImageSettings()
    assert settings.ceiling_for(1200) == 800
    assert settings.ceiling_for(1201) == 1920


def test_build_config_validation():
    with pytest.raises(ValueError):
        BuildConfig(css_mode="sideways")
    with pytest.raises(ValueError):
        BuildConfig(workers=0)


def test_content_files_include_source_and_siblings(tmp_path):
    (tmp_path / "index.html").write_text("", encoding="utf-8")
    (tmp_path / "pages").mkdir()
    (tmp_path / "pages" / "about.html").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")
    files = BuildConfig(source_path=tmp_path / "index.html").content_files()
    assert files == sorted([tmp_path / "index.html", tmp_path / "pages" / "about.html"])
    assert all(isinstance(path, Path) for path in files)
