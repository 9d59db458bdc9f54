from pathlib import Path

import pytest
from PIL import Image

SAMPLE_HTML = """<!DOCTYPE html>
<html lang="it">
<head>
    <meta charset="utf-8">
    <title>Casa</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <script>
        tailwind.config = { theme: { extend: { colors: { notte: '#1a1a2e' } } } }
    </script>
    <style>.a{color:red}</style>
</head>
<body class="bg-travertino text-notte font-serif">
    <!-- hero -->
    <main class="container mx-auto px-4 md:px-8">
        <h1 class="text-4xl hover:text-terracotta">Benvenuti</h1>
    </main>
    <script>console.log('hi'); // note</script>
</body>
</html>
"""


def make_image(path: Path, width: int, height: int, mode: str = "RGB") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    color = (196, 112, 61, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
    Image.new(mode, (width, height), color).save(path)
    return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A minimal source tree: src/index.html, src/images/, CNAME."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.html").write_text(SAMPLE_HTML, encoding="utf-8")
    (tmp_path / "CNAME").write_text("casa.example.com\n", encoding="utf-8")
    return tmp_path
