"""Region model for the source HTML document.

The document is split into an ordered list of text, style and script regions.
Substitutions operate on regions instead of re-running patterns over the whole
string, so a replacement can never match text produced by an earlier step.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import Region, RegionKind

FRAMEWORK_CDN_PATTERN = re.compile(r"^https?://cdn\.tailwindcss\.com", re.IGNORECASE)
FRAMEWORK_CONFIG_PREFIX = "tailwind.config"

_BLOCK_RE = re.compile(
    r"(?P<open><(?P<tag>style|script)\b(?P<attrs>[^>]*)>)"
    r"(?P<body>.*?)"
    r"(?P<close></(?P=tag)\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_SRC_RE = re.compile(r"""(?<![\w-])src\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"^\s*</body\s*>", re.IGNORECASE)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)


def script_src(region: Region) -> Optional[str]:
    """Return the ``src`` attribute of a script region, if any."""
    if region.kind is not RegionKind.SCRIPT:
        return None
    match = _SRC_RE.search(region.open_tag)
    if not match:
        return None
    return next(group for group in match.groups() if group is not None)


class SourceDocument:
    """Ordered list of typed regions; ``render()`` reproduces the source."""

    def __init__(self, regions: Iterable[Region]) -> None:
        self.regions: List[Region] = list(regions)

    @classmethod
    def parse(cls, html: str) -> "SourceDocument":
        regions: List[Region] = []
        position = 0
        for match in _BLOCK_RE.finditer(html):
            if match.start() > position:
                regions.append(Region(RegionKind.TEXT, html[position : match.start()]))
            kind = RegionKind(match.group("tag").lower())
            regions.append(
                Region(
                    kind,
                    match.group("body"),
                    open_tag=match.group("open"),
                    close_tag=match.group("close"),
                )
            )
            position = match.end()
        if position < len(html):
            regions.append(Region(RegionKind.TEXT, html[position:]))
        return cls(regions)

    def render(self) -> str:
        return "".join(region.render() for region in self.regions)

    def _index(self, region: Region) -> int:
        for idx, candidate in enumerate(self.regions):
            if candidate is region:
                return idx
        raise ValueError("Region does not belong to this document")

    def first_style(self) -> Optional[Region]:
        """The first inline ``<style>`` region."""
        for region in self.regions:
            if region.kind is RegionKind.STYLE:
                return region
        return None

    def body_script(self) -> Optional[Region]:
        """The inline script immediately preceding ``</body>``."""
        for idx, region in enumerate(self.regions[:-1]):
            if region.kind is not RegionKind.SCRIPT or script_src(region) is not None:
                continue
            following = self.regions[idx + 1]
            if following.kind is RegionKind.TEXT and _BODY_CLOSE_RE.match(following.content):
                return region
        return None

    def framework_scripts(
        self,
        cdn_pattern: re.Pattern = FRAMEWORK_CDN_PATTERN,
        config_prefix: str = FRAMEWORK_CONFIG_PREFIX,
    ) -> List[Region]:
        """Framework CDN loader tags and inline framework config scripts."""
        matches: List[Region] = []
        for region in self.regions:
            if region.kind is not RegionKind.SCRIPT:
                continue
            src = script_src(region)
            if src is not None:
                if cdn_pattern.search(src):
                    matches.append(region)
            elif region.content.strip().startswith(config_prefix):
                matches.append(region)
        return matches

    def remove(self, region: Region) -> None:
        del self.regions[self._index(region)]

    def replace(self, region: Region, markup: str) -> None:
        """Swap a region for literal markup."""
        self.regions[self._index(region)] = Region(RegionKind.TEXT, markup)

    def insert_before_head_close(self, markup: str) -> bool:
        """Insert markup before ``</head>``; prepend it when there is no head."""
        for idx, region in enumerate(self.regions):
            if region.kind is not RegionKind.TEXT:
                continue
            match = _HEAD_CLOSE_RE.search(region.content)
            if match:
                before = region.content[: match.start()]
                after = region.content[match.start() :]
                self.regions[idx : idx + 1] = [
                    Region(RegionKind.TEXT, before),
                    Region(RegionKind.TEXT, markup),
                    Region(RegionKind.TEXT, after),
                ]
                return True
        self.regions.insert(0, Region(RegionKind.TEXT, markup))
        return False


def parse_document(html: str) -> SourceDocument:
    return SourceDocument.parse(html)
