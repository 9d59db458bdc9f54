"""Utility CSS generation restricted to the classes a site actually uses."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .config import ThemeConfig

logger = logging.getLogger("sitepack.styles")

VALID_CLASS = re.compile(r"^-?[A-Za-z0-9_:\-/\[\]\(\)\.,%#]+$")
_STRING_LITERAL_RE = re.compile(r"""(['"`])((?:(?!\1).)*)\1""")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")

BREAKPOINTS: Dict[str, str] = {
    "sm": "640px",
    "md": "768px",
    "lg": "1024px",
    "xl": "1280px",
    "2xl": "1536px",
}

PSEUDO_VARIANTS: Dict[str, str] = {
    "hover": ":hover",
    "focus": ":focus",
    "focus-visible": ":focus-visible",
    "focus-within": ":focus-within",
    "active": ":active",
    "disabled": ":disabled",
    "first": ":first-child",
    "last": ":last-child",
    "odd": ":nth-child(odd)",
    "even": ":nth-child(even)",
    "placeholder": "::placeholder",
}

SPACING_TOKENS = {
    "0.5", "1", "1.5", "2", "2.5", "3", "3.5", "4", "5", "6", "7", "8", "9", "10",
    "11", "12", "14", "16", "20", "24", "28", "32", "36", "40", "44", "48", "52",
    "56", "60", "64", "72", "80", "96",
}

FONT_SIZES: Dict[str, Tuple[str, str]] = {
    "xs": ("0.75rem", "1rem"),
    "sm": ("0.875rem", "1.25rem"),
    "base": ("1rem", "1.5rem"),
    "lg": ("1.125rem", "1.75rem"),
    "xl": ("1.25rem", "1.75rem"),
    "2xl": ("1.5rem", "2rem"),
    "3xl": ("1.875rem", "2.25rem"),
    "4xl": ("2.25rem", "2.5rem"),
    "5xl": ("3rem", "1"),
    "6xl": ("3.75rem", "1"),
    "7xl": ("4.5rem", "1"),
    "8xl": ("6rem", "1"),
    "9xl": ("8rem", "1"),
}

FONT_WEIGHTS: Dict[str, str] = {
    "thin": "100",
    "extralight": "200",
    "light": "300",
    "normal": "400",
    "medium": "500",
    "semibold": "600",
    "bold": "700",
    "extrabold": "800",
    "black": "900",
}

LETTER_SPACING: Dict[str, str] = {
    "tighter": "-0.05em",
    "tight": "-0.025em",
    "normal": "0em",
    "wide": "0.025em",
    "wider": "0.05em",
    "widest": "0.1em",
}

LINE_HEIGHTS: Dict[str, str] = {
    "none": "1",
    "tight": "1.25",
    "snug": "1.375",
    "normal": "1.5",
    "relaxed": "1.625",
    "loose": "2",
}

MAX_WIDTHS: Dict[str, str] = {
    "none": "none",
    "xs": "20rem",
    "sm": "24rem",
    "md": "28rem",
    "lg": "32rem",
    "xl": "36rem",
    "2xl": "42rem",
    "3xl": "48rem",
    "4xl": "56rem",
    "5xl": "64rem",
    "6xl": "72rem",
    "7xl": "80rem",
    "full": "100%",
    "prose": "65ch",
}

BORDER_RADIUS: Dict[str, str] = {
    "none": "0px",
    "sm": "0.125rem",
    "": "0.25rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "3xl": "1.5rem",
    "full": "9999px",
}

SHADOWS: Dict[str, str] = {
    "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "": "0 1px 3px 0 rgb(0 0 0 / 0.1), 0 1px 2px -1px rgb(0 0 0 / 0.1)",
    "md": "0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)",
    "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1), 0 4px 6px -4px rgb(0 0 0 / 0.1)",
    "xl": "0 20px 25px -5px rgb(0 0 0 / 0.1), 0 8px 10px -6px rgb(0 0 0 / 0.1)",
    "2xl": "0 25px 50px -12px rgb(0 0 0 / 0.25)",
    "inner": "inset 0 2px 4px 0 rgb(0 0 0 / 0.05)",
    "none": "0 0 #0000",
}

BLURS: Dict[str, str] = {
    "none": "0",
    "sm": "4px",
    "": "8px",
    "md": "12px",
    "lg": "16px",
    "xl": "24px",
}

DEFAULT_PALETTE: Dict[str, str] = {
    "black": "#000",
    "white": "#fff",
    "transparent": "transparent",
    "current": "currentColor",
    "gray-50": "#f9fafb",
    "gray-100": "#f3f4f6",
    "gray-200": "#e5e7eb",
    "gray-300": "#d1d5db",
    "gray-400": "#9ca3af",
    "gray-500": "#6b7280",
    "gray-600": "#4b5563",
    "gray-700": "#374151",
    "gray-800": "#1f2937",
    "gray-900": "#111827",
    "stone-100": "#f5f5f4",
    "stone-200": "#e7e5e4",
    "stone-500": "#78716c",
    "stone-800": "#292524",
    "red-500": "#ef4444",
    "red-600": "#dc2626",
    "amber-400": "#fbbf24",
    "amber-500": "#f59e0b",
    "green-500": "#22c55e",
    "green-600": "#16a34a",
    "blue-500": "#3b82f6",
    "blue-600": "#2563eb",
}

STATIC_UTILITIES: Dict[str, Sequence[str]] = {
    "block": ["display: block"],
    "inline-block": ["display: inline-block"],
    "inline": ["display: inline"],
    "flex": ["display: flex"],
    "inline-flex": ["display: inline-flex"],
    "grid": ["display: grid"],
    "contents": ["display: contents"],
    "hidden": ["display: none"],
    "static": ["position: static"],
    "fixed": ["position: fixed"],
    "absolute": ["position: absolute"],
    "relative": ["position: relative"],
    "sticky": ["position: sticky"],
    "flex-row": ["flex-direction: row"],
    "flex-row-reverse": ["flex-direction: row-reverse"],
    "flex-col": ["flex-direction: column"],
    "flex-col-reverse": ["flex-direction: column-reverse"],
    "flex-wrap": ["flex-wrap: wrap"],
    "flex-nowrap": ["flex-wrap: nowrap"],
    "flex-1": ["flex: 1 1 0%"],
    "flex-auto": ["flex: 1 1 auto"],
    "flex-none": ["flex: none"],
    "grow": ["flex-grow: 1"],
    "flex-grow": ["flex-grow: 1"],
    "shrink-0": ["flex-shrink: 0"],
    "flex-shrink-0": ["flex-shrink: 0"],
    "items-start": ["align-items: flex-start"],
    "items-end": ["align-items: flex-end"],
    "items-center": ["align-items: center"],
    "items-baseline": ["align-items: baseline"],
    "items-stretch": ["align-items: stretch"],
    "justify-start": ["justify-content: flex-start"],
    "justify-end": ["justify-content: flex-end"],
    "justify-center": ["justify-content: center"],
    "justify-between": ["justify-content: space-between"],
    "justify-around": ["justify-content: space-around"],
    "justify-evenly": ["justify-content: space-evenly"],
    "self-auto": ["align-self: auto"],
    "self-start": ["align-self: flex-start"],
    "self-end": ["align-self: flex-end"],
    "self-center": ["align-self: center"],
    "place-items-center": ["place-items: center"],
    "text-left": ["text-align: left"],
    "text-center": ["text-align: center"],
    "text-right": ["text-align: right"],
    "text-justify": ["text-align: justify"],
    "uppercase": ["text-transform: uppercase"],
    "lowercase": ["text-transform: lowercase"],
    "capitalize": ["text-transform: capitalize"],
    "normal-case": ["text-transform: none"],
    "italic": ["font-style: italic"],
    "not-italic": ["font-style: normal"],
    "underline": ["text-decoration-line: underline"],
    "line-through": ["text-decoration-line: line-through"],
    "no-underline": ["text-decoration-line: none"],
    "antialiased": ["-webkit-font-smoothing: antialiased", "-moz-osx-font-smoothing: grayscale"],
    "truncate": ["overflow: hidden", "text-overflow: ellipsis", "white-space: nowrap"],
    "whitespace-nowrap": ["white-space: nowrap"],
    "whitespace-normal": ["white-space: normal"],
    "whitespace-pre-line": ["white-space: pre-line"],
    "break-words": ["overflow-wrap: break-word"],
    "overflow-auto": ["overflow: auto"],
    "overflow-hidden": ["overflow: hidden"],
    "overflow-visible": ["overflow: visible"],
    "overflow-x-auto": ["overflow-x: auto"],
    "overflow-y-auto": ["overflow-y: auto"],
    "overflow-x-hidden": ["overflow-x: hidden"],
    "object-cover": ["object-fit: cover"],
    "object-contain": ["object-fit: contain"],
    "object-center": ["object-position: center"],
    "bg-cover": ["background-size: cover"],
    "bg-contain": ["background-size: contain"],
    "bg-center": ["background-position: center"],
    "bg-fixed": ["background-attachment: fixed"],
    "bg-no-repeat": ["background-repeat: no-repeat"],
    "bg-clip-text": ["background-clip: text"],
    "list-none": ["list-style-type: none"],
    "list-disc": ["list-style-type: disc"],
    "cursor-pointer": ["cursor: pointer"],
    "cursor-default": ["cursor: default"],
    "cursor-not-allowed": ["cursor: not-allowed"],
    "pointer-events-none": ["pointer-events: none"],
    "pointer-events-auto": ["pointer-events: auto"],
    "select-none": ["user-select: none"],
    "select-text": ["user-select: text"],
    "select-all": ["user-select: all"],
    "appearance-none": ["appearance: none"],
    "outline-none": ["outline: 2px solid transparent", "outline-offset: 2px"],
    "border": ["border-width: 1px"],
    "border-0": ["border-width: 0px"],
    "border-2": ["border-width: 2px"],
    "border-4": ["border-width: 4px"],
    "border-8": ["border-width: 8px"],
    "border-t": ["border-top-width: 1px"],
    "border-b": ["border-bottom-width: 1px"],
    "border-l": ["border-left-width: 1px"],
    "border-r": ["border-right-width: 1px"],
    "border-t-2": ["border-top-width: 2px"],
    "border-b-2": ["border-bottom-width: 2px"],
    "border-l-4": ["border-left-width: 4px"],
    "border-solid": ["border-style: solid"],
    "border-dashed": ["border-style: dashed"],
    "border-none": ["border-style: none"],
    "transition": [
        "transition-property: color, background-color, border-color, text-decoration-color, "
        "fill, stroke, opacity, box-shadow, transform, filter, backdrop-filter",
        "transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)",
        "transition-duration: 150ms",
    ],
    "transition-all": [
        "transition-property: all",
        "transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)",
        "transition-duration: 150ms",
    ],
    "transition-colors": [
        "transition-property: color, background-color, border-color, text-decoration-color, fill, stroke",
        "transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)",
        "transition-duration: 150ms",
    ],
    "transition-opacity": [
        "transition-property: opacity",
        "transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)",
        "transition-duration: 150ms",
    ],
    "transition-transform": [
        "transition-property: transform",
        "transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)",
        "transition-duration: 150ms",
    ],
    "ease-linear": ["transition-timing-function: linear"],
    "ease-in": ["transition-timing-function: cubic-bezier(0.4, 0, 1, 1)"],
    "ease-out": ["transition-timing-function: cubic-bezier(0, 0, 0.2, 1)"],
    "ease-in-out": ["transition-timing-function: cubic-bezier(0.4, 0, 0.2, 1)"],
    "aspect-square": ["aspect-ratio: 1 / 1"],
    "aspect-video": ["aspect-ratio: 16 / 9"],
    "sr-only": [
        "position: absolute",
        "width: 1px",
        "height: 1px",
        "padding: 0",
        "margin: -1px",
        "overflow: hidden",
        "clip: rect(0, 0, 0, 0)",
        "white-space: nowrap",
        "border-width: 0",
    ],
}

PREFLIGHT = """
*,::before,::after{box-sizing:border-box;border-width:0;border-style:solid;border-color:#e5e7eb}
html{line-height:1.5;text-size-adjust:100%;tab-size:4;font-family:{sans}}
body{margin:0;line-height:inherit}
h1,h2,h3,h4,h5,h6{font-size:inherit;font-weight:inherit}
a{color:inherit;text-decoration:inherit}
b,strong{font-weight:bolder}
button,input,optgroup,select,textarea{font-family:inherit;font-size:100%;line-height:inherit;color:inherit;margin:0;padding:0}
button,[role="button"]{cursor:pointer}
blockquote,dl,dd,h1,h2,h3,h4,h5,h6,hr,figure,p,pre{margin:0}
ol,ul,menu{list-style:none;margin:0;padding:0}
img,svg,video,canvas,audio,iframe,embed,object{display:block;vertical-align:middle}
img,video{max-width:100%;height:auto}
[hidden]{display:none}
"""

# Transform utilities only set their own variable; every one of them re-applies
# the combined transform so translate, rotate and scale compose on one element.
TRANSFORM_DECLARATION = (
    "transform: translate(var(--tw-translate-x),var(--tw-translate-y)) "
    "rotate(var(--tw-rotate)) scale(var(--tw-scale-x),var(--tw-scale-y))"
)
TRANSFORM_DEFAULTS = (
    "*,::before,::after{--tw-translate-x:0;--tw-translate-y:0;--tw-rotate:0;"
    "--tw-scale-x:1;--tw-scale-y:1}"
)


@dataclass
class RuleSpec:
    selector_suffix: str
    declarations: Sequence[str]


@dataclass
class _Utility:
    order: Tuple[int, int, str]
    breakpoint: Optional[str]
    css: str


def escape_class(name: str) -> str:
    """Escape a class name for use in a CSS selector."""
    escaped: List[str] = []
    for index, char in enumerate(name):
        if char.isascii() and (char.isalnum() or char in "-_"):
            if index == 0 and char.isdigit():
                escaped.append(f"\\{ord(char):x} ")
            else:
                escaped.append(char)
        else:
            escaped.append("\\" + char)
    return "".join(escaped)


def split_variants(name: str) -> List[str]:
    """Split ``md:hover:bg-[url(a:b)]`` on colons outside brackets."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for char in name:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth = max(depth - 1, 0)
        if char == ":" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _trim_number(value: float, digits: int = 4) -> str:
    return f"{value:.{digits}f}".rstrip("0").rstrip(".")


def _arbitrary(token: str) -> Optional[str]:
    if token.startswith("[") and token.endswith("]") and len(token) > 2:
        return token[1:-1].replace("_", " ")
    return None


def spacing_value(token: str) -> Optional[str]:
    arbitrary = _arbitrary(token)
    if arbitrary:
        return arbitrary
    if token == "px":
        return "1px"
    if token == "0":
        return "0px"
    if token in SPACING_TOKENS:
        return f"{_trim_number(float(token) * 0.25)}rem"
    return None


def fraction_value(token: str) -> Optional[str]:
    match = _FRACTION_RE.match(token)
    if not match:
        return None
    numerator, denominator = int(match.group(1)), int(match.group(2))
    if not denominator:
        return None
    return f"{_trim_number(numerator / denominator * 100, 6)}%"


def _negate(value: str) -> str:
    if value in ("0", "0px"):
        return value
    if value.startswith("-"):
        return value[1:]
    return "-" + value


def with_alpha(color: str, alpha: float) -> str:
    """Apply an opacity to a hex color; other color syntaxes pass through."""
    if not color.startswith("#"):
        return color
    hex_value = color.lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(ch * 2 for ch in hex_value)
    if len(hex_value) != 6:
        return color
    red = int(hex_value[0:2], 16)
    green = int(hex_value[2:4], 16)
    blue = int(hex_value[4:6], 16)
    return f"rgb({red} {green} {blue} / {_trim_number(alpha, 2)})"


class UtilityGenerator:
    """Turn class names into CSS using a theme plus the default scales."""

    def __init__(self, theme: ThemeConfig) -> None:
        self.colors: Dict[str, str] = dict(DEFAULT_PALETTE)
        self.colors.update(theme.colors)
        self.font_families = theme.font_families
        self._handlers: List[Callable[[str, bool], List[RuleSpec]]] = [
            self._static,
            self._spacing,
            self._space_between,
            self._gap,
            self._sizing,
            self._inset,
            self._z_index,
            self._typography,
            self._text,
            self._background,
            self._border,
            self._rounded,
            self._shadow,
            self._opacity,
            self._backdrop,
            self._grid,
            self._transform,
            self._timing,
        ]

    def resolve_color(self, token: str) -> Optional[str]:
        arbitrary = _arbitrary(token)
        if arbitrary:
            return arbitrary
        color_part, _, alpha_part = token.partition("/")
        color = self.colors.get(color_part)
        if color is None:
            return None
        if alpha_part:
            try:
                alpha = float(alpha_part) / 100
            except ValueError:
                return None
            return with_alpha(color, alpha)
        return color

    def rules_for(self, base: str) -> Tuple[int, List[RuleSpec]]:
        """Return ``(family_rank, rules)``; an empty list means unknown."""
        negative = base.startswith("-")
        if negative:
            base = base[1:]
        for rank, handler in enumerate(self._handlers):
            specs = handler(base, negative)
            if specs:
                return rank, specs
        return len(self._handlers), []

    def _static(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or base not in STATIC_UTILITIES:
            return []
        return [RuleSpec("", STATIC_UTILITIES[base])]

    def _spacing(self, base: str, negative: bool) -> List[RuleSpec]:
        props_map = {
            "p": ("padding",),
            "px": ("padding-left", "padding-right"),
            "py": ("padding-top", "padding-bottom"),
            "pt": ("padding-top",),
            "pr": ("padding-right",),
            "pb": ("padding-bottom",),
            "pl": ("padding-left",),
            "m": ("margin",),
            "mx": ("margin-left", "margin-right"),
            "my": ("margin-top", "margin-bottom"),
            "mt": ("margin-top",),
            "mr": ("margin-right",),
            "mb": ("margin-bottom",),
            "ml": ("margin-left",),
        }
        prefix, _, token = base.partition("-")
        if prefix not in props_map or not token:
            return []
        if negative and prefix.startswith("p"):
            return []
        if token == "auto" and prefix.startswith("m"):
            value: Optional[str] = "auto"
        else:
            value = spacing_value(token)
        if value is None:
            return []
        if negative:
            value = _negate(value)
        return [RuleSpec("", [f"{prop}: {value}" for prop in props_map[prefix]])]

    def _space_between(self, base: str, negative: bool) -> List[RuleSpec]:
        if not base.startswith(("space-x-", "space-y-")):
            return []
        value = spacing_value(base[8:])
        if value is None:
            return []
        if negative:
            value = _negate(value)
        prop = "margin-left" if base.startswith("space-x-") else "margin-top"
        return [RuleSpec(" > :not([hidden]) ~ :not([hidden])", [f"{prop}: {value}"])]

    def _gap(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not base.startswith("gap-"):
            return []
        prop = "gap"
        token = base[4:]
        if token.startswith("x-"):
            prop, token = "column-gap", token[2:]
        elif token.startswith("y-"):
            prop, token = "row-gap", token[2:]
        value = spacing_value(token)
        if value is None:
            return []
        return [RuleSpec("", [f"{prop}: {value}"])]

    def _sizing(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative:
            return []
        prefixes = (
            ("min-w-", "min-width"),
            ("min-h-", "min-height"),
            ("max-w-", "max-width"),
            ("max-h-", "max-height"),
            ("w-", "width"),
            ("h-", "height"),
        )
        for prefix, prop in prefixes:
            if not base.startswith(prefix):
                continue
            token = base[len(prefix) :]
            named = {
                "full": "100%",
                "auto": "auto",
                "fit": "fit-content",
                "min": "min-content",
                "max": "max-content",
                "screen": "100vh" if "h" in prefix else "100vw",
            }
            if prop == "max-width":
                value = MAX_WIDTHS.get(token) or _arbitrary(token)
            elif token in named:
                value = named[token]
            else:
                value = spacing_value(token) or fraction_value(token)
            if value is None:
                return []
            return [RuleSpec("", [f"{prop}: {value}"])]
        return []

    def _inset(self, base: str, negative: bool) -> List[RuleSpec]:
        prefixes = (
            ("inset-x-", ("left", "right")),
            ("inset-y-", ("top", "bottom")),
            ("inset-", ("top", "right", "bottom", "left")),
            ("top-", ("top",)),
            ("right-", ("right",)),
            ("bottom-", ("bottom",)),
            ("left-", ("left",)),
        )
        for prefix, props in prefixes:
            if not base.startswith(prefix):
                continue
            token = base[len(prefix) :]
            if token == "auto":
                value: Optional[str] = "auto"
            elif token == "full":
                value = "100%"
            else:
                value = spacing_value(token) or fraction_value(token)
            if value is None:
                return []
            if negative:
                value = _negate(value)
            return [RuleSpec("", [f"{prop}: {value}" for prop in props])]
        return []

    def _z_index(self, base: str, negative: bool) -> List[RuleSpec]:
        if not base.startswith("z-"):
            return []
        token = base[2:]
        value = _arbitrary(token) or (token if token.isdigit() or token == "auto" else None)
        if value is None:
            return []
        if negative:
            value = _negate(value)
        return [RuleSpec("", [f"z-index: {value}"])]

    def _typography(self, base: str, negative: bool) -> List[RuleSpec]:
        if base.startswith("font-"):
            token = base[5:]
            if token in FONT_WEIGHTS:
                return [RuleSpec("", [f"font-weight: {FONT_WEIGHTS[token]}"])]
            if token in self.font_families:
                stack = ", ".join(
                    f'"{name}"' if " " in name else name for name in self.font_families[token]
                )
                return [RuleSpec("", [f"font-family: {stack}"])]
            return []
        if base.startswith("tracking-"):
            token = base[9:]
            value = LETTER_SPACING.get(token) or _arbitrary(token)
            if value is None:
                return []
            if negative:
                value = _negate(value)
            return [RuleSpec("", [f"letter-spacing: {value}"])]
        if base.startswith("leading-"):
            token = base[8:]
            value = LINE_HEIGHTS.get(token) or spacing_value(token)
            if value is None:
                return []
            return [RuleSpec("", [f"line-height: {value}"])]
        return []

    def _text(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not base.startswith("text-"):
            return []
        token = base[5:]
        if token in FONT_SIZES:
            size, line_height = FONT_SIZES[token]
            return [RuleSpec("", [f"font-size: {size}", f"line-height: {line_height}"])]
        arbitrary = _arbitrary(token)
        if arbitrary and re.match(r"^[\d.]+(px|rem|em|vw|%)$", arbitrary):
            return [RuleSpec("", [f"font-size: {arbitrary}"])]
        color = self.resolve_color(token)
        if color:
            return [RuleSpec("", [f"color: {color}"])]
        return []

    def _background(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not base.startswith("bg-"):
            return []
        token = base[3:]
        arbitrary = _arbitrary(token)
        if arbitrary and arbitrary.startswith("url("):
            return [RuleSpec("", [f"background-image: {arbitrary}"])]
        color = self.resolve_color(token)
        if color:
            return [RuleSpec("", [f"background-color: {color}"])]
        return []

    def _border(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not base.startswith("border-"):
            return []
        color = self.resolve_color(base[7:])
        if color:
            return [RuleSpec("", [f"border-color: {color}"])]
        return []

    def _rounded(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not (base == "rounded" or base.startswith("rounded-")):
            return []
        token = base[8:]
        corners = {
            "t": ("border-top-left-radius", "border-top-right-radius"),
            "b": ("border-bottom-left-radius", "border-bottom-right-radius"),
            "l": ("border-top-left-radius", "border-bottom-left-radius"),
            "r": ("border-top-right-radius", "border-bottom-right-radius"),
        }
        side, _, size = token.partition("-")
        if side in corners:
            value = BORDER_RADIUS.get(size) or _arbitrary(size)
            if value is None:
                return []
            return [RuleSpec("", [f"{prop}: {value}" for prop in corners[side]])]
        value = BORDER_RADIUS.get(token) or _arbitrary(token)
        if value is None:
            return []
        return [RuleSpec("", [f"border-radius: {value}"])]

    def _shadow(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not (base == "shadow" or base.startswith("shadow-")):
            return []
        token = base[7:]
        value = SHADOWS.get(token) or _arbitrary(token)
        if value is None:
            return []
        return [RuleSpec("", [f"box-shadow: {value}"])]

    def _opacity(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not base.startswith("opacity-"):
            return []
        token = base[8:]
        if not token.isdigit():
            return []
        return [RuleSpec("", [f"opacity: {_trim_number(int(token) / 100, 2)}"])]

    def _backdrop(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative or not (base == "backdrop-blur" or base.startswith("backdrop-blur-")):
            return []
        token = base[14:]
        value = BLURS.get(token)
        if value is None:
            return []
        return [RuleSpec("", [f"backdrop-filter: blur({value})"])]

    def _grid(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative:
            return []
        if base.startswith("grid-cols-"):
            token = base[10:]
            if token.isdigit():
                return [RuleSpec("", [f"grid-template-columns: repeat({token}, minmax(0, 1fr))"])]
            arbitrary = _arbitrary(token)
            if arbitrary:
                return [RuleSpec("", [f"grid-template-columns: {arbitrary}"])]
            return []
        if base.startswith("col-span-"):
            token = base[9:]
            if token == "full":
                return [RuleSpec("", ["grid-column: 1 / -1"])]
            if token.isdigit():
                return [RuleSpec("", [f"grid-column: span {token} / span {token}"])]
            return []
        if base.startswith("order-"):
            token = base[6:]
            named = {"first": "-9999", "last": "9999", "none": "0"}
            value = named.get(token) or (token if token.isdigit() else None)
            if value is None:
                return []
            return [RuleSpec("", [f"order: {value}"])]
        return []

    def _transform(self, base: str, negative: bool) -> List[RuleSpec]:
        if base.startswith(("translate-x-", "translate-y-")):
            axis = base[10]
            token = base[12:]
            value = spacing_value(token) or fraction_value(token)
            if token == "full":
                value = "100%"
            if value is None:
                return []
            if negative:
                value = _negate(value)
            return [RuleSpec("", [f"--tw-translate-{axis}: {value}", TRANSFORM_DECLARATION])]
        if base.startswith("scale-"):
            token = base[6:]
            axes = ("x", "y")
            if token[:2] in ("x-", "y-"):
                axes, token = (token[0],), token[2:]
            if not token.isdigit():
                return []
            value = _trim_number(int(token) / 100, 2)
            if negative:
                value = _negate(value)
            declarations = [f"--tw-scale-{axis}: {value}" for axis in axes]
            return [RuleSpec("", declarations + [TRANSFORM_DECLARATION])]
        if base.startswith("rotate-"):
            token = base[7:]
            if not token.isdigit():
                return []
            value = f"{token}deg"
            if negative:
                value = _negate(value)
            return [RuleSpec("", [f"--tw-rotate: {value}", TRANSFORM_DECLARATION])]
        return []

    def _timing(self, base: str, negative: bool) -> List[RuleSpec]:
        if negative:
            return []
        for prefix, prop in (("duration-", "transition-duration"), ("delay-", "transition-delay")):
            if base.startswith(prefix):
                token = base[len(prefix) :]
                if not token.isdigit():
                    return []
                return [RuleSpec("", [f"{prop}: {token}ms"])]
        return []

    def _utility(self, name: str) -> List[_Utility]:
        parts = split_variants(name)
        base = parts[-1]
        breakpoint: Optional[str] = None
        pseudo = ""
        group_hover = False
        for variant in parts[:-1]:
            if variant in BREAKPOINTS and breakpoint is None:
                breakpoint = variant
            elif variant in PSEUDO_VARIANTS:
                pseudo += PSEUDO_VARIANTS[variant]
            elif variant == "group-hover":
                group_hover = True
            else:
                return []
        rank, specs = self.rules_for(base)
        if not specs:
            return []
        selector = f".{escape_class(name)}{pseudo}"
        if group_hover:
            selector = f".group:hover {selector}"
        variant_rank = 1 if (pseudo or group_hover) else 0
        return [
            _Utility(
                order=(variant_rank, rank, name),
                breakpoint=breakpoint,
                css=f"{selector}{spec.selector_suffix}{{{';'.join(spec.declarations)}}}",
            )
            for spec in specs
        ]

    def _container(self) -> List[str]:
        rules = [".container{width:100%}"]
        for width in BREAKPOINTS.values():
            rules.append(f"@media (min-width:{width}){{.container{{max-width:{width}}}}}")
        return rules

    def generate(self, candidates: Iterable[str], include_base: bool = True) -> str:
        """Emit base, component and utility layers for ``candidates``."""
        names = sorted(set(candidates))
        sections: List[str] = []
        if include_base:
            sans = self.font_families.get("sans", ["sans-serif"])
            stack = ", ".join(f'"{n}"' if " " in n else n for n in sans)
            sections.append(PREFLIGHT.strip().replace("{sans}", stack))
        if "container" in names:
            sections.extend(self._container())

        utilities: List[_Utility] = []
        for name in names:
            if name == "container":
                continue
            utilities.extend(self._utility(name))
        # Custom properties inherit, so reset them per element.
        if any("--tw-" in u.css for u in utilities):
            sections.append(TRANSFORM_DEFAULTS)

        plain = sorted((u for u in utilities if u.breakpoint is None), key=lambda u: u.order)
        sections.extend(u.css for u in plain)
        for breakpoint, width in BREAKPOINTS.items():
            scoped = sorted(
                (u for u in utilities if u.breakpoint == breakpoint), key=lambda u: u.order
            )
            if scoped:
                body = "".join(u.css for u in scoped)
                sections.append(f"@media (min-width:{width}){{{body}}}")
        logger.debug(
            "Generated %d utility rule(s) from %d candidate class(es)", len(utilities), len(names)
        )
        return "\n".join(sections) + "\n"


PREFIXED_PROPERTIES: Dict[str, Tuple[str, ...]] = {
    "appearance": ("-webkit-appearance", "-moz-appearance"),
    "user-select": ("-webkit-user-select", "-moz-user-select"),
    "backdrop-filter": ("-webkit-backdrop-filter",),
    "text-size-adjust": ("-webkit-text-size-adjust", "-moz-text-size-adjust"),
    "mask-image": ("-webkit-mask-image",),
    "hyphens": ("-webkit-hyphens",),
}
PREFIXED_VALUES: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("background-clip", "text"): ("-webkit-background-clip",),
}
_INNER_BLOCK_RE = re.compile(r"\{([^{}]*)\}")


def _prefixes_for(prop: str, value: str) -> Tuple[str, ...]:
    return PREFIXED_PROPERTIES.get(prop, ()) + PREFIXED_VALUES.get((prop, value), ())


def _prefix_block(match: re.Match) -> str:
    declarations = [part.strip() for part in match.group(1).split(";") if part.strip()]
    present = {part.split(":", 1)[0].strip() for part in declarations if ":" in part}
    expanded: List[str] = []
    for declaration in declarations:
        if ":" not in declaration:
            expanded.append(declaration)
            continue
        prop, value = (piece.strip() for piece in declaration.split(":", 1))
        for prefixed in _prefixes_for(prop, value):
            if prefixed not in present:
                expanded.append(f"{prefixed}:{value}")
        expanded.append(f"{prop}:{value}")
    return "{" + ";".join(expanded) + "}"


def autoprefix(css: str) -> str:
    """Add vendor-prefixed declarations ahead of the standard ones."""
    return _INNER_BLOCK_RE.sub(_prefix_block, css)


def collect_class_candidates(paths: Iterable[Path]) -> List[str]:
    """Class names referenced by markup or quoted inside inline scripts."""
    candidates = set()
    for path in paths:
        soup = BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")
        for tag in soup.find_all(class_=True):
            value = tag.get("class")
            if isinstance(value, str):
                value = value.split()
            candidates.update(value or [])
        for script in soup.find_all("script"):
            text = script.string or ""
            for _, literal in _STRING_LITERAL_RE.findall(text):
                candidates.update(literal.split())
    return sorted(name for name in candidates if VALID_CLASS.match(name))


def generate_css(
    candidates: Iterable[str],
    theme: ThemeConfig,
    include_base: bool = True,
) -> str:
    """Generate and vendor-prefix utility CSS for ``candidates``."""
    css = UtilityGenerator(theme).generate(candidates, include_base=include_base)
    return autoprefix(css)


def build_style_bundle(generated_css: str, custom_css: str) -> str:
    """Generated utilities first so hand-written overrides win the cascade."""
    if not custom_css.strip():
        return generated_css
    return f"{generated_css.rstrip()}\n{custom_css.strip()}\n"
