"""CSS, JavaScript and HTML minification."""

from __future__ import annotations

import logging
import re

import minify_html as html_minifier
import rcssmin

logger = logging.getLogger("sitepack.minify")

_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"\s*([{}();,:])\s*")
_DOCTYPE_RE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


def minify_css(css: str) -> str:
    """Minify a stylesheet; running it twice yields the same bytes."""
    return rcssmin.cssmin(css).strip()


def minify_js(script: str) -> str:
    """Best-effort text squeeze for small hand-written inline scripts.

    Strips ``//`` comments to end of line, collapses whitespace runs and drops
    whitespace around ``{ } ( ) ; , :``. This is not a JavaScript parser: a
    ``//`` inside a string or regex literal is treated as a comment.
    """
    script = _LINE_COMMENT_RE.sub("", script)
    script = _WHITESPACE_RE.sub(" ", script)
    script = _PUNCTUATION_RE.sub(r"\1", script)
    return script.strip()


def minify_html(html: str) -> str:
    """Collapse whitespace, drop comments and shorten the doctype.

    Embedded CSS and JavaScript are left untouched; both are minified earlier
    in the pipeline.
    """
    html = _DOCTYPE_RE.sub("<!DOCTYPE html>", html, count=1)
    minified = html_minifier.minify(
        html,
        minify_css=False,
        minify_js=False,
        keep_comments=False,
        keep_closing_tags=True,
        keep_html_and_head_opening_tags=True,
        minify_doctype=False,
        remove_processing_instructions=True,
    )
    logger.debug("HTML minified from %d to %d characters", len(html), len(minified))
    return minified
