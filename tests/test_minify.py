import re

import pytest

from sitepack.minify import minify_css, minify_html, minify_js


@pytest.mark.parametrize(
    "css",
    [
        ".a{color:red}",
        "/* header */\n.a {\n  color: red;\n}\n\n@media (min-width: 640px) {\n  .b { margin: 0 auto; }\n}\n",
        "body{font-family:\"Cormorant Garamond\", serif;}  a:hover { color : #C4703D ; }",
    ],
)
def test_css_minification_is_idempotent(css):
    once = minify_css(css)
    assert minify_css(once) == once


def test_css_minification_shrinks():
    css = "/* c */\n.a {\n    color: red;\n}\n"
    minified = minify_css(css)
    assert len(minified) < len(css)
    assert "/* c */" not in minified
    assert "color:red" in minified


def test_js_strips_line_comment_and_trailing_space():
    assert minify_js("console.log('hi'); // note") == "console.log('hi');"


def test_js_collapses_whitespace_around_punctuation():
    source = """
        function greet ( name ) {
            // say hello
            const msg = 'ciao ' + name ;
            return { text : msg , ok : true } ;
        }
    """
    assert minify_js(source) == (
        "function greet(name){const msg = 'ciao ' + name;return{text:msg,ok:true};}"
    )


def test_js_only_removes_comments_and_whitespace():
    source = "let a = [1, 2];\nif (a) { run(a) ; }  // trailing\nlet b=a+1"
    minified = minify_js(source)
    without_comment = re.sub(r"//.*$", "", source, flags=re.MULTILINE)
    assert re.sub(r"\s", "", minified) == re.sub(r"\s", "", without_comment)


def test_js_keeps_spaces_not_next_to_punctuation():
    assert minify_js("return   value") == "return value"


def test_html_minification_drops_comments_and_whitespace():
    html = "<!DOCTYPE html>\n<html>\n<head>\n<title>T</title>\n</head>\n<body>\n<!-- note -->\n<p>  Ciao   mondo </p>\n</body>\n</html>\n"
    minified = minify_html(html)
    assert "<!-- note -->" not in minified
    assert "\n" not in minified
    assert "Ciao mondo" in minified
    assert len(minified) < len(html)


def test_html_minification_shortens_legacy_doctype():
    html = (
        '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
        '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd"><html><body><p>x</p></body></html>'
    )
    minified = minify_html(html)
    assert "W3C" not in minified
    assert minified.lower().startswith("<!doctype html>")


def test_html_minification_leaves_inline_script_text():
    html = "<html><body><p>x</p><script>console.log('hi');</script></body></html>"
    assert "<script>console.log('hi');</script>" in minify_html(html)
