from sitepack.document import SourceDocument, script_src
from sitepack.models import RegionKind

from conftest import SAMPLE_HTML


def test_render_is_lossless():
    html = "<p>x</p><STYLE media='all'>.a{}</Style ><script src=a.js></script>tail"
    assert SourceDocument.parse(html).render() == html


def test_regions_are_typed_in_order():
    document = SourceDocument.parse(SAMPLE_HTML)
    kinds = [region.kind for region in document.regions if region.kind is not RegionKind.TEXT]
    assert kinds == [
        RegionKind.SCRIPT,
        RegionKind.SCRIPT,
        RegionKind.STYLE,
        RegionKind.SCRIPT,
    ]


def test_first_style_and_body_script():
    document = SourceDocument.parse(SAMPLE_HTML)
    assert document.first_style().content == ".a{color:red}"
    assert document.body_script().content == "console.log('hi'); // note"


def test_body_script_requires_body_close_next():
    html = "<body><script>a()</script><p>later</p></body>"
    assert SourceDocument.parse(html).body_script() is None


def test_body_script_ignores_external_scripts():
    html = '<body><script src="app.js"></script>\n</body>'
    assert SourceDocument.parse(html).body_script() is None


def test_framework_scripts_found_and_removed():
    document = SourceDocument.parse(SAMPLE_HTML)
    found = document.framework_scripts()
    assert [script_src(region) for region in found] == ["https://cdn.tailwindcss.com", None]
    for region in found:
        document.remove(region)
    rendered = document.render()
    assert "cdn.tailwindcss.com" not in rendered
    assert "tailwind.config" not in rendered
    assert "console.log('hi')" in rendered


def test_replace_only_touches_the_given_region():
    html = "<style>.a{}</style><style>.b{}</style>"
    document = SourceDocument.parse(html)
    document.replace(document.first_style(), "<link>")
    assert document.render() == "<link><style>.b{}</style>"


def test_insert_before_head_close():
    document = SourceDocument.parse("<html><head><title>t</title></head><body></body></html>")
    assert document.insert_before_head_close("<style>x</style>") is True
    assert document.render() == (
        "<html><head><title>t</title><style>x</style></head><body></body></html>"
    )


def test_insert_without_head_prepends():
    document = SourceDocument.parse("<p>bare</p>")
    assert document.insert_before_head_close("<link>") is False
    assert document.render() == "<link><p>bare</p>"


def test_data_src_attribute_is_not_a_source():
    html = (
        '<script data-src="x.js">tailwind.config = {}</script>'
        "<body><script data-src='y'>go()</script>\n</body>"
    )
    doc = SourceDocument.parse(html)
    config_script = doc.regions[0]
    assert script_src(config_script) is None
    assert doc.framework_scripts() == [config_script]
    assert doc.body_script().content == "go()"


def test_src_attribute_after_other_attributes():
    doc = SourceDocument.parse('<script defer src="https://cdn.tailwindcss.com"></script>')
    assert script_src(doc.regions[0]) == "https://cdn.tailwindcss.com"
