import json

import pytest
from bs4 import BeautifulSoup

import xhtml2toc.render as render
from xhtml2toc.models import HeadingNode, TocConfig, UnsupportedFormatError
from xhtml2toc.tree import build_toc_tree, iter_titles


def _config(**kwargs) -> TocConfig:
    params = {"basedir": ".", "identifier": "urn:uuid:1234", "title": "My Book"}
    params.update(kwargs)
    return TocConfig(**params)


def _sample_tree():
    return build_toc_tree(
        [
            HeadingNode(0, "Intro", "A.html"),
            HeadingNode(1, "Background"),
            HeadingNode(0, "Conclusion", "B.html"),
        ]
    )


def test_txt_indents_by_depth_without_links():
    text = render.render_txt(_sample_tree())

    assert text == "Intro\n  Background\nConclusion"
    assert "A.html" not in text


def test_txt_skips_placeholders_but_keeps_child_depth():
    result = build_toc_tree([HeadingNode(0, "Top"), HeadingNode(2, "Deep")])

    assert render.render_txt(result) == "Top\n    Deep"


def test_json_matches_nested_structure():
    data = json.loads(render.render_json(_sample_tree()))

    assert data == [
        {"title": "Intro", "link": "A.html", "children": [{"title": "Background"}]},
        {"title": "Conclusion", "link": "B.html"},
    ]


def test_json_placeholder_is_an_empty_object_with_children():
    result = build_toc_tree([HeadingNode(0, "Top", "a.html"), HeadingNode(2, "Deep", "a.html#d")])

    data = json.loads(render.render_json(result))

    assert data == [{"title": "Top", "link": "a.html", "children": [{"children": [{"title": "Deep", "link": "a.html#d"}]}]}]


def test_json_keeps_non_ascii_titles():
    result = build_toc_tree([HeadingNode(0, "Préface", "p.html")])

    assert "Préface" in render.render_json(result)


def test_xhtml_nav_nests_ordered_lists():
    nav = render.render_xhtml_nav(_sample_tree())

    assert nav == (
        '<nav epub:type="toc">\n'
        "  <ol>\n"
        '    <li><a href="A.html">Intro</a>\n'
        "      <ol>\n"
        "        <li><span>Background</span></li>\n"
        "      </ol>\n"
        "    </li>\n"
        '    <li><a href="B.html">Conclusion</a></li>\n'
        "  </ol>\n"
        "</nav>"
    )


def test_ncx_navmap_numbers_points_in_reading_order():
    navmap = render.render_ncx_navmap(_sample_tree())

    assert navmap == (
        "<navMap>\n"
        '  <navPoint id="nav_1" playOrder="1">\n'
        "    <navLabel><text>Intro</text></navLabel>\n"
        '    <content src="A.html" />\n'
        '    <navPoint id="nav_2" playOrder="2">\n'
        "      <navLabel><text>Background</text></navLabel>\n"
        "    </navPoint>\n"
        "  </navPoint>\n"
        '  <navPoint id="nav_3" playOrder="3">\n'
        "    <navLabel><text>Conclusion</text></navLabel>\n"
        '    <content src="B.html" />\n'
        "  </navPoint>\n"
        "</navMap>"
    )


def test_xhtml_document_wrapper():
    document = render.render_xhtml(_sample_tree(), _config(charset="ISO-8859-1"))

    assert document.startswith('<?xml version="1.0" encoding="ISO-8859-1"?>\n')
    assert '<meta charset="ISO-8859-1" />' in document
    assert "<title>My Book</title>" in document
    assert 'xmlns:epub="http://www.idpf.org/2007/ops"' in document
    assert document.endswith("</body>\n</html>")


def test_ncx_document_wrapper():
    document = render.render_ncx(_sample_tree(), _config(depth=3))

    assert '<meta name="dtb:uid" content="urn:uuid:1234" />' in document
    assert '<meta name="dtb:depth" content="3" />' in document
    assert "<docTitle>\n    <text>My Book</text>\n  </docTitle>" in document
    assert document.endswith("  </navMap>\n</ncx>")


def test_markup_views_escape_titles_and_links():
    result = build_toc_tree([HeadingNode(0, "Q&A <intro>", 'a.html#x"y')])

    nav = render.render_xhtml_nav(result)
    navmap = render.render_ncx_navmap(result)

    assert "Q&amp;A &lt;intro&gt;" in nav
    assert 'href="a.html#x&quot;y"' in nav
    assert "<text>Q&amp;A &lt;intro&gt;</text>" in navmap


def test_markup_views_project_back_to_same_tree():
    headings = [
        HeadingNode(0, "One", "1.html"),
        HeadingNode(1, "One.A", "1.html#a"),
        HeadingNode(2, "One.A.i"),
        HeadingNode(1, "One.B", "1.html#b"),
        HeadingNode(0, "Two", "2.html"),
    ]
    result = build_toc_tree(headings)

    nav = BeautifulSoup(render.render_xhtml_nav(result), "html.parser")
    nav_titles = [li.find(["a", "span"], recursive=False).get_text() for li in nav.find_all("li")]
    ncx = BeautifulSoup(render.render_ncx_navmap(result), "html.parser")
    ncx_titles = [text.get_text() for text in ncx.find_all("text")]
    txt_titles = [line.strip() for line in render.render_txt(result).splitlines()]

    assert nav_titles == ncx_titles == txt_titles == iter_titles(result)


def test_rendering_is_idempotent():
    result = _sample_tree()
    config = _config()

    for fmt in render.RENDERERS:
        assert render.render_toc(result, fmt, config) == render.render_toc(result, fmt, config)


def test_unsupported_format_raises():
    with pytest.raises(UnsupportedFormatError) as excinfo:
        render.render_toc(_sample_tree(), "epub", _config())

    assert excinfo.value.format == "epub"
    assert 'unsupported output format: "epub"' in str(excinfo.value)
