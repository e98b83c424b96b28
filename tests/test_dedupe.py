from bs4 import BeautifulSoup

from style_extractor.dedupe import StyleClassRegistry, dedupe_inline_styles, normalise_style


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_normalise_style_is_order_independent_and_idempotent():
    key = normalise_style(" margin:0 ;COLOR:  red;; color:red ")

    assert key == "color: red; margin: 0"
    assert normalise_style(key) == key
    assert normalise_style("color:red;margin:0") == normalise_style("margin:0; color:red")


def test_permuted_styles_share_one_class_and_one_rule():
    soup = _soup(
        '<body><div style="color:red;margin:0">'
        '<p style="margin:0; color:red">x</p>'
        '<span style="  ;  ">y</span>'
        '<em class="keep" style="font-weight: bold">z</em>'
        "</div></body>"
    )

    result = dedupe_inline_styles(soup.body)

    assert result.processed == 3
    assert result.css == ".style-1 { color: red; margin: 0; }\n.style-2 { font-weight: bold; }"
    out = _soup(result.html)
    assert out.div["class"] == ["style-1"]
    assert out.p["class"] == ["style-1"]
    assert out.em["class"] == ["keep", "style-2"]
    assert not out.span.has_attr("class")
    assert out.find_all(style=True) == []


def test_source_tree_is_not_modified():
    soup = _soup('<body><div style="color:red">x</div></body>')

    dedupe_inline_styles(soup.body)

    assert soup.div["style"] == "color:red"
    assert not soup.div.has_attr("class")


def test_root_element_style_is_processed_first():
    soup = _soup('<section style="gap: 4px"><div style="gap:4px"></div></section>')

    result = dedupe_inline_styles(soup.section, prefix="x")

    assert result.processed == 2
    assert result.css.count(".x-1") == 1
    assert _soup(result.html).section["class"] == ["x-1"]


def test_class_numbering_follows_document_order():
    soup = _soup(
        "<body>"
        '<a style="color: blue">1</a><b style="color: green">2</b>'
        '<i style="color:blue">3</i><u style="color: black">4</u>'
        "</body>"
    )

    out = _soup(dedupe_inline_styles(soup.body).html)

    assert [tag["class"] for tag in out.find_all(["a", "b", "i", "u"])] == [
        ["style-1"],
        ["style-2"],
        ["style-1"],
        ["style-3"],
    ]


def test_existing_generated_class_is_not_duplicated():
    soup = _soup('<body><p class="style-1" style="color: red">x</p></body>')

    out = _soup(dedupe_inline_styles(soup.body).html)

    assert out.p["class"] == ["style-1"]


def test_registry_maps_both_ways():
    registry = StyleClassRegistry("tok")

    name = registry.class_for("color: red")

    assert registry.class_for("color: red") == name == "tok-1"
    assert registry.key_for("tok-1") == "color: red"
    assert registry.key_for("tok-2") is None
    assert len(registry) == 1
