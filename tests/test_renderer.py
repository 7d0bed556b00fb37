"""
Tests rendu — preview + export HTML (même mapping de styles, même imbrication).
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from bs4 import BeautifulSoup

from block_builder import (
    Block, BlockDraft, BlockItem, BlockStructure, ItemStyles, Row,
    build_preview, render_block_fragment, render_block_html,
    set_column_alignment, set_column_padding, set_row_padding,
)
from block_builder.renderer.styles import style_attr


# ── Helpers ───────────────────────────────────────────────────────────────

def make_block(columns, name="Bloc test"):
    return Block(user_id="u1", name=name, structure=BlockStructure(rows=[Row(columns=n) for n in columns]))


def text(row, col, content, **styles):
    return BlockItem(row_index=row, column_index=col, type="text", content=content,
                     styles=ItemStyles.model_validate(styles))


def image(row, col, url, **styles):
    return BlockItem(row_index=row, column_index=col, type="image", content=url,
                     styles=ItemStyles.model_validate(styles))


def top_level_rows(html):
    soup = BeautifulSoup(html, "html.parser")
    container = soup.find("div", attrs={"data-block-id": True})
    return container.find_all("div", attrs={"data-block-row": True}, recursive=False)


# ── Preview ───────────────────────────────────────────────────────────────

def test_preview_has_one_cell_per_column_including_empty():
    block = make_block([3, 1])
    preview = build_preview(block.structure, [text(0, 1, "Milieu")])
    assert [len(r.cells) for r in preview.rows] == [3, 1]
    assert [c.empty for c in preview.rows[0].cells] == [True, False, True]
    assert preview.cell_count == 4


def test_preview_alignment_mapping():
    draft = BlockDraft(structure=make_block([2]).structure)
    draft = set_column_alignment(draft, 0, 1, "vertical", "bottom")
    draft = set_column_alignment(draft, 0, 1, "horizontal", "right")
    draft = set_column_alignment(draft, 0, 0, "vertical", "center")
    preview = build_preview(draft.structure, [])
    first, second = preview.rows[0].cells
    assert first.style["justify-content"] == "center"
    assert first.style["align-items"] == "flex-start"
    assert second.style["justify-content"] == "flex-end"
    assert second.style["align-items"] == "flex-end"


def test_preview_row_grid_and_padding():
    draft = BlockDraft(structure=make_block([3]).structure)
    draft = set_row_padding(draft, 0, "top", 10)
    draft = set_column_padding(draft, 0, 2, "left", 6)
    row = build_preview(draft.structure, []).rows[0]
    assert row.style["grid-template-columns"] == "repeat(3, 1fr)"
    assert row.style["padding"] == "10px 0px 0px 0px"
    assert row.cells[2].style["padding"] == "0px 0px 0px 6px"


def test_text_defaults():
    preview = build_preview(make_block([1]).structure, [text(0, 0, "Hello")])
    style = preview.rows[0].cells[0].items[0].style
    assert style["font-size"] == "14px"
    assert style["color"] == "#000000"
    assert style["font-weight"] == "normal"


def test_text_custom_styles_and_column_alignment_wins():
    draft = BlockDraft(structure=make_block([1]).structure)
    draft = set_column_alignment(draft, 0, 0, "horizontal", "center")
    item = text(0, 0, "Hello", fontSize="20px", color="#ff0000", fontWeight="bold", textAlign="right")
    style = build_preview(draft.structure, [item]).rows[0].cells[0].items[0].style
    assert style["font-size"] == "20px"
    assert style["color"] == "#ff0000"
    assert style["font-weight"] == "bold"
    assert style["text-align"] == "center"


def test_image_size_and_placeholder():
    items = [image(0, 0, "http://x/y.png", width="120px", height="60px"), image(0, 0, "http://x/z.png")]
    sized, natural = build_preview(make_block([1]).structure, items).rows[0].cells[0].items
    assert (sized.style["width"], sized.style["height"]) == ("120px", "60px")
    assert (natural.style["width"], natural.style["height"]) == ("auto", "auto")
    assert "http://x/y.png" in sized.placeholder


def test_compact_preview_truncates_and_labels_empty():
    long_text = "x" * 80
    preview = build_preview(make_block([2]).structure, [text(0, 0, long_text)], compact=True)
    full, empty = preview.rows[0].cells
    assert full.items[0].content == "x" * 50 + "..."
    assert empty.label == "Empty"
    assert build_preview(make_block([2]).structure, [text(0, 0, long_text)]).rows[0].cells[0].items[0].content == long_text


def test_empty_structure_renders_nothing():
    structure = BlockStructure(rows=[])
    assert build_preview(structure, []).rows == []
    assert render_block_fragment(structure, []) == ""
    block = Block(user_id="u1", name="Vide", structure=structure)
    assert top_level_rows(render_block_html(block, [])) == []


# ── HTML ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("columns", [[1], [3], [1, 2, 3], [12, 4]])
def test_html_rows_and_cells_match_structure(columns):
    block = make_block(columns)
    rows = top_level_rows(render_block_html(block, [text(0, 0, "A")]))
    assert len(rows) == len(columns)
    for row_el, count in zip(rows, columns):
        cells = row_el.find_all("div", attrs={"data-block-cell": True}, recursive=False)
        assert len(cells) == count


def test_html_is_standalone_with_inline_styles():
    html = render_block_html(make_block([2]), [text(0, 0, "Hello"), image(0, 1, "http://x/y.png")])
    assert html.startswith("<!DOCTYPE html>")
    assert "<style" not in html
    assert "<link" not in html
    soup = BeautifulSoup(html, "html.parser")
    assert soup.find("title").text == "Bloc test"
    for el in soup.find_all(attrs={"data-block-cell": True}):
        assert "display:flex" in el["style"]


def test_html_uses_preview_styles():
    draft = BlockDraft(structure=make_block([2]).structure)
    draft = set_column_alignment(draft, 0, 1, "horizontal", "center")
    draft = set_row_padding(draft, 0, "bottom", 16)
    block = make_block([2]).model_copy(update={"structure": draft.structure})
    preview = build_preview(block.structure, [])
    row_el = top_level_rows(render_block_html(block, []))[0]
    assert row_el["style"] == style_attr(preview.rows[0].style)
    cells = row_el.find_all("div", attrs={"data-block-cell": True}, recursive=False)
    assert [c["style"] for c in cells] == [style_attr(c.style) for c in preview.rows[0].cells]


def test_html_items_in_address_order():
    items = [text(0, 1, "B"), text(0, 0, "A"), text(0, 1, "C")]
    rows = top_level_rows(render_block_html(make_block([2]), items))
    cells = rows[0].find_all("div", attrs={"data-block-cell": True}, recursive=False)
    assert [d.text for d in cells[0].find_all(attrs={"data-block-item": True})] == ["A"]
    assert [d.text for d in cells[1].find_all(attrs={"data-block-item": True})] == ["B", "C"]


def test_html_broken_image_placeholder_contains_url():
    html = render_block_html(make_block([1]), [image(0, 0, "http://x/broken.png")])
    soup = BeautifulSoup(html, "html.parser")
    img = soup.find("img")
    assert img["src"] == "http://x/broken.png"
    assert "onerror" in img.attrs
    assert "http://x/broken.png" in img["alt"]
    placeholder = img.find_next_sibling("div")
    assert "http://x/broken.png" in placeholder.text


def test_html_escapes_content():
    html = render_block_html(make_block([1], name="<Promo>"), [text(0, 0, "<b>hi</b> & co")])
    assert "<b>hi</b>" not in html
    assert "&lt;b&gt;hi&lt;/b&gt; &amp; co" in html
    assert "<title>&lt;Promo&gt;</title>" in html


def test_html_is_deterministic():
    block = make_block([2, 1])
    items = [text(0, 0, "A"), image(1, 0, "http://x/y.png")]
    assert render_block_html(block, items) == render_block_html(block, items)


def test_html_defaults_to_block_items():
    from block_builder import BlockWithItems
    block = BlockWithItems(user_id="u1", name="Avec items",
                           structure=BlockStructure(rows=[Row(columns=1)]),
                           items=[text(0, 0, "Depuis le bloc")])
    assert "Depuis le bloc" in render_block_html(block)
