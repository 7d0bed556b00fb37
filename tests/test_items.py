"""
Tests du store d'items : requêtes par cellule, création, merge des styles, suppression.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from block_builder import BlockStructure, ItemStore, Row, block_stats, items_in_cell
from block_builder.errors import NotFoundError, ValidationError


def two_by_two():
    return BlockStructure(rows=[Row(columns=2), Row(columns=2)])


# ── items_in_cell ─────────────────────────────────────────────────────────

def test_items_in_cell_keeps_insertion_order():
    store = ItemStore()
    first = store.create(0, 1, "text", "premier")
    store.create(1, 1, "text", "ailleurs")
    second = store.create(0, 1, "image", "http://x/y.png")
    cell = items_in_cell(store.items, 0, 1)
    assert [i.id for i in cell] == [first.id, second.id]


def test_items_in_cell_empty():
    assert items_in_cell([], 0, 0) == []


# ── create ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_create_rejects_empty_content(content):
    store = ItemStore()
    with pytest.raises(ValidationError):
        store.create(0, 0, "text", content)
    assert len(store) == 0


def test_create_assigns_identity_and_strips():
    store = ItemStore(block_id="blk-1")
    a = store.create(0, 0, "text", "  Hello  ")
    b = store.create(0, 0, "text", "World")
    assert a.id != b.id
    assert a.content == "Hello"
    assert a.block_id == "blk-1"
    assert len(store) == 2


def test_create_rejects_unknown_type():
    with pytest.raises(ValidationError):
        ItemStore().create(0, 0, "video", "x")


def test_create_checks_address_when_structure_attached():
    store = ItemStore(structure=two_by_two())
    with pytest.raises(NotFoundError):
        store.create(0, 2, "text", "hors grille")
    with pytest.raises(NotFoundError):
        store.create(2, 0, "text", "hors grille")
    assert len(store) == 0


def test_create_accepts_styles_by_stored_key():
    item = ItemStore().create(0, 0, "text", "Titre", {"fontSize": "20px", "fontWeight": "bold"})
    assert item.styles.font_size == "20px"
    assert item.styles.font_weight == "bold"


# ── update ────────────────────────────────────────────────────────────────

def test_update_missing_raises():
    with pytest.raises(NotFoundError):
        ItemStore().update("nope", content="x")


def test_update_styles_is_shallow_merge():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello", {"fontSize": "18px", "color": "#ff0000"})
    updated = store.update(item.id, styles={"color": "#00ff00"})
    assert updated.styles.color == "#00ff00"
    assert updated.styles.font_size == "18px"
    assert store.get(item.id).styles.color == "#00ff00"


def test_update_styles_none_removes_key():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello", {"fontSize": "18px", "color": "#ff0000"})
    updated = store.update(item.id, styles={"color": None})
    assert updated.styles.color is None
    assert updated.styles.font_size == "18px"


def test_update_content_keeps_styles():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello", {"color": "#123456"})
    updated = store.update(item.id, content="Bonjour")
    assert updated.content == "Bonjour"
    assert updated.styles.color == "#123456"


def test_update_rejects_blank_content():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello")
    with pytest.raises(ValidationError):
        store.update(item.id, content="  ")
    assert store.get(item.id).content == "Hello"


# ── delete / move ─────────────────────────────────────────────────────────

def test_delete_twice_raises_not_found():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello")
    keep = store.create(0, 0, "text", "Keep")
    store.delete(item.id)
    assert [i.id for i in store] == [keep.id]
    with pytest.raises(NotFoundError):
        store.delete(item.id)


def test_move_puts_item_last_in_target_cell():
    store = ItemStore(structure=two_by_two())
    a = store.create(1, 1, "text", "A")
    b = store.create(0, 0, "text", "B")
    store.move(b.id, 1, 1)
    assert [i.content for i in store.in_cell(1, 1)] == ["A", "B"]
    assert store.in_cell(0, 0) == []
    assert store.get(a.id).address == (1, 1)


def test_move_to_missing_cell_raises():
    store = ItemStore(structure=two_by_two())
    item = store.create(0, 0, "text", "A")
    with pytest.raises(NotFoundError):
        store.move(item.id, 0, 5)


# ── block_stats ───────────────────────────────────────────────────────────

def test_block_stats():
    store = ItemStore()
    store.create(0, 0, "text", "A")
    store.create(0, 0, "text", "B")
    store.create(1, 1, "image", "http://x/y.png")
    stats = block_stats(two_by_two(), store.items)
    assert stats == {"rows": 2, "total_cells": 4, "filled_cells": 2, "items": 3}


# ── styles invalides ──────────────────────────────────────────────────────

@pytest.mark.parametrize("styles", [{"width": 200}, {"textAlign": "justify"}, {"fontSize": ["18px"]}])
def test_create_rejects_invalid_styles(styles):
    store = ItemStore()
    with pytest.raises(ValidationError):
        store.create(0, 0, "text", "Hello", styles)
    assert len(store) == 0


def test_update_rejects_invalid_styles():
    store = ItemStore()
    item = store.create(0, 0, "text", "Hello", {"color": "#ff0000"})
    with pytest.raises(ValidationError):
        store.update(item.id, styles={"color": 12})
    assert store.get(item.id).styles.color == "#ff0000"
