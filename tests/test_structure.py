"""
Tests du modèle de structure : défaut, validation, legacy, comptage de cellules.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from block_builder import (
    BlockStructure, Row, ColumnSettings,
    create_default_structure, validate_structure, parse_structure,
    total_cells, cell_index, is_valid_address,
)
from block_builder.errors import ValidationError


def make_structure(*columns):
    return BlockStructure(rows=[Row(columns=n) for n in columns])


# ── create_default_structure ──────────────────────────────────────────────

def test_default_structure_shape():
    s = create_default_structure()
    assert len(s.rows) == 1
    row = s.rows[0]
    assert row.columns == 1
    assert row.alignment == "left"
    assert (row.padding.top, row.padding.right, row.padding.bottom, row.padding.left) == (0, 0, 0, 0)
    assert len(row.column_settings) == 1
    assert row.column_settings[0] == ColumnSettings()


def test_default_structure_is_valid():
    assert validate_structure(create_default_structure()) is True


# ── validate_structure ────────────────────────────────────────────────────

@pytest.mark.parametrize("raw", [
    {"rows": [{"columns": 1, "alignment": "left"}]},
    {"rows": [{"columns": 12, "alignment": "right"}, {"columns": 3}]},
    {"rows": [{"columns": 2, "padding": {"top": 4}}]},
    {"rows": []},
])
def test_validate_accepts(raw):
    assert validate_structure(raw) is True


@pytest.mark.parametrize("raw", [
    None,
    "rows",
    {},
    {"rows": "nope"},
    {"rows": ["row"]},
    {"rows": [{"columns": 0}]},
    {"rows": [{"columns": 13}]},
    {"rows": [{"columns": "3"}]},
    {"rows": [{"columns": 2.5}]},
    {"rows": [{"columns": True}]},
    {"rows": [{"alignment": "left"}]},
    {"rows": [{"columns": 2, "alignment": "justify"}]},
])
def test_validate_rejects_without_raising(raw):
    assert validate_structure(raw) is False


# ── parse_structure ───────────────────────────────────────────────────────

def test_parse_legacy_row_resolves_alignment_into_columns():
    s = parse_structure({"rows": [{"columns": 2, "alignment": "right"}]})
    settings = s.rows[0].column_settings
    assert len(settings) == 2
    assert all(cs.horizontal_align == "right" for cs in settings)
    assert all(cs.vertical_align == "top" for cs in settings)


def test_parse_column_settings_win_over_legacy_alignment():
    s = parse_structure({"rows": [{
        "columns": 1,
        "alignment": "right",
        "columnSettings": [{"horizontalAlign": "left", "verticalAlign": "center"}],
    }]})
    assert s.rows[0].column_settings[0].horizontal_align == "left"
    assert s.rows[0].column_settings[0].vertical_align == "center"


def test_parse_pads_short_column_settings():
    s = parse_structure({"rows": [{
        "columns": 3,
        "columnSettings": [{
            "horizontalAlign": "center", "verticalAlign": "bottom",
            "padding": {"top": 4, "right": 0, "bottom": 0, "left": 0},
        }],
    }]})
    settings = s.rows[0].column_settings
    assert len(settings) == 3
    assert settings[0].horizontal_align == "center"
    assert settings[0].padding.top == 4
    assert settings[1] == ColumnSettings()
    assert settings[2] == ColumnSettings()


def test_parse_truncates_long_column_settings():
    s = parse_structure({"rows": [{
        "columns": 1,
        "columnSettings": [{"horizontalAlign": "center"}, {"horizontalAlign": "right"}],
    }]})
    assert len(s.rows[0].column_settings) == 1
    assert s.rows[0].column_settings[0].horizontal_align == "center"


def test_parse_rejects_invalid_shape():
    with pytest.raises(ValidationError):
        parse_structure({"rows": [{"columns": 20}]})


def test_parse_rejects_negative_padding():
    with pytest.raises(ValidationError):
        parse_structure({"rows": [{"columns": 1, "padding": {"top": -5}}]})


def test_to_json_uses_stored_keys():
    data = create_default_structure().to_json()
    row = data["rows"][0]
    assert "columnSettings" in row
    assert row["columnSettings"][0]["horizontalAlign"] == "left"
    assert row["columnSettings"][0]["verticalAlign"] == "top"
    assert parse_structure(data) == create_default_structure()


# ── total_cells / cell_index ──────────────────────────────────────────────

def test_total_cells():
    assert total_cells(make_structure(1, 3, 2)) == 6
    assert total_cells(BlockStructure(rows=[])) == 0


def test_cell_index_row_major():
    s = make_structure(1, 3, 2)
    assert cell_index(s, 0, 0) == 0
    assert cell_index(s, 1, 0) == 1
    assert cell_index(s, 1, 2) == 3
    assert cell_index(s, 2, 0) == 4
    assert cell_index(s, 2, 1) == 5


@pytest.mark.parametrize("row,col", [(3, 0), (1, 3), (-1, 0), (0, -1), (0, 1)])
def test_cell_index_invalid(row, col):
    s = make_structure(1, 3, 2)
    assert cell_index(s, row, col) is None
    assert is_valid_address(s, row, col) is False
