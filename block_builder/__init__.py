"""
Block builder — grilles lignes × colonnes réutilisables pour templates d'email.

Usage:
    >>> from block_builder import BlockDraft, create_default_structure, set_row_columns
    >>> draft = BlockDraft(structure=create_default_structure())
    >>> draft = set_row_columns(draft, 0, 3)

Export:
    >>> from block_builder import render_block_html
    >>> html = render_block_html(block, items)
"""
from .errors import (
    BlockError, ValidationError, NotFoundError,
    UnauthenticatedError, PersistenceError, SaveInProgressError,
)
from .core import (
    Padding, ColumnSettings, Row, BlockStructure,
    ItemStyles, BlockItem, Block, BlockWithItems,
    default_row, create_default_structure, validate_structure, parse_structure,
    total_cells, is_valid_address, cell_index,
)
from .items import ItemStore, items_in_cell, block_stats
from .editing import (
    BlockDraft, OPERATIONS, apply_operation,
    add_row, insert_row, remove_row, move_row,
    set_row_padding, set_row_alignment,
    set_row_columns, remove_column, move_column,
    set_column_alignment, set_column_padding, move_item,
)
from .renderer import render_block_html, render_block_fragment, build_preview, BlockPreview
from .template import (
    ProjectStyles, EmailComponent, EmailTemplate,
    snapshot_block, insert_component, move_component, render_template_html,
)

__version__ = "0.1.0"

__all__ = [
    "BlockError", "ValidationError", "NotFoundError",
    "UnauthenticatedError", "PersistenceError", "SaveInProgressError",
    "Padding", "ColumnSettings", "Row", "BlockStructure",
    "ItemStyles", "BlockItem", "Block", "BlockWithItems",
    "default_row", "create_default_structure", "validate_structure", "parse_structure",
    "total_cells", "is_valid_address", "cell_index",
    "ItemStore", "items_in_cell", "block_stats",
    "BlockDraft", "OPERATIONS", "apply_operation",
    "add_row", "insert_row", "remove_row", "move_row",
    "set_row_padding", "set_row_alignment",
    "set_row_columns", "remove_column", "move_column",
    "set_column_alignment", "set_column_padding", "move_item",
    "render_block_html", "render_block_fragment", "build_preview", "BlockPreview",
    "ProjectStyles", "EmailComponent", "EmailTemplate",
    "snapshot_block", "insert_component", "move_component", "render_template_html",
]
