from .schemas import (
    Padding,
    ColumnSettings,
    Row,
    BlockStructure,
    ItemStyles,
    BlockItem,
    Block,
    BlockWithItems,
)
from .structure import (
    default_row,
    create_default_structure,
    validate_structure,
    parse_structure,
    total_cells,
    is_valid_address,
    cell_index,
)

__all__ = [
    "Padding", "ColumnSettings", "Row", "BlockStructure",
    "ItemStyles", "BlockItem", "Block", "BlockWithItems",
    "default_row", "create_default_structure", "validate_structure", "parse_structure",
    "total_cells", "is_valid_address", "cell_index",
]
