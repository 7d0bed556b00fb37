"""
Store d'items adressés par cellule (row_index, column_index).
Une cellule contient 0..n items, rendus dans l'ordre d'insertion.
"""
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from .core.schemas import BlockItem, BlockStructure, ItemStyles, ItemType
from .core.structure import is_valid_address
from .errors import NotFoundError, ValidationError

ITEM_TYPES = ("text", "image")


def items_in_cell(items: Iterable[BlockItem], row: int, col: int) -> List[BlockItem]:
    """Items de la cellule (row, col), dans l'ordre d'entrée."""
    return [item for item in items if item.row_index == row and item.column_index == col]


def clean_content(content: Optional[str]) -> str:
    """Contenu nettoyé ; lève ValidationError si vide."""
    cleaned = (content or "").strip()
    if not cleaned:
        raise ValidationError("Le contenu est obligatoire")
    return cleaned


class ItemStore:
    """
    Liste plate des items d'un bloc.

    Si une structure est attachée, les adresses sont vérifiées à la création
    et au déplacement (NotFoundError si la cellule n'existe pas).
    """

    def __init__(self, items: Optional[Iterable[BlockItem]] = None,
                 block_id: Optional[str] = None,
                 structure: Optional[BlockStructure] = None):
        self._items: List[BlockItem] = list(items or [])
        self.block_id = block_id
        self.structure = structure

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    @property
    def items(self) -> List[BlockItem]:
        return list(self._items)

    def get(self, item_id: str) -> BlockItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFoundError(f"Item introuvable : {item_id}")

    def in_cell(self, row: int, col: int) -> List[BlockItem]:
        return items_in_cell(self._items, row, col)

    def _check_address(self, row: int, col: int) -> None:
        if self.structure is not None and not is_valid_address(self.structure, row, col):
            raise NotFoundError(f"Cellule inexistante : ({row}, {col})")

    def create(self, row_index: int, column_index: int, type: ItemType, content: str,
               styles: Optional[Mapping[str, Any]] = None) -> BlockItem:
        if type not in ITEM_TYPES:
            raise ValidationError(f"Type d'item inconnu : {type!r}")
        content = clean_content(content)
        self._check_address(row_index, column_index)
        item = BlockItem(
            block_id=self.block_id,
            row_index=row_index,
            column_index=column_index,
            type=type,
            content=content,
            styles=ItemStyles.parse(styles),
        )
        self._items.append(item)
        return item

    def update(self, item_id: str, content: Optional[str] = None,
               styles: Optional[Mapping[str, Any]] = None) -> BlockItem:
        current = self.get(item_id)
        changes: dict = {"updated_at": datetime.utcnow()}
        if content is not None:
            changes["content"] = clean_content(content)
        if styles is not None:
            changes["styles"] = current.styles.merged(styles)
        updated = current.model_copy(update=changes)
        self._replace(updated)
        return updated

    def move(self, item_id: str, row_index: int, column_index: int) -> BlockItem:
        current = self.get(item_id)
        self._check_address(row_index, column_index)
        moved = current.model_copy(update={
            "row_index": row_index,
            "column_index": column_index,
            "updated_at": datetime.utcnow(),
        })
        # l'item passe en fin de sa nouvelle cellule
        self._items = [i for i in self._items if i.id != item_id] + [moved]
        return moved

    def delete(self, item_id: str) -> None:
        self.get(item_id)
        self._items = [i for i in self._items if i.id != item_id]

    def _replace(self, updated: BlockItem) -> None:
        self._items = [updated if i.id == updated.id else i for i in self._items]


def block_stats(structure: BlockStructure, items: Iterable[BlockItem]) -> dict:
    """Statistiques d'affichage (sélecteur de blocs)."""
    items = list(items)
    return {
        "rows": len(structure.rows),
        "total_cells": sum(r.columns for r in structure.rows),
        "filled_cells": len({i.address for i in items}),
        "items": len(items),
    }
