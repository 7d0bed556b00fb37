"""
Moteur d'édition structurelle.

Chaque opération prend un BlockDraft (structure + items) et renvoie un
NOUVEAU BlockDraft : la structure et les items sont réconciliés ensemble,
aucun état intermédiaire n'est observable. Les gardes (dernière ligne,
déplacement hors bornes…) renvoient le draft inchangé.

Invariants garantis après chaque opération :
  - len(row.column_settings) == row.columns pour chaque ligne
  - chaque item a une adresse valide, sinon il est supprimé
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validate_call
from pydantic import ValidationError as PydanticValidationError

from .core.schemas import (
    BlockItem, BlockStructure, ColumnSettings, Row,
    HORIZONTAL_VALUES, VERTICAL_VALUES, SIDES, MAX_COLUMNS,
)
from .core.structure import default_row, is_valid_address
from .errors import NotFoundError, ValidationError


class BlockDraft(BaseModel):
    """Copie de travail d'un bloc. `removed_item_ids` : items supprimés par les éditions, à purger au save."""
    block_id: Optional[str] = None
    structure: BlockStructure
    items: List[BlockItem] = Field(default_factory=list)
    removed_item_ids: List[str] = Field(default_factory=list)

    def _evolve(self, rows: Optional[List[Row]] = None,
                items: Optional[List[BlockItem]] = None) -> "BlockDraft":
        new_rows = rows if rows is not None else list(self.structure.rows)
        new_items = items if items is not None else list(self.items)
        kept = {i.id for i in new_items}
        removed = list(self.removed_item_ids) + [
            i.id for i in self.items if i.id not in kept and i.id not in self.removed_item_ids
        ]
        return BlockDraft(
            block_id=self.block_id,
            structure=BlockStructure.model_construct(rows=new_rows),
            items=new_items,
            removed_item_ids=removed,
        )


# ── Helpers ──────────────────────────────────────────────────────────────────

def moved_index(index: int, src: int, dst: int) -> int:
    """Remap d'un index lors du déplacement d'un élément de src vers dst (décalage de l'intervalle)."""
    if index == src:
        return dst
    if src < dst and src < index <= dst:
        return index - 1
    if dst < src and dst <= index < src:
        return index + 1
    return index


def _move(seq: list, src: int, dst: int) -> list:
    out = list(seq)
    out.insert(dst, out.pop(src))
    return out


def _row(draft: BlockDraft, row_index: int) -> Row:
    if row_index < 0 or row_index >= len(draft.structure.rows):
        raise NotFoundError(f"Ligne inexistante : {row_index}")
    return draft.structure.rows[row_index]


def _check_column(row: Row, row_index: int, column_index: int) -> None:
    if column_index < 0 or column_index >= row.columns:
        raise NotFoundError(f"Colonne inexistante : ({row_index}, {column_index})")


def _check_side(side: str) -> None:
    if side not in SIDES:
        raise ValidationError(f"Côté de padding inconnu : {side!r}")


def _pixels(value: int) -> int:
    """Padding en px, ramené à >= 0."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Padding invalide : {value!r}")
    return max(0, value)


def _replace_row(draft: BlockDraft, row_index: int, row: Row) -> List[Row]:
    rows = list(draft.structure.rows)
    rows[row_index] = row
    return rows


def _shift_item(item: BlockItem, **changes) -> BlockItem:
    return item.model_copy(update=changes) if changes else item


# ── Lignes ───────────────────────────────────────────────────────────────────

def add_row(draft: BlockDraft) -> BlockDraft:
    return draft._evolve(rows=list(draft.structure.rows) + [default_row()])


def insert_row(draft: BlockDraft, index: int) -> BlockDraft:
    """Insère une ligne par défaut à `index` ; les items à row_index >= index descendent d'un cran."""
    if index < 0 or index > len(draft.structure.rows):
        raise NotFoundError(f"Position de ligne invalide : {index}")
    rows = list(draft.structure.rows)
    rows.insert(index, default_row())
    items = [
        _shift_item(i, row_index=i.row_index + 1) if i.row_index >= index else i
        for i in draft.items
    ]
    return draft._evolve(rows=rows, items=items)


def remove_row(draft: BlockDraft, row_index: int) -> BlockDraft:
    if len(draft.structure.rows) <= 1:
        return draft
    _row(draft, row_index)
    rows = [r for idx, r in enumerate(draft.structure.rows) if idx != row_index]
    items = [
        _shift_item(i, row_index=i.row_index - 1) if i.row_index > row_index else i
        for i in draft.items
        if i.row_index != row_index
    ]
    return draft._evolve(rows=rows, items=items)


def move_row(draft: BlockDraft, src: int, dst: int) -> BlockDraft:
    count = len(draft.structure.rows)
    if src == dst or not 0 <= src < count or not 0 <= dst < count:
        return draft
    rows = _move(draft.structure.rows, src, dst)
    items = [_shift_item(i, row_index=moved_index(i.row_index, src, dst)) for i in draft.items]
    return draft._evolve(rows=rows, items=items)


def set_row_padding(draft: BlockDraft, row_index: int, side: str, value: int) -> BlockDraft:
    _check_side(side)
    row = _row(draft, row_index)
    padding = row.padding.model_copy(update={side: _pixels(value)})
    return draft._evolve(rows=_replace_row(draft, row_index, row.model_copy(update={"padding": padding})))


def set_row_alignment(draft: BlockDraft, row_index: int, value: str) -> BlockDraft:
    """Champ legacy : stocké pour compatibilité, sans effet sur le rendu (les column_settings priment)."""
    if value not in HORIZONTAL_VALUES:
        raise ValidationError(f"Alignement inconnu : {value!r}")
    row = _row(draft, row_index)
    return draft._evolve(rows=_replace_row(draft, row_index, row.model_copy(update={"alignment": value})))


# ── Colonnes ─────────────────────────────────────────────────────────────────

def set_row_columns(draft: BlockDraft, row_index: int, columns: int) -> BlockDraft:
    """Redimensionne la ligne ; les items des colonnes disparues sont supprimés."""
    if isinstance(columns, bool) or not isinstance(columns, int) or not 1 <= columns <= MAX_COLUMNS:
        raise ValidationError(f"Nombre de colonnes invalide : {columns!r} (1-{MAX_COLUMNS})")
    row = _row(draft, row_index)
    settings = list(row.column_settings[:columns])
    settings += [ColumnSettings() for _ in range(columns - len(settings))]
    new_row = row.model_copy(update={"columns": columns, "column_settings": settings})
    items = [
        i for i in draft.items
        if i.row_index != row_index or i.column_index < columns
    ]
    return draft._evolve(rows=_replace_row(draft, row_index, new_row), items=items)


def remove_column(draft: BlockDraft, row_index: int, column_index: int) -> BlockDraft:
    """Supprime une colonne d'une ligne ; les colonnes suivantes se décalent à gauche."""
    row = _row(draft, row_index)
    if row.columns <= 1:
        return draft
    _check_column(row, row_index, column_index)
    settings = [s for idx, s in enumerate(row.column_settings) if idx != column_index]
    new_row = row.model_copy(update={"columns": row.columns - 1, "column_settings": settings})
    items = []
    for i in draft.items:
        if i.row_index != row_index:
            items.append(i)
        elif i.column_index > column_index:
            items.append(_shift_item(i, column_index=i.column_index - 1))
        elif i.column_index < column_index:
            items.append(i)
    return draft._evolve(rows=_replace_row(draft, row_index, new_row), items=items)


def move_column(draft: BlockDraft, row_index: int, src: int, dst: int) -> BlockDraft:
    row = _row(draft, row_index)
    if src == dst or not 0 <= src < row.columns or not 0 <= dst < row.columns:
        return draft
    new_row = row.model_copy(update={"column_settings": _move(row.column_settings, src, dst)})
    items = [
        _shift_item(i, column_index=moved_index(i.column_index, src, dst)) if i.row_index == row_index else i
        for i in draft.items
    ]
    return draft._evolve(rows=_replace_row(draft, row_index, new_row), items=items)


def _column_settings(row: Row) -> List[ColumnSettings]:
    """Réglages de la ligne, complétés par des entrées par défaut si absents."""
    settings = list(row.column_settings)
    settings += [ColumnSettings() for _ in range(row.columns - len(settings))]
    return settings


def _update_column(draft: BlockDraft, row_index: int, column_index: int, **changes) -> BlockDraft:
    row = _row(draft, row_index)
    _check_column(row, row_index, column_index)
    settings = _column_settings(row)
    settings[column_index] = settings[column_index].model_copy(update=changes)
    return draft._evolve(rows=_replace_row(draft, row_index, row.model_copy(update={"column_settings": settings})))


def set_column_alignment(draft: BlockDraft, row_index: int, column_index: int,
                         axis: str, value: str) -> BlockDraft:
    if axis == "horizontal":
        if value not in HORIZONTAL_VALUES:
            raise ValidationError(f"Alignement horizontal inconnu : {value!r}")
        return _update_column(draft, row_index, column_index, horizontal_align=value)
    if axis == "vertical":
        if value not in VERTICAL_VALUES:
            raise ValidationError(f"Alignement vertical inconnu : {value!r}")
        return _update_column(draft, row_index, column_index, vertical_align=value)
    raise ValidationError(f"Axe inconnu : {axis!r}")


def set_column_padding(draft: BlockDraft, row_index: int, column_index: int,
                       side: str, value: int) -> BlockDraft:
    _check_side(side)
    row = _row(draft, row_index)
    _check_column(row, row_index, column_index)
    padding = _column_settings(row)[column_index].padding.model_copy(update={side: _pixels(value)})
    return _update_column(draft, row_index, column_index, padding=padding)


# ── Items ────────────────────────────────────────────────────────────────────

def move_item(draft: BlockDraft, item_id: str, row_index: int, column_index: int) -> BlockDraft:
    """Déplace un item vers une autre cellule (il passe en fin de cellule)."""
    if not is_valid_address(draft.structure, row_index, column_index):
        raise NotFoundError(f"Cellule inexistante : ({row_index}, {column_index})")
    target = next((i for i in draft.items if i.id == item_id), None)
    if target is None:
        raise NotFoundError(f"Item introuvable : {item_id}")
    moved = target.model_copy(update={"row_index": row_index, "column_index": column_index})
    items = [i for i in draft.items if i.id != item_id] + [moved]
    return draft._evolve(items=items)


# Table des opérations exposées (utilisée par l'API /edit)
OPERATIONS = {
    "add_row": add_row,
    "insert_row": insert_row,
    "remove_row": remove_row,
    "move_row": move_row,
    "set_row_padding": set_row_padding,
    "set_row_alignment": set_row_alignment,
    "set_row_columns": set_row_columns,
    "remove_column": remove_column,
    "move_column": move_column,
    "set_column_alignment": set_column_alignment,
    "set_column_padding": set_column_padding,
    "move_item": move_item,
}

# Arguments venant du JSON : types stricts ("1" n'est pas un index, True n'est pas un nombre)
_VALIDATED = {
    name: validate_call(fn, config=ConfigDict(strict=True))
    for name, fn in OPERATIONS.items()
}


def apply_operation(draft: BlockDraft, name: str, args: Optional[Dict[str, Any]] = None) -> BlockDraft:
    """
    Applique l'opération `name` avec des arguments non typés (corps de requête).

    Opération inconnue, argument manquant, en trop ou mal typé → ValidationError.
    """
    operation = _VALIDATED.get(name)
    if operation is None:
        raise ValidationError(f"Opération inconnue : {name!r}. Disponibles : {sorted(OPERATIONS)}")
    try:
        return operation(draft, **(args or {}))
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][-1]) for err in e.errors() if err.get("loc"))
        raise ValidationError(f"Arguments invalides pour {name} : {fields or e.error_count()}") from e
