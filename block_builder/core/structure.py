"""
Modèle de structure (grille lignes × colonnes), indépendant du contenu.
"""
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from .schemas import BlockStructure, ColumnSettings, Row, HORIZONTAL_VALUES, MAX_COLUMNS


def default_row() -> Row:
    """Ligne par défaut : 1 colonne, alignée à gauche, padding nul."""
    return Row(columns=1, alignment="left", column_settings=[ColumnSettings()])


def create_default_structure() -> BlockStructure:
    return BlockStructure(rows=[default_row()])


def validate_structure(raw: Any) -> bool:
    """
    Vérifie la forme d'une structure brute (dict JSON ou BlockStructure).
    Ne lève jamais : renvoie False si la forme est invalide.
    Padding et columnSettings sont optionnels.
    """
    if isinstance(raw, BlockStructure):
        raw = raw.to_json()
    if not isinstance(raw, Mapping):
        return False
    rows = raw.get("rows")
    if not isinstance(rows, list):
        return False
    for row in rows:
        if not isinstance(row, Mapping):
            return False
        columns = row.get("columns")
        if isinstance(columns, bool) or not isinstance(columns, int):
            return False
        if not 1 <= columns <= MAX_COLUMNS:
            return False
        if "alignment" in row and row["alignment"] not in HORIZONTAL_VALUES:
            return False
    return True


def parse_structure(raw: Any) -> BlockStructure:
    """Valide puis convertit une structure brute en BlockStructure canonique (legacy résolu)."""
    if isinstance(raw, BlockStructure):
        return raw
    if not validate_structure(raw):
        raise ValidationError("Structure de bloc invalide")
    try:
        return BlockStructure.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f"Structure de bloc invalide : {e.error_count()} erreur(s)") from e


def total_cells(structure: BlockStructure) -> int:
    return sum(row.columns for row in structure.rows)


def is_valid_address(structure: BlockStructure, row: int, col: int) -> bool:
    if row < 0 or row >= len(structure.rows):
        return False
    return 0 <= col < structure.rows[row].columns


def cell_index(structure: BlockStructure, row: int, col: int) -> Optional[int]:
    """Index linéaire (parcours ligne par ligne) ; None si l'adresse est invalide."""
    if not is_valid_address(structure, row, col):
        return None
    return sum(r.columns for r in structure.rows[:row]) + col
