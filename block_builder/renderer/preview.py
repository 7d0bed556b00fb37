"""
Projection "preview" : arbre rows → cells → items consommé par l'éditeur interactif.
Les styles viennent de renderer.styles, exactement comme pour l'export HTML.
"""
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field

from ..core.schemas import BlockItem, BlockStructure
from ..items import items_in_cell
from .styles import cell_style, image_placeholder_text, image_style, row_style, text_style

COMPACT_TEXT_LIMIT = 50


class PreviewItem(BaseModel):
    id: str
    type: Literal["text", "image"]
    content: str
    style: Dict[str, str] = Field(default_factory=dict)
    placeholder: Optional[str] = None  # images : texte affiché si l'URL ne charge pas


class PreviewCell(BaseModel):
    row_index: int
    column_index: int
    style: Dict[str, str] = Field(default_factory=dict)
    items: List[PreviewItem] = Field(default_factory=list)
    empty: bool = True
    label: Optional[str] = None


class PreviewRow(BaseModel):
    index: int
    style: Dict[str, str] = Field(default_factory=dict)
    cells: List[PreviewCell] = Field(default_factory=list)


class BlockPreview(BaseModel):
    rows: List[PreviewRow] = Field(default_factory=list)

    @property
    def cell_count(self) -> int:
        return sum(len(r.cells) for r in self.rows)


def _truncate(text: str, limit: int = COMPACT_TEXT_LIMIT) -> str:
    return f"{text[:limit]}..." if len(text) > limit else text


def build_preview(structure: BlockStructure, items: Iterable[BlockItem],
                  compact: bool = False) -> BlockPreview:
    """
    Construit la preview d'un bloc.

    Args:
        structure: structure canonique
        items: items du bloc (ordre d'insertion conservé par cellule)
        compact: mode vignette (texte tronqué à 50 caractères, libellé "Empty")

    Returns:
        BlockPreview (vide si la structure n'a aucune ligne)
    """
    items = list(items)
    rows: List[PreviewRow] = []
    for r_idx, row in enumerate(structure.rows):
        cells = []
        for c_idx in range(row.columns):
            settings = row.column_settings[c_idx]
            preview_items = []
            for item in items_in_cell(items, r_idx, c_idx):
                if item.type == "text":
                    preview_items.append(PreviewItem(
                        id=item.id, type="text",
                        content=_truncate(item.content) if compact else item.content,
                        style=text_style(item, settings),
                    ))
                else:
                    preview_items.append(PreviewItem(
                        id=item.id, type="image", content=item.content,
                        style=image_style(item),
                        placeholder=image_placeholder_text(item.content),
                    ))
            cells.append(PreviewCell(
                row_index=r_idx,
                column_index=c_idx,
                style=cell_style(settings),
                items=preview_items,
                empty=not preview_items,
                label="Empty" if compact and not preview_items else None,
            ))
        rows.append(PreviewRow(index=r_idx, style=row_style(row), cells=cells))
    return BlockPreview(rows=rows)
