"""
Export HTML d'un bloc — document HTML5 autonome, styles inline uniquement.
Sérialise la même projection que la preview (build_preview) :
  div[data-block-row] (grid + padding ligne)
    → div[data-block-cell] (flex + padding colonne)
      → items dans l'ordre d'adresse
"""
from html import escape
from typing import Iterable, Optional

from ..core.schemas import Block, BlockItem, BlockStructure
from .preview import PreviewCell, PreviewItem, build_preview
from .styles import image_placeholder_style, style_attr

# Masque l'image cassée et révèle le placeholder (frère suivant)
_IMG_ONERROR = "this.style.display='none';this.nextElementSibling.style.display='block';"


def _attr(value: str) -> str:
    return escape(value, quote=True)


def render_item(item: PreviewItem) -> str:
    if item.type == "text":
        return (f'<div data-block-item="{_attr(item.id)}" style="{_attr(style_attr(item.style))}">'
                f'{escape(item.content)}</div>')
    return (f'<div data-block-item="{_attr(item.id)}">'
            f'<img src="{_attr(item.content)}" alt="{_attr(item.placeholder or "")}" style="{_attr(style_attr(item.style))}" '
            f'onerror="{_IMG_ONERROR}">'
            f'<div style="{_attr(style_attr(image_placeholder_style()))}">{escape(item.placeholder or "")}</div>'
            f'</div>')


def render_cell(cell: PreviewCell) -> str:
    inner = "".join(render_item(i) for i in cell.items)
    return (f'    <div data-block-cell="{cell.row_index}-{cell.column_index}" '
            f'style="{_attr(style_attr(cell.style))}">{inner}</div>')


def render_block_fragment(structure: BlockStructure, items: Iterable[BlockItem]) -> str:
    """Lignes du bloc seules (sans document) — utilisé pour l'intégration dans un template."""
    preview = build_preview(structure, items)
    parts = []
    for row in preview.rows:
        cells_html = "\n".join(render_cell(c) for c in row.cells)
        parts.append(f'  <div data-block-row="{row.index}" style="{_attr(style_attr(row.style))}">\n'
                     f'{cells_html}\n  </div>')
    return "\n".join(parts)


def render_block_html(block: Block, items: Optional[Iterable[BlockItem]] = None) -> str:
    """
    Génère le HTML complet d'un bloc (copie presse-papier / intégration).

    Args:
        block: bloc (Block ou BlockWithItems)
        items: items du bloc ; par défaut `block.items` si présent

    Returns:
        Document HTML5 déterministe
    """
    if items is None:
        items = getattr(block, "items", [])
    fragment = render_block_fragment(block.structure, items)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(block.name)}</title>
</head>
<body style="margin:0;padding:0;">
<div data-block-id="{_attr(block.id)}" style="width:100%;">
{fragment}
</div>
</body>
</html>"""
