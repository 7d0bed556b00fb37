"""
Mapping unique alignement/padding → déclarations CSS.
Utilisé par la prévisualisation ET par l'export HTML : ne jamais dupliquer.
"""
from typing import Dict

from ..core.schemas import BlockItem, ColumnSettings, Padding, Row

# verticalAlign → axe principal de la colonne (flex-direction: column)
JUSTIFY_CONTENT = {"top": "flex-start", "center": "center", "bottom": "flex-end"}
# horizontalAlign → axe secondaire
ALIGN_ITEMS = {"left": "flex-start", "center": "center", "right": "flex-end"}

TEXT_DEFAULTS = {"font-size": "14px", "color": "#000000", "font-weight": "normal"}
CELL_GAP = "4px"

Style = Dict[str, str]


def padding_css(padding: Padding) -> str:
    return f"{padding.top}px {padding.right}px {padding.bottom}px {padding.left}px"


def row_style(row: Row) -> Style:
    """Conteneur de ligne : grille de `columns` pistes égales + padding de ligne."""
    return {
        "display": "grid",
        "grid-template-columns": f"repeat({row.columns}, 1fr)",
        "padding": padding_css(row.padding),
    }


def cell_style(settings: ColumnSettings) -> Style:
    """Cellule : flex vertical, padding de colonne imbriqué dans celui de la ligne."""
    return {
        "display": "flex",
        "flex-direction": "column",
        "justify-content": JUSTIFY_CONTENT[settings.vertical_align],
        "align-items": ALIGN_ITEMS[settings.horizontal_align],
        "gap": CELL_GAP,
        "min-width": "0",
        "padding": padding_css(settings.padding),
    }


def text_style(item: BlockItem, settings: ColumnSettings) -> Style:
    """L'alignement de la colonne prime sur le textAlign (legacy) de l'item."""
    s = item.styles
    return {
        "font-size": s.font_size or TEXT_DEFAULTS["font-size"],
        "color": s.color or TEXT_DEFAULTS["color"],
        "font-weight": s.font_weight or TEXT_DEFAULTS["font-weight"],
        "text-align": settings.horizontal_align,
        "white-space": "pre-wrap",
        "margin": "0",
    }


def image_style(item: BlockItem) -> Style:
    s = item.styles
    return {
        "display": "block",
        "width": s.width or "auto",
        "height": s.height or "auto",
        "max-width": "100%",
    }


def image_placeholder_style() -> Style:
    return {
        "display": "none",
        "padding": "8px",
        "border": "1px solid #e5e7eb",
        "background": "#f9fafb",
        "color": "#6b7280",
        "font-size": "12px",
        "word-break": "break-all",
    }


def image_placeholder_text(url: str) -> str:
    """Message affiché à la place d'une image injoignable (contient l'URL brute)."""
    return f"Image unavailable: {url}"


def style_attr(style: Style) -> str:
    """Sérialise les déclarations dans l'ordre d'insertion (sortie déterministe)."""
    return ";".join(f"{k}:{v}" for k, v in style.items())
