from .html import render_block_html, render_block_fragment
from .preview import BlockPreview, PreviewRow, PreviewCell, PreviewItem, build_preview

__all__ = [
    "render_block_html", "render_block_fragment",
    "BlockPreview", "PreviewRow", "PreviewCell", "PreviewItem", "build_preview",
]
