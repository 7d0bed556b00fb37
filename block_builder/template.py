"""
Templates d'email — consommateurs des blocs.

Un composant `block` embarque une COPIE (blockData) du bloc + items au moment
de l'insertion : les éditions ultérieures du bloc source ne sont pas propagées.
"""
import uuid
from html import escape
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .core.schemas import BlockWithItems
from .errors import NotFoundError
from .renderer.html import render_block_fragment


class ProjectStyles(BaseModel):
    """Styles partagés d'un projet (global_styles)."""
    model_config = ConfigDict(populate_by_name=True)

    primary_color: str = Field(default="#3b82f6", alias="primaryColor")
    secondary_color: str = Field(default="#64748b", alias="secondaryColor")
    font_family: str = Field(default="Work Sans, sans-serif", alias="fontFamily")
    font_size: str = Field(default="16px", alias="fontSize")
    background_color: str = Field(default="#ffffff", alias="backgroundColor")
    text_color: str = Field(default="#000000", alias="textColor")


class ComponentStyles(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    font_size: Optional[str] = Field(default=None, alias="fontSize")
    color: Optional[str] = None
    text_align: Optional[Literal["left", "center", "right"]] = Field(default=None, alias="textAlign")
    width: Optional[str] = None
    height: Optional[str] = None


class EmailComponent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    type: Literal["text", "image", "block"]
    content: str = ""
    styles: ComponentStyles = Field(default_factory=ComponentStyles)
    order: int = 0
    block_data: Optional[BlockWithItems] = Field(default=None, alias="blockData")


class EmailTemplate(BaseModel):
    name: str
    components: List[EmailComponent] = Field(default_factory=list)

    def sorted_components(self) -> List[EmailComponent]:
        return sorted(self.components, key=lambda c: c.order)


def snapshot_block(block: BlockWithItems, order: int = 0) -> EmailComponent:
    """Composant `block` contenant une copie profonde du bloc et de ses items."""
    return EmailComponent(type="block", content=block.name, order=order,
                          block_data=block.model_copy(deep=True))


def insert_component(template: EmailTemplate, component: EmailComponent, at: int) -> EmailTemplate:
    """Insère à la position `at` ; les composants d'ordre >= at sont décalés."""
    shifted = [
        c.model_copy(update={"order": c.order + 1}) if c.order >= at else c
        for c in template.components
    ]
    return template.model_copy(update={"components": shifted + [component.model_copy(update={"order": at})]})


def move_component(template: EmailTemplate, component_id: str,
                   direction: Literal["up", "down"]) -> EmailTemplate:
    """Échange l'ordre avec le voisin ; inchangé en bout de liste."""
    ordered = template.sorted_components()
    idx = next((i for i, c in enumerate(ordered) if c.id == component_id), None)
    if idx is None:
        raise NotFoundError(f"Composant introuvable : {component_id}")
    target = idx - 1 if direction == "up" else idx + 1
    if target < 0 or target >= len(ordered):
        return template
    a, b = ordered[idx], ordered[target]
    swapped = {a.id: b.order, b.id: a.order}
    return template.model_copy(update={"components": [
        c.model_copy(update={"order": swapped[c.id]}) if c.id in swapped else c
        for c in template.components
    ]})


def render_component(component: EmailComponent, styles: ProjectStyles) -> str:
    s = component.styles
    if component.type == "text":
        return (f'    <div style="margin-bottom: 16px; font-size: {escape(s.font_size or styles.font_size)}; '
                f'color: {escape(s.color or styles.text_color)}; text-align: {s.text_align or "left"}; width: 100%;">\n'
                f'      {escape(component.content or "Sample text")}\n    </div>\n')
    if component.type == "image":
        return (f'    <div style="margin-bottom: 16px; width: 100%; text-align: center;">\n'
                f'      <img src="{escape(component.content, quote=True)}" alt="Template Image" '
                f'style="max-width: 100%; height: {escape(s.height or "auto")}; border-radius: 4px;" />\n    </div>\n')
    if component.block_data is None:
        return ""
    fragment = render_block_fragment(component.block_data.structure, component.block_data.items)
    return f'    <div style="margin-bottom: 16px; width: 100%;">\n{fragment}\n    </div>\n'


def render_template_html(template: EmailTemplate, styles: Optional[ProjectStyles] = None) -> str:
    """HTML "Copy HTML" d'un template : conteneur 600px centré, composants triés par `order`."""
    styles = styles or ProjectStyles()
    body = "".join(render_component(c, styles) for c in template.sorted_components())
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{escape(template.name)}</title>
</head>
<body style="margin: 0; padding: 20px; font-family: {escape(styles.font_family)}; background-color: #f5f5f5;">
  <div style="max-width: 600px; margin: 0 auto; background-color: {escape(styles.background_color)}; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
{body}  </div>
</body>
</html>"""
