"""
Schémas Pydantic du block builder.
Structure fixe : Block → Row → Column (cellule) → BlockItem

Les clés JSON suivent le format stocké historiquement (camelCase :
columnSettings, horizontalAlign…) ; les attributs Python sont en snake_case.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

HorizontalAlign = Literal["left", "center", "right"]
VerticalAlign = Literal["top", "center", "bottom"]
Side = Literal["top", "right", "bottom", "left"]
Axis = Literal["horizontal", "vertical"]
ItemType = Literal["text", "image"]

HORIZONTAL_VALUES = ("left", "center", "right")
VERTICAL_VALUES = ("top", "center", "bottom")
SIDES = ("top", "right", "bottom", "left")
MAX_COLUMNS = 12


class Padding(BaseModel):
    """Padding en pixels (top/right/bottom/left)."""
    top: int = Field(default=0, ge=0)
    right: int = Field(default=0, ge=0)
    bottom: int = Field(default=0, ge=0)
    left: int = Field(default=0, ge=0)


class ColumnSettings(BaseModel):
    """Réglages d'une colonne : alignements + padding interne de la cellule."""
    model_config = ConfigDict(populate_by_name=True)

    horizontal_align: HorizontalAlign = Field(default="left", alias="horizontalAlign")
    vertical_align: VerticalAlign = Field(default="top", alias="verticalAlign")
    padding: Padding = Field(default_factory=Padding)


class Row(BaseModel):
    """
    Ligne de la grille (1-12 colonnes de largeur égale).

    `alignment` est le champ legacy (une valeur pour toute la ligne). Une ligne
    stockée sans `columnSettings` est résolue ici, une seule fois : chaque
    colonne hérite de `alignment`. Ensuite seuls les column_settings comptent.
    """
    model_config = ConfigDict(populate_by_name=True)

    columns: int = Field(default=1, ge=1, le=MAX_COLUMNS)
    alignment: HorizontalAlign = "left"
    padding: Padding = Field(default_factory=Padding)
    column_settings: List[ColumnSettings] = Field(default_factory=list, alias="columnSettings")

    @model_validator(mode="after")
    def _canonical_column_settings(self) -> "Row":
        if not self.column_settings:
            # ligne legacy
            self.column_settings = [
                ColumnSettings(horizontal_align=self.alignment) for _ in range(self.columns)
            ]
        elif len(self.column_settings) < self.columns:
            missing = self.columns - len(self.column_settings)
            self.column_settings = self.column_settings + [ColumnSettings() for _ in range(missing)]
        elif len(self.column_settings) > self.columns:
            self.column_settings = self.column_settings[: self.columns]
        return self


class BlockStructure(BaseModel):
    rows: List[Row] = Field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ItemStyles(BaseModel):
    """Styles optionnels d'un item (texte : fontSize/color/fontWeight/textAlign, image : width/height)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    font_size: Optional[str] = Field(default=None, alias="fontSize")
    color: Optional[str] = None
    font_weight: Optional[str] = Field(default=None, alias="fontWeight")
    text_align: Optional[HorizontalAlign] = Field(default=None, alias="textAlign")
    width: Optional[str] = None
    height: Optional[str] = None

    @classmethod
    def parse(cls, raw: Optional[Mapping[str, Any]]) -> "ItemStyles":
        """Valide des styles bruts ; type ou valeur invalide → ValidationError."""
        try:
            return cls.model_validate(dict(raw or {}))
        except PydanticValidationError as e:
            fields = ", ".join(str(err["loc"][-1]) for err in e.errors() if err.get("loc"))
            raise ValidationError(f"Styles invalides : {fields}") from e

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def merged(self, patch: Mapping[str, Any]) -> "ItemStyles":
        """Merge superficiel : seules les clés nommées dans `patch` sont remplacées (None = suppression)."""
        data = self.to_json()
        data.update(ItemStyles.parse(patch).model_dump(by_alias=True, exclude_unset=True))
        return ItemStyles.model_validate({k: v for k, v in data.items() if v is not None})


class BlockItem(BaseModel):
    """Contenu (texte ou URL d'image) placé dans une cellule (row_index, column_index)."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    block_id: Optional[str] = None
    row_index: int = Field(ge=0)
    column_index: int = Field(ge=0)
    type: ItemType = "text"
    content: str
    styles: ItemStyles = Field(default_factory=ItemStyles)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_serializer("styles")
    def _styles_as_stored(self, styles: ItemStyles) -> Dict[str, Any]:
        return styles.to_json()

    @property
    def address(self) -> tuple:
        return (self.row_index, self.column_index)


class Block(BaseModel):
    """Bloc réutilisable, possédé par un utilisateur."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    name: str
    description: str = ""
    structure: BlockStructure = Field(default_factory=BlockStructure)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class BlockWithItems(Block):
    """Bloc + items : agrégat chargé par l'éditeur, copié tel quel dans les templates."""
    items: List[BlockItem] = Field(default_factory=list)
