"""
Data models — User, Block, BlockItem
SQLAlchemy (SQLite) + schémas Pydantic v2 de l'API
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

import sqlalchemy as sa
from pydantic import BaseModel, Field
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ── ORM ────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


class UserDB(Base):
    __tablename__ = "users"
    id:         Mapped[str]      = mapped_column(sa.String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email:      Mapped[str]      = mapped_column(sa.String, nullable=False, unique=True)
    token:      Mapped[str]      = mapped_column(sa.String, nullable=False, unique=True, default=lambda: uuid.uuid4().hex)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)

    blocks: Mapped[List["BlockDB"]] = relationship("BlockDB", back_populates="owner", cascade="all, delete-orphan")


class BlockDB(Base):
    __tablename__ = "blocks"
    id:          Mapped[str]      = mapped_column(sa.String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id:     Mapped[str]      = mapped_column(sa.String, sa.ForeignKey("users.id"), nullable=False, index=True)
    name:        Mapped[str]      = mapped_column(sa.String, nullable=False)
    description: Mapped[str]      = mapped_column(sa.Text, default="")
    structure:   Mapped[str]      = mapped_column(sa.Text, nullable=False)  # JSON {"rows": [...]}
    created_at:  Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)
    updated_at:  Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)

    owner: Mapped["UserDB"]            = relationship("UserDB", back_populates="blocks")
    items: Mapped[List["BlockItemDB"]] = relationship("BlockItemDB", back_populates="block", cascade="all, delete-orphan")


class BlockItemDB(Base):
    __tablename__ = "block_items"
    id:           Mapped[str]      = mapped_column(sa.String, primary_key=True, default=lambda: str(uuid.uuid4()))
    block_id:     Mapped[str]      = mapped_column(sa.String, sa.ForeignKey("blocks.id"), nullable=False, index=True)
    row_index:    Mapped[int]      = mapped_column(sa.Integer, nullable=False)
    column_index: Mapped[int]      = mapped_column(sa.Integer, nullable=False)
    position:     Mapped[int]      = mapped_column(sa.Integer, default=0)  # ordre dans la cellule
    type:         Mapped[str]      = mapped_column(sa.String, nullable=False)
    content:      Mapped[str]      = mapped_column(sa.Text, nullable=False)
    styles:       Mapped[str]      = mapped_column(sa.Text, default="{}")
    created_at:   Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)
    updated_at:   Mapped[datetime] = mapped_column(sa.DateTime, default=datetime.utcnow)

    block: Mapped["BlockDB"] = relationship("BlockDB", back_populates="items")


# ── PYDANTIC SCHEMAS ────────────────────────────────────────────────────

class UserCreate(BaseModel):
    email: str


class BlockCreate(BaseModel):
    name:        str
    description: str                      = ""
    structure:   Optional[Dict[str, Any]] = None


class BlockUpdate(BaseModel):
    name:        Optional[str]            = None
    description: Optional[str]            = None
    structure:   Optional[Dict[str, Any]] = None


class ItemCreate(BaseModel):
    row_index:    int
    column_index: int
    type:         Literal["text", "image"] = "text"
    content:      str
    styles:       Dict[str, Any]           = Field(default_factory=dict)


class ItemUpdate(BaseModel):
    content: Optional[str]            = None
    styles:  Optional[Dict[str, Any]] = None


class EditRequest(BaseModel):
    """Opération structurelle : {"op": "set_row_columns", "args": {"row_index": 0, "columns": 3}}"""
    op:   str
    args: Dict[str, Any] = Field(default_factory=dict)
