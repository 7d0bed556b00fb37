"""
Adaptateur de persistance — blocs + items sur SQLAlchemy.

Toutes les requêtes sont filtrées par propriétaire : un bloc d'un autre
utilisateur est simplement introuvable (NotFoundError, pas de "forbidden").
Les structures passent par parse_structure au chargement et avant écriture.
"""
import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from block_builder import (
    Block, BlockDraft, BlockItem, BlockStructure, BlockWithItems, ItemStore, ItemStyles,
    create_default_structure, is_valid_address, parse_structure,
)
from block_builder.errors import BlockError, NotFoundError, PersistenceError, ValidationError

from .database import jd, jl
from .models import BlockDB, BlockItemDB

log = logging.getLogger(__name__)

_BLOCK_FIELDS = ("name", "description", "structure")


def _block_from_row(row: BlockDB) -> Block:
    return Block(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        description=row.description or "",
        structure=parse_structure(jl(row.structure)),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _item_from_row(row: BlockItemDB) -> BlockItem:
    return BlockItem(
        id=row.id,
        block_id=row.block_id,
        row_index=row.row_index,
        column_index=row.column_index,
        type=row.type,
        content=row.content,
        styles=ItemStyles.parse(jl(row.styles)),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Le nom du bloc est obligatoire")
    return cleaned


class SqlBlockStore:
    """Implémentation SQL du collaborateur de persistance."""

    def __init__(self, db: Session):
        self.db = db

    # ── Transaction ──

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("Commit échoué")
            raise PersistenceError(str(e)) from e

    def _query(self, fn):
        try:
            return fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("Lecture échouée")
            raise PersistenceError(str(e)) from e

    # ── Lookups ──

    def _owned_block(self, block_id: str, owner_id: str) -> BlockDB:
        row = self._query(lambda: self.db.query(BlockDB).filter_by(id=block_id, user_id=owner_id).first())
        if row is None:
            raise NotFoundError(f"Bloc introuvable : {block_id}")
        return row

    def _item_row(self, item_id: str, owner_id: Optional[str] = None) -> BlockItemDB:
        def q():
            query = self.db.query(BlockItemDB).filter(BlockItemDB.id == item_id)
            if owner_id is not None:
                query = query.join(BlockDB).filter(BlockDB.user_id == owner_id)
            return query.first()
        row = self._query(q)
        if row is None:
            raise NotFoundError(f"Item introuvable : {item_id}")
        return row

    def _item_rows(self, block_id: str) -> List[BlockItemDB]:
        return self._query(lambda: (
            self.db.query(BlockItemDB)
            .filter_by(block_id=block_id)
            .order_by(BlockItemDB.row_index, BlockItemDB.column_index,
                      BlockItemDB.position, BlockItemDB.created_at)
            .all()
        ))

    # ── Blocks ──

    def list_blocks(self, owner_id: str) -> List[Block]:
        rows = self._query(lambda: (
            self.db.query(BlockDB).filter_by(user_id=owner_id).order_by(BlockDB.created_at.desc()).all()
        ))
        return [_block_from_row(r) for r in rows]

    def get_block(self, block_id: str, owner_id: str) -> Block:
        return _block_from_row(self._owned_block(block_id, owner_id))

    def get_block_with_items(self, block_id: str, owner_id: str) -> BlockWithItems:
        block = self.get_block(block_id, owner_id)
        return BlockWithItems(**block.model_dump(), items=self.list_items(block_id))

    def load_draft(self, block_id: str, owner_id: str) -> BlockDraft:
        block = self.get_block_with_items(block_id, owner_id)
        return BlockDraft(block_id=block.id, structure=block.structure, items=block.items)

    def create_block(self, owner_id: str, name: str, description: str = "",
                     structure: Any = None) -> Block:
        name = _clean_name(name)
        structure = create_default_structure() if structure is None else parse_structure(structure)
        row = BlockDB(user_id=owner_id, name=name, description=description or "",
                      structure=jd(structure.to_json()))
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        log.info("Bloc créé %s (%s)", row.id, name)
        return _block_from_row(row)

    def update_block(self, block_id: str, owner_id: str, fields: Mapping[str, Any]) -> Block:
        row = self._owned_block(block_id, owner_id)
        unknown = set(fields) - set(_BLOCK_FIELDS)
        if unknown:
            raise ValidationError(f"Champs non modifiables : {sorted(unknown)}")
        # tout valider avant de toucher à la ligne
        name = _clean_name(fields["name"]) if "name" in fields else row.name
        structure = None
        if "structure" in fields:
            structure = parse_structure(fields["structure"])
            self._check_items_fit(block_id, structure)
        row.name = name
        if "description" in fields:
            row.description = fields["description"] or ""
        if structure is not None:
            row.structure = jd(structure.to_json())
        row.updated_at = datetime.utcnow()
        self._commit()
        return _block_from_row(row)

    def _check_items_fit(self, block_id: str, structure: BlockStructure) -> None:
        """Refuse une structure qui laisserait des items sans cellule."""
        for item in self._item_rows(block_id):
            if not is_valid_address(structure, item.row_index, item.column_index):
                raise ValidationError(
                    f"L'item {item.id} ({item.row_index}, {item.column_index}) sort de la nouvelle structure"
                )

    def delete_block(self, block_id: str, owner_id: str) -> None:
        row = self._owned_block(block_id, owner_id)
        self.db.delete(row)  # cascade → block_items
        self._commit()
        log.info("Bloc supprimé %s", block_id)

    # ── Items ──

    def list_items(self, block_id: str) -> List[BlockItem]:
        return [_item_from_row(r) for r in self._item_rows(block_id)]

    def create_item(self, block_id: str, row_index: int, column_index: int, type: str,
                    content: str, styles: Optional[Mapping[str, Any]] = None,
                    owner_id: Optional[str] = None) -> BlockItem:
        if owner_id is not None:
            block = self.get_block(block_id, owner_id)
        else:
            row = self._query(lambda: self.db.query(BlockDB).filter_by(id=block_id).first())
            if row is None:
                raise NotFoundError(f"Bloc introuvable : {block_id}")
            block = _block_from_row(row)
        existing = self._item_rows(block_id)
        # validation : contenu, type, adresse
        item = ItemStore(block_id=block_id, structure=block.structure).create(
            row_index, column_index, type, content, styles)
        self.db.add(BlockItemDB(
            id=item.id, block_id=block_id,
            row_index=item.row_index, column_index=item.column_index,
            position=len(existing), type=item.type, content=item.content,
            styles=jd(item.styles.to_json()),
            created_at=item.created_at, updated_at=item.updated_at,
        ))
        self._commit()
        return item

    def update_item(self, item_id: str, fields: Mapping[str, Any],
                    owner_id: Optional[str] = None) -> BlockItem:
        row = self._item_row(item_id, owner_id)
        unknown = set(fields) - {"content", "styles"}
        if unknown:
            raise ValidationError(f"Champs non modifiables : {sorted(unknown)}")
        store = ItemStore([_item_from_row(row)])
        updated = store.update(item_id, content=fields.get("content"), styles=fields.get("styles"))
        row.content = updated.content
        row.styles = jd(updated.styles.to_json())
        row.updated_at = updated.updated_at
        self._commit()
        return updated

    def delete_item(self, item_id: str, owner_id: Optional[str] = None) -> None:
        row = self._item_row(item_id, owner_id)
        self.db.delete(row)
        self._commit()

    # ── Save agrégé ──

    def save_draft(self, block_id: str, owner_id: str, draft: BlockDraft,
                   name: Optional[str] = None, description: Optional[str] = None) -> BlockWithItems:
        """
        Écrit structure + réconciliation des items en UNE transaction.

        Supprime `draft.removed_item_ids`, réécrit adresse et position des items
        restants. Au moindre échec (item absent, erreur SQL) tout est annulé :
        ni la base ni le draft de l'appelant ne sont modifiés.
        """
        row = self._owned_block(block_id, owner_id)
        structure = parse_structure(draft.structure.to_json())
        for item in draft.items:
            if not is_valid_address(structure, item.row_index, item.column_index):
                raise ValidationError(f"Adresse invalide pour l'item {item.id}")
        try:
            if name is not None:
                row.name = _clean_name(name)
            if description is not None:
                row.description = description
            row.structure = jd(structure.to_json())
            row.updated_at = datetime.utcnow()

            removed = set(draft.removed_item_ids)
            existing = {r.id: r for r in self._item_rows(block_id)}
            missing = removed - set(existing)
            if missing:
                raise NotFoundError(f"Items déjà supprimés : {sorted(missing)}")
            for item_id in removed:
                self.db.delete(existing[item_id])

            for position, item in enumerate(draft.items):
                item_row = existing.get(item.id)
                if item_row is None or item.id in removed:
                    raise NotFoundError(f"Item introuvable : {item.id}")
                item_row.row_index = item.row_index
                item_row.column_index = item.column_index
                item_row.position = position

            # items créés après le chargement du draft : leur cellule doit survivre
            seen = {i.id for i in draft.items} | removed
            for item_id, item_row in existing.items():
                if item_id not in seen and not is_valid_address(structure, item_row.row_index, item_row.column_index):
                    raise ValidationError(
                        f"Draft obsolète : l'item {item_id} ({item_row.row_index}, {item_row.column_index}) "
                        "sortirait de la nouvelle structure"
                    )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.exception("Sauvegarde du bloc %s échouée", block_id)
            raise PersistenceError(str(e)) from e
        except BlockError:
            self.db.rollback()
            raise
        log.info("Bloc %s sauvegardé (%d items, %d supprimés)", block_id, len(draft.items), len(removed))
        return self.get_block_with_items(block_id, owner_id)
