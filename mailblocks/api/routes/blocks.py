"""
Blocs — CRUD + items + éditions structurelles + rendu.
GET    /api/blocks                 → liste des blocs de l'utilisateur
POST   /api/blocks                 → création (structure par défaut si absente)
GET    /api/blocks/{id}            → bloc + items
POST   /api/blocks/{id}/edit       → opération structurelle + save atomique
GET    /api/blocks/{id}/preview    → projection preview (JSON)
GET    /api/blocks/{id}/html       → export HTML autonome
"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from block_builder import OPERATIONS, apply_operation, block_stats, build_preview, render_block_html
from block_builder.errors import ValidationError

from ...auth import CurrentUser, get_current_user
from ...database import db_create_user, db_get_user_by_email, get_db
from ...models import BlockCreate, BlockUpdate, EditRequest, ItemCreate, ItemUpdate, UserCreate
from ...saving import BlockSaveCoordinator
from ...store import SqlBlockStore

log = logging.getLogger(__name__)
router = APIRouter(tags=["Blocks"])

saver = BlockSaveCoordinator()


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


# ── Utilisateurs ───────────────────────────────────────────────────────────────

@router.post("/api/users", status_code=201)
def create_user(req: UserCreate, db: Session = Depends(get_db)):
    """Crée un utilisateur et renvoie son token de session."""
    if not req.email.strip() or "@" not in req.email:
        raise ValidationError("Email invalide")
    if db_get_user_by_email(db, req.email):
        raise ValidationError("Email déjà utilisé")
    user = db_create_user(db, req.email)
    return {"id": user.id, "email": user.email, "token": user.token}


# ── Blocs ──────────────────────────────────────────────────────────────────────

@router.get("/api/blocks")
def list_blocks(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    store = SqlBlockStore(db)
    out = []
    for block in store.list_blocks(user.id):
        data = _dump(block)
        data["stats"] = block_stats(block.structure, store.list_items(block.id))
        out.append(data)
    return out


@router.post("/api/blocks", status_code=201)
def create_block(req: BlockCreate, user: CurrentUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    block = SqlBlockStore(db).create_block(user.id, req.name, req.description, req.structure)
    return _dump(block)


@router.get("/api/blocks/{block_id}")
def get_block(block_id: str, user: CurrentUser = Depends(get_current_user),
              db: Session = Depends(get_db)):
    return _dump(SqlBlockStore(db).get_block_with_items(block_id, user.id))


@router.patch("/api/blocks/{block_id}")
def update_block(block_id: str, req: BlockUpdate, user: CurrentUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    fields = req.model_dump(exclude_unset=True)
    return _dump(SqlBlockStore(db).update_block(block_id, user.id, fields))


@router.delete("/api/blocks/{block_id}")
def delete_block(block_id: str, user: CurrentUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    SqlBlockStore(db).delete_block(block_id, user.id)
    return {"ok": True}


# ── Items ──────────────────────────────────────────────────────────────────────

@router.post("/api/blocks/{block_id}/items", status_code=201)
def create_item(block_id: str, req: ItemCreate, user: CurrentUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    item = SqlBlockStore(db).create_item(
        block_id, req.row_index, req.column_index, req.type, req.content, req.styles, owner_id=user.id)
    return _dump(item)


@router.patch("/api/items/{item_id}")
def update_item(item_id: str, req: ItemUpdate, user: CurrentUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    fields = req.model_dump(exclude_unset=True)
    return _dump(SqlBlockStore(db).update_item(item_id, fields, owner_id=user.id))


@router.delete("/api/items/{item_id}")
def delete_item(item_id: str, user: CurrentUser = Depends(get_current_user),
                db: Session = Depends(get_db)):
    SqlBlockStore(db).delete_item(item_id, owner_id=user.id)
    return {"ok": True}


# ── Édition structurelle ───────────────────────────────────────────────────────

@router.post("/api/blocks/{block_id}/edit")
async def edit_block(block_id: str, req: EditRequest, user: CurrentUser = Depends(get_current_user)):
    """Applique une opération (add_row, set_row_columns, move_row…) puis sauvegarde en une transaction."""
    if req.op not in OPERATIONS:
        raise ValidationError(f"Opération inconnue : {req.op!r}. Disponibles : {sorted(OPERATIONS)}")
    draft = await saver.load(block_id, user.id)
    draft = apply_operation(draft, req.op, req.args)
    log.info("Bloc %s : %s %s", block_id, req.op, req.args)
    saved = await saver.save(block_id, user.id, draft)
    return _dump(saved)


# ── Rendu ──────────────────────────────────────────────────────────────────────

@router.get("/api/blocks/{block_id}/preview")
def preview_block(block_id: str, compact: bool = Query(False),
                  user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    block = SqlBlockStore(db).get_block_with_items(block_id, user.id)
    return build_preview(block.structure, block.items, compact=compact).model_dump()


@router.get("/api/blocks/{block_id}/html", response_class=HTMLResponse)
def block_html(block_id: str, user: CurrentUser = Depends(get_current_user),
               db: Session = Depends(get_db)):
    block = SqlBlockStore(db).get_block_with_items(block_id, user.id)
    return HTMLResponse(render_block_html(block, block.items))
