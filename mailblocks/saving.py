"""
Coordination des sauvegardes — frontière asynchrone vers la persistance.

  - une seule sauvegarde en vol par bloc (SaveInProgressError sinon)
  - la sauvegarde tourne dans un thread avec sa propre session SQLAlchemy
  - aucun retry : l'erreur remonte, le draft de l'appelant reste intact
"""
import asyncio
import logging
import threading
from typing import Callable, Optional, Set

from sqlalchemy.orm import Session

from block_builder import BlockDraft, BlockWithItems
from block_builder.errors import BlockError, SaveInProgressError

from .database import SessionLocal
from .store import SqlBlockStore

log = logging.getLogger(__name__)


class BlockSaveCoordinator:

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def is_saving(self, block_id: str) -> bool:
        with self._lock:
            return block_id in self._in_flight

    def _acquire(self, block_id: str) -> None:
        with self._lock:
            if block_id in self._in_flight:
                raise SaveInProgressError(f"Sauvegarde déjà en cours pour le bloc {block_id}")
            self._in_flight.add(block_id)

    def _release(self, block_id: str) -> None:
        with self._lock:
            self._in_flight.discard(block_id)

    def _run(self, fn: Callable[[SqlBlockStore], object]):
        db = self._session_factory()
        try:
            return fn(SqlBlockStore(db))
        finally:
            db.close()

    async def load(self, block_id: str, owner_id: str) -> BlockDraft:
        return await asyncio.to_thread(self._run, lambda store: store.load_draft(block_id, owner_id))

    async def save(self, block_id: str, owner_id: str, draft: BlockDraft,
                   name: Optional[str] = None, description: Optional[str] = None) -> BlockWithItems:
        self._acquire(block_id)
        try:
            return await asyncio.to_thread(
                self._run,
                lambda store: store.save_draft(block_id, owner_id, draft, name=name, description=description),
            )
        except BlockError as e:
            log.warning("Sauvegarde refusée pour %s : %s", block_id, e)
            raise
        finally:
            self._release(block_id)
