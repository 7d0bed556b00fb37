"""SQLite — init + session + helpers"""
import json
import logging
from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import database_url
from .models import Base, UserDB

log = logging.getLogger(__name__)

# Un engine par URL : DB_PATH peut changer entre deux tests
_ENGINES: Dict[str, Engine] = {}


def get_engine() -> Engine:
    url = database_url()
    if url not in _ENGINES:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _ENGINES[url] = create_engine(url, connect_args=connect_args)
    return _ENGINES[url]


def SessionLocal() -> Session:
    return sessionmaker(autoflush=False, bind=get_engine())()


def init_db():
    Base.metadata.create_all(bind=get_engine())
    log.info("DB initialisée (%s)", database_url())


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ── JSON helpers ──
def jl(s: Optional[str]) -> dict:
    try:
        return json.loads(s or "{}")
    except ValueError:
        return {}


def jd(o) -> str:
    return json.dumps(o, ensure_ascii=False)


# ── Users ──
def db_create_user(db: Session, email: str) -> UserDB:
    user = UserDB(email=email.strip().lower())
    db.add(user); db.commit(); db.refresh(user); return user


def db_get_user_by_token(db: Session, token: str) -> Optional[UserDB]:
    return db.query(UserDB).filter_by(token=token).first()


def db_get_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter_by(email=email.strip().lower()).first()
