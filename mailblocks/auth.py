"""
Identité — `Authorization: Bearer <token>` → utilisateur courant.
Pas de token / token inconnu → UnauthenticatedError (401).
"""
from typing import Optional

from fastapi import Depends, Header
from pydantic import BaseModel
from sqlalchemy.orm import Session

from block_builder.errors import UnauthenticatedError

from .database import db_get_user_by_token, get_db


class CurrentUser(BaseModel):
    id: str
    email: str


def _bearer(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    return token.strip() if scheme.lower() == "bearer" else ""


def current_user(db: Session, token: str) -> CurrentUser:
    user = db_get_user_by_token(db, token) if token else None
    if user is None:
        raise UnauthenticatedError("Session invalide ou absente")
    return CurrentUser(id=user.id, email=user.email)


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    return current_user(db, _bearer(authorization))
