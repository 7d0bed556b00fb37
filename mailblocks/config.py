"""Configuration — variables d'environnement (lues à chaque appel, pour les tests)."""
import os
from pathlib import Path
from typing import List

DATA_DIR = Path(__file__).parent.parent / "data"


def database_url() -> str:
    """DATABASE_URL prioritaire, sinon SQLite sur DB_PATH (défaut data/mailblocks.db)."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    db_path = os.getenv("DB_PATH")
    if not db_path:
        DATA_DIR.mkdir(exist_ok=True)
        db_path = str(DATA_DIR / "mailblocks.db")
    return f"sqlite:///{db_path}"


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]
