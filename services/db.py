"""
services/db.py
────────────────────────────────────────────────────────────────────────
* SQLAlchemy v2 setup for the local blob store
* One flat key → text table, the client's "local storage"
* Writes are synchronous and committed immediately
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

# ───────── well-known keys ──────────────────────────────────────────
LANG_KEY = "ot_lang"
THEME_KEY = "ot_theme"
PERSONA_KEY = "ot_persona"
HISTORY_KEY = "ot_metabolic_archive"
FEEDBACK_KEY = "ot_feedback_history"


# ───────── connection helper ────────────────────────────────────────
def create_store_engine(url: str) -> Engine:
    # in-memory sqlite must share one connection or every session sees an empty db
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base()


class Blob(Base):
    __tablename__ = "blobs"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# ───────── store ─────────────────────────────────────────────────────
class BlobStore:
    """Flat key-value persistence. Values are opaque strings."""

    def __init__(self, engine: Engine) -> None:
        Base.metadata.create_all(engine)
        self._session = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str | None = None) -> "BlobStore":
        return cls(create_store_engine(url or settings.blob_store_url))

    def get(self, key: str) -> str | None:
        with self._session() as session:
            row = session.get(Blob, key)
            return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        with self._session() as session:
            row = session.get(Blob, key)
            if row is None:
                session.add(Blob(key=key, value=value))
            else:
                row.value = value
            session.commit()

    def remove(self, key: str) -> None:
        with self._session() as session:
            row = session.get(Blob, key)
            if row is not None:
                session.delete(row)
                session.commit()

    def keys(self) -> list[str]:
        with self._session() as session:
            return list(session.scalars(select(Blob.key).order_by(Blob.key)))
