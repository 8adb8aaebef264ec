"""
SQLAlchemy ORM models for persistent storage.

A binder is stored as one document: its page/slot grid lives in a single
JSON column and is always written whole.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BinderDB(Base):
    """
    A user's binder stored in the database.

    The pages column holds the full grid:
        [{"page_number": 1, "slots": [{"position": 0, "card": {...} | null}, ...]}, ...]
    """

    __tablename__ = "binders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)

    pages: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<BinderDB(id={self.id}, owner_id={self.owner_id}, name={self.name})>"
