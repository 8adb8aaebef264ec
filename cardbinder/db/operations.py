"""
Database CRUD operations.

Binders are read and written as whole documents; there is no partial
update of individual pages or slots.
"""

from dataclasses import asdict, fields
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardbinder.config import SLOTS_PER_PAGE
from cardbinder.models.binder import Binder, Page, Slot
from cardbinder.models.card import Card
from cardbinder.models.db import BinderDB
from cardbinder.services.binder_layout import create_empty_page

_CARD_FIELDS = frozenset(f.name for f in fields(Card))


# --- Serialization ---


def pages_to_document(pages: list[Page]) -> list[dict[str, Any]]:
    """Convert pages to the JSON document stored in BinderDB.pages."""
    return [
        {
            "page_number": page.page_number,
            "slots": [
                {
                    "position": slot.position,
                    "card": asdict(slot.card) if slot.card is not None else None,
                }
                for slot in page.slots
            ],
        }
        for page in pages
    ]


def card_from_document(data: dict[str, Any]) -> Card:
    """Build a Card from stored data, ignoring unknown keys."""
    return Card(**{key: value for key, value in data.items() if key in _CARD_FIELDS})


def pages_from_document(document: list[dict[str, Any]]) -> list[Page]:
    """
    Rebuild pages from a stored document.

    Pages are renumbered 1..N in stored order and every page gets exactly
    9 slots, so a loaded binder always satisfies the grid invariants.
    """
    pages: list[Page] = []
    ordered = sorted(document, key=lambda p: int(p.get("page_number", 0)))

    for page_number, stored in enumerate(ordered, start=1):
        slots = [Slot(position=position) for position in range(SLOTS_PER_PAGE)]
        for stored_slot in stored.get("slots", []):
            position = int(stored_slot.get("position", -1))
            card_data = stored_slot.get("card")
            if 0 <= position < SLOTS_PER_PAGE and card_data:
                slots[position].card = card_from_document(card_data)
        pages.append(Page(page_number=page_number, slots=slots))

    return pages


def binder_to_model(db_binder: BinderDB) -> Binder:
    """Convert a database binder to a domain model."""
    pages = pages_from_document(db_binder.pages or [])
    if not pages:
        pages = [create_empty_page(1)]

    return Binder(
        id=db_binder.id,
        owner_id=db_binder.owner_id,
        name=db_binder.name,
        description=db_binder.description or "",
        is_public=db_binder.is_public,
        pages=pages,
    )


# --- Binder Operations ---


async def get_binder_record(session: AsyncSession, binder_id: str) -> BinderDB | None:
    """Get the stored binder row, or None."""
    result = await session.execute(select(BinderDB).where(BinderDB.id == binder_id))
    return result.scalar_one_or_none()


async def get_binder(session: AsyncSession, binder_id: str) -> Binder | None:
    """
    Read a binder by id.

    Returns None if no binder exists with this id.
    """
    db_binder = await get_binder_record(session, binder_id)
    if db_binder is None:
        return None
    return binder_to_model(db_binder)


async def save_binder(session: AsyncSession, binder: Binder) -> BinderDB:
    """
    Write the full binder document.

    Creates the binder if it does not exist yet; otherwise replaces its
    metadata and its entire page set.
    """
    db_binder = await get_binder_record(session, binder.id)
    if db_binder is None:
        db_binder = BinderDB(id=binder.id, owner_id=binder.owner_id)
        session.add(db_binder)

    db_binder.name = binder.name
    db_binder.description = binder.description
    db_binder.is_public = binder.is_public
    db_binder.pages = pages_to_document(binder.pages)

    await session.flush()
    return db_binder


async def list_user_binders(session: AsyncSession, owner_id: str) -> list[Binder]:
    """Get all binders owned by a user, most recently updated first."""
    result = await session.execute(
        select(BinderDB)
        .where(BinderDB.owner_id == owner_id)
        .order_by(BinderDB.updated_at.desc(), BinderDB.name)
    )
    return [binder_to_model(db_binder) for db_binder in result.scalars().all()]


async def delete_binder(session: AsyncSession, binder_id: str) -> bool:
    """
    Delete a binder.

    Returns True if deleted, False if not found.
    """
    db_binder = await get_binder_record(session, binder_id)
    if db_binder is None:
        return False

    await session.delete(db_binder)
    return True
