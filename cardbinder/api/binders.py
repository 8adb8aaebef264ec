"""
Binder API endpoints.

Every mutating endpoint loads the whole binder, applies one layout
operation and writes the whole binder back.
"""

import uuid
from collections.abc import AsyncGenerator
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardbinder.db import delete_binder, get_binder, list_user_binders, save_binder
from cardbinder.db.database import get_session
from cardbinder.models.binder import Binder
from cardbinder.models.card import Card
from cardbinder.models.failure import BinderNotFoundError
from cardbinder.services.binder_layout import (
    add_page,
    card_count,
    create_binder,
    place_card,
    place_card_at,
    rearrange,
    remove_card,
    total_value,
)
from cardbinder.services.card_resolver import CardLookup
from cardbinder.services.import_pipeline import ImportPipeline
from cardbinder.services.import_session import ImportSession
from cardbinder.services.price_annotator import refresh_prices
from cardbinder.services.scryfall_client import ScryfallClient

router = APIRouter(prefix="/binders", tags=["binders"])


async def get_card_lookup() -> AsyncGenerator[CardLookup, None]:
    """Dependency that provides a Scryfall client for one request."""
    async with ScryfallClient() as client:
        yield client


# --- Request / response models ---


class CardModel(BaseModel):
    """A card as sent and returned by the API."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = Field(..., min_length=1)
    set_name: str = ""
    set_code: str = ""
    collector_number: str = ""
    image_url: str = ""
    rarity: str = "Unknown"
    condition: str = "NM"
    finish: str = "nonfoil"
    quantity: int = Field(default=1, ge=1)
    price: float | None = None
    notes: str | None = None

    def to_card(self) -> Card:
        return Card(**self.model_dump())

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        return cls(**asdict(card))


class SlotResponse(BaseModel):
    position: int
    row: int
    column: int
    is_empty: bool
    card: CardModel | None = None


class PageResponse(BaseModel):
    page_number: int
    slots: list[SlotResponse]


class BinderResponse(BaseModel):
    """Response model for a full binder."""

    id: str
    owner_id: str
    name: str
    description: str = ""
    is_public: bool = True
    pages: list[PageResponse] = Field(default_factory=list)
    card_count: int = 0
    total_value: float = 0.0


class BinderSummary(BaseModel):
    """Binder listing entry without the grid."""

    id: str
    name: str
    description: str = ""
    is_public: bool = True
    page_count: int = 1
    card_count: int = 0


class CreateBinderRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    is_public: bool = True


class UpdateBinderRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_public: bool | None = None


class PlaceCardRequest(BaseModel):
    """Place a card in the first empty slot, or at an explicit slot."""

    card: CardModel
    page_number: int | None = Field(default=None, ge=1)
    position: int | None = Field(default=None, ge=0, le=8)


class PlacementResponse(BaseModel):
    page_number: int
    position: int
    page_count: int


class RemoveCardResponse(BaseModel):
    removed: CardModel | None = None
    page_count: int


class RearrangeResponse(BaseModel):
    card_count: int
    page_count: int


class ImportRequest(BaseModel):
    text: str = Field(
        ...,
        description="Raw CSV exported from a scanner app",
        examples=["Quantity,Name\n4,Lightning Bolt\n2,Counterspell\n"],
    )
    has_header: bool | None = Field(
        default=None,
        description="Whether the first line is a header; null to auto-detect",
    )


class ImportFailureModel(BaseModel):
    row: int | None = None
    content: str = ""
    error: str


class ImportResponse(BaseModel):
    """Response model for CSV import: {created, failed: [{row, error}]}."""

    binder_id: str
    created: int
    failed: list[ImportFailureModel] = Field(default_factory=list)
    page_count: int


class PriceRefreshResponse(BaseModel):
    updated: int
    total_value: float


class DeleteResponse(BaseModel):
    binder_id: str
    deleted: bool


def binder_to_response(binder: Binder) -> BinderResponse:
    return BinderResponse(
        id=binder.id,
        owner_id=binder.owner_id,
        name=binder.name,
        description=binder.description,
        is_public=binder.is_public,
        pages=[
            PageResponse(
                page_number=page.page_number,
                slots=[
                    SlotResponse(
                        position=slot.position,
                        row=slot.row,
                        column=slot.column,
                        is_empty=slot.is_empty,
                        card=CardModel.from_card(slot.card) if slot.card else None,
                    )
                    for slot in page.slots
                ],
            )
            for page in binder.pages
        ],
        card_count=card_count(binder),
        total_value=round(total_value(binder), 2),
    )


async def _load_binder(session: AsyncSession, binder_id: str) -> Binder:
    binder = await get_binder(session, binder_id)
    if binder is None:
        raise BinderNotFoundError(binder_id)
    return binder


# --- Endpoints ---


@router.post("", response_model=BinderResponse, status_code=status.HTTP_201_CREATED)
async def create_user_binder(
    request: CreateBinderRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Create an empty binder with one page."""
    binder = create_binder(
        binder_id=uuid.uuid4().hex,
        owner_id=request.owner_id,
        name=request.name.strip(),
        description=request.description,
        is_public=request.is_public,
    )
    await save_binder(session, binder)
    return binder_to_response(binder)


@router.get("/user/{owner_id}", response_model=list[BinderSummary])
async def get_user_binders(
    owner_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[BinderSummary]:
    """List a user's binders, most recently updated first."""
    binders = await list_user_binders(session, owner_id)
    return [
        BinderSummary(
            id=binder.id,
            name=binder.name,
            description=binder.description,
            is_public=binder.is_public,
            page_count=binder.page_count(),
            card_count=card_count(binder),
        )
        for binder in binders
    ]


@router.get("/{binder_id}", response_model=BinderResponse)
async def get_user_binder(
    binder_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Get a binder with its full page/slot grid."""
    return binder_to_response(await _load_binder(session, binder_id))


@router.patch("/{binder_id}", response_model=BinderResponse)
async def update_user_binder(
    binder_id: str,
    request: UpdateBinderRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Rename a binder or change its description or visibility."""
    binder = await _load_binder(session, binder_id)

    if request.name is not None:
        binder.name = request.name.strip()
    if request.description is not None:
        binder.description = request.description
    if request.is_public is not None:
        binder.is_public = request.is_public

    await save_binder(session, binder)
    return binder_to_response(binder)


@router.delete("/{binder_id}", response_model=DeleteResponse)
async def delete_user_binder(
    binder_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a binder and everything in it."""
    deleted = await delete_binder(session, binder_id)
    if not deleted:
        raise BinderNotFoundError(binder_id)
    return DeleteResponse(binder_id=binder_id, deleted=True)


@router.post("/{binder_id}/pages", response_model=BinderResponse)
async def add_binder_page(
    binder_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Append an empty page."""
    binder = await _load_binder(session, binder_id)
    add_page(binder)
    await save_binder(session, binder)
    return binder_to_response(binder)


@router.post("/{binder_id}/cards", response_model=PlacementResponse)
async def place_binder_card(
    binder_id: str,
    request: PlaceCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PlacementResponse:
    """
    Place a card.

    Without page_number/position the card goes into the first empty slot
    (adding a page if the binder is full). With both, that exact slot is used.
    """
    if (request.page_number is None) != (request.position is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="page_number and position must be given together",
        )

    binder = await _load_binder(session, binder_id)
    card = request.card.to_card()

    if request.page_number is not None and request.position is not None:
        place_card_at(binder, request.page_number, request.position, card)
        page_number, position = request.page_number, request.position
    else:
        page_number, position = place_card(binder, card)

    await save_binder(session, binder)
    return PlacementResponse(
        page_number=page_number, position=position, page_count=binder.page_count()
    )


@router.delete(
    "/{binder_id}/pages/{page_number}/slots/{position}",
    response_model=RemoveCardResponse,
)
async def remove_binder_card(
    binder_id: str,
    page_number: int,
    position: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    compact: bool = False,
) -> RemoveCardResponse:
    """
    Remove the card at a slot.

    The slot is left empty unless compact=true, which also rearranges
    the binder to close the gap.
    """
    binder = await _load_binder(session, binder_id)
    removed = remove_card(binder, page_number, position)
    if compact:
        rearrange(binder)

    await save_binder(session, binder)
    return RemoveCardResponse(
        removed=CardModel.from_card(removed) if removed else None,
        page_count=binder.page_count(),
    )


@router.post("/{binder_id}/rearrange", response_model=RearrangeResponse)
async def rearrange_binder(
    binder_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RearrangeResponse:
    """Compact the binder: fill gaps and drop trailing empty pages."""
    binder = await _load_binder(session, binder_id)
    page_count = rearrange(binder)
    await save_binder(session, binder)
    return RearrangeResponse(card_count=card_count(binder), page_count=page_count)


@router.post("/{binder_id}/import", response_model=ImportResponse)
async def import_binder_csv(
    binder_id: str,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    lookup: Annotated[CardLookup, Depends(get_card_lookup)],
) -> ImportResponse:
    """
    Import a scanner-app CSV into a binder.

    Rows that cannot be parsed or resolved are reported in `failed`;
    they never fail the request. A missing name or quantity column fails
    the whole import with zero cards created.
    """
    if not request.text or not request.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Import text cannot be empty",
        )

    binder = await _load_binder(session, binder_id)
    pipeline = ImportPipeline(lookup, ImportSession(owner_id=binder.owner_id))
    summary = await pipeline.run(request.text, binder, has_header=request.has_header)

    if summary.created:
        await save_binder(session, binder)

    return ImportResponse(
        binder_id=binder.id,
        created=summary.created,
        failed=[
            ImportFailureModel(row=failure.row, content=failure.content, error=failure.error)
            for failure in summary.failed
        ],
        page_count=binder.page_count(),
    )


@router.post("/{binder_id}/prices/refresh", response_model=PriceRefreshResponse)
async def refresh_binder_prices(
    binder_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    lookup: Annotated[CardLookup, Depends(get_card_lookup)],
) -> PriceRefreshResponse:
    """Re-fetch current prices for every card in the binder."""
    binder = await _load_binder(session, binder_id)
    updated = await refresh_prices(binder, lookup)
    if updated:
        await save_binder(session, binder)
    return PriceRefreshResponse(updated=updated, total_value=round(total_value(binder), 2))
