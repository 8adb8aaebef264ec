"""
Binder Layout Engine.

Owns the page/slot grid of a Binder. All functions mutate the binder passed
in and provide no locking; callers serialize mutations to one binder.

INVARIANTS (enforced by every mutation):
- Page numbers are exactly 1..N with no gaps
- Every page has exactly 9 slots addressed 0..8
- A card occupies at most one slot; placement never overwrites
"""

import logging
import math
from collections.abc import Iterator

from cardbinder.config import SLOTS_PER_PAGE
from cardbinder.models.binder import Binder, Page, Slot
from cardbinder.models.card import Card
from cardbinder.models.failure import LayoutError

logger = logging.getLogger(__name__)

# Coordinates of a slot: (page_number, position)
SlotAddress = tuple[int, int]


def create_empty_page(page_number: int) -> Page:
    """Create a page with 9 empty slots."""
    return Page(
        page_number=page_number,
        slots=[Slot(position=position) for position in range(SLOTS_PER_PAGE)],
    )


def create_binder(
    binder_id: str,
    owner_id: str,
    name: str,
    description: str = "",
    is_public: bool = True,
) -> Binder:
    """Create a new binder with one empty page."""
    return Binder(
        id=binder_id,
        owner_id=owner_id,
        name=name,
        description=description,
        is_public=is_public,
        pages=[create_empty_page(1)],
    )


def add_page(binder: Binder) -> Page:
    """Append an empty page with the next sequential number."""
    page = create_empty_page(len(binder.pages) + 1)
    binder.pages.append(page)
    return page


def _get_slot(binder: Binder, page_number: int, position: int) -> Slot:
    if page_number < 1 or page_number > len(binder.pages):
        raise LayoutError(
            "Invalid page number",
            detail=f"page {page_number} not in 1..{len(binder.pages)}",
        )
    if position < 0 or position >= SLOTS_PER_PAGE:
        raise LayoutError(
            "Invalid slot position",
            detail=f"position {position} not in 0..{SLOTS_PER_PAGE - 1}",
        )
    return binder.pages[page_number - 1].slots[position]


def _ensure_not_placed(binder: Binder, card: Card) -> None:
    if any(placed.id == card.id for placed in iter_cards(binder)):
        raise LayoutError("Card is already in this binder", detail=f"card_id={card.id}")


def find_first_empty_slot(binder: Binder) -> SlotAddress | None:
    """Return the first empty slot in page-then-position order, if any."""
    for page, slot in binder.iter_slots():
        if slot.is_empty:
            return page.page_number, slot.position
    return None


def place_card(binder: Binder, card: Card) -> SlotAddress:
    """
    Place a card in the first empty slot, growing the binder if full.

    Returns:
        (page_number, position) where the card was placed

    Raises:
        LayoutError: If a card with the same id is already placed
    """
    _ensure_not_placed(binder, card)
    address = find_first_empty_slot(binder)
    if address is None:
        page = add_page(binder)
        address = (page.page_number, 0)

    page_number, position = address
    binder.pages[page_number - 1].slots[position].card = card
    return address


def place_card_at(binder: Binder, page_number: int, position: int, card: Card) -> None:
    """
    Place a card into a specific slot.

    Raises:
        LayoutError: If the page or position is out of range, the slot is
            occupied, or a card with the same id is already placed
    """
    slot = _get_slot(binder, page_number, position)
    if not slot.is_empty:
        raise LayoutError(
            "Slot is already occupied",
            detail=f"page {page_number}, position {position}",
        )
    _ensure_not_placed(binder, card)
    slot.card = card


def remove_card(binder: Binder, page_number: int, position: int) -> Card | None:
    """
    Clear a slot back to empty. Does not compact the binder.

    Returns:
        The removed card, or None if the slot was already empty

    Raises:
        LayoutError: If the page or position is out of range
    """
    slot = _get_slot(binder, page_number, position)
    card = slot.card
    slot.card = None
    return card


def iter_cards(binder: Binder) -> Iterator[Card]:
    """Yield placed cards in page-then-position order."""
    for _page, slot in binder.iter_slots():
        if slot.card is not None:
            yield slot.card


def card_count(binder: Binder) -> int:
    """Number of occupied slots."""
    return sum(1 for _ in iter_cards(binder))


def total_value(binder: Binder) -> float:
    """Sum of price x quantity over all placed cards (unknown prices count as 0)."""
    return sum((card.price or 0.0) * card.quantity for card in iter_cards(binder))


def rearrange(binder: Binder) -> int:
    """
    Compact the binder: remove gaps and trailing empty pages.

    Cards keep their relative page-then-position order and are laid back into
    pages starting at page 1, position 0. Page count afterwards is
    max(1, ceil(cards / 9)). Running it twice is the same as running it once.

    Returns:
        Number of pages after compaction
    """
    cards = list(iter_cards(binder))
    pages_needed = max(1, math.ceil(len(cards) / SLOTS_PER_PAGE))

    pages = [create_empty_page(page_number) for page_number in range(1, pages_needed + 1)]
    for index, card in enumerate(cards):
        pages[index // SLOTS_PER_PAGE].slots[index % SLOTS_PER_PAGE].card = card

    binder.pages = pages
    logger.info("Rearranged %d cards into %d pages", len(cards), pages_needed)
    return pages_needed
