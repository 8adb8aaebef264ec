"""
Binder Models.

A binder is an ordered list of pages; each page is a fixed 3x3 grid of slots.

INVARIANTS:
- Page numbers are exactly 1..N with no gaps
- Every page has exactly 9 slots at positions 0..8
- A slot is empty if and only if it holds no card
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from cardbinder.config import GRID_COLUMNS
from cardbinder.models.card import Card


@dataclass
class Slot:
    """One position on a page, holding at most one card."""

    position: int
    card: Card | None = None

    @property
    def is_empty(self) -> bool:
        return self.card is None

    @property
    def row(self) -> int:
        return self.position // GRID_COLUMNS

    @property
    def column(self) -> int:
        return self.position % GRID_COLUMNS


@dataclass
class Page:
    """A single 3x3 page of a binder."""

    page_number: int
    slots: list[Slot] = field(default_factory=list)

    def occupied_slots(self) -> list[Slot]:
        return [slot for slot in self.slots if not slot.is_empty]

    def is_full(self) -> bool:
        return all(not slot.is_empty for slot in self.slots)


@dataclass
class Binder:
    """
    A user's named collection organized into pages.

    Attributes:
        id: Binder identifier
        owner_id: Owning user reference
        name: Display name
        description: Optional free-text description
        is_public: Whether other users may view the binder
        pages: Ordered pages, numbered from 1
    """

    id: str
    owner_id: str
    name: str
    description: str = ""
    is_public: bool = True
    pages: list[Page] = field(default_factory=list)

    def iter_slots(self) -> Iterator[tuple[Page, Slot]]:
        """Yield every (page, slot) pair in page-then-position order."""
        for page in self.pages:
            for slot in page.slots:
                yield page, slot

    def page_count(self) -> int:
        return len(self.pages)
