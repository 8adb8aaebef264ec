"""
Card Resolution Service.

Resolves a free-text card name (optionally with a set hint) to exactly one
Scryfall printing.

Strategy ladder, stopping at the first success:
1. Exact name in the hinted set, non-foil
2. Exact name in the hinted set, foil allowed
3. Exact name in any set, non-foil then foil
4. For "Front // Back" names, steps 1-3 with the front face name
5. Fuzzy lookup; the corrected name goes back through the exact ladder
6. Not found (returns None; never raises for a missing card)

INVARIANTS:
- An exact step only accepts a printing whose name equals the query
  (case and whitespace insensitive), so "Badgermole" never matches
  "Badgermole Cub"
- Lookups are memoized per ImportSession, keyed by (name, set hint or "any")
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Protocol

from cardbinder.models.printing import Printing, is_special_printing
from cardbinder.services.import_session import ImportSession, ResolutionKey
from cardbinder.services.set_codes import COMMON_SET_CODES, build_set_index, map_set_hint

logger = logging.getLogger(__name__)

FACE_SEPARATOR = "//"

_WORD_CHAR = re.compile(r"\w")


class CardLookup(Protocol):
    """Remote card-metadata capability (see ScryfallClient)."""

    rate_limited_count: int

    async def search_cards(self, query: str) -> list[dict[str, Any]]: ...

    async def named_fuzzy(self, name: str) -> dict[str, Any] | None: ...

    async def list_sets(self) -> list[dict[str, Any]]: ...


@dataclass(frozen=True, slots=True)
class LookupAttempt:
    """One rung of the exact-match ladder."""

    name: str
    set_code: str | None
    allow_foil: bool

    def query(self) -> str:
        """Scryfall search syntax for this attempt."""
        escaped = self.name.replace('"', '\\"')
        parts = [f'!"{escaped}"']
        if self.set_code:
            parts.append(f"set:{self.set_code}")
        if not self.allow_foil:
            parts.append("is:nonfoil")
        return " ".join(parts)


def normalize_name(name: str) -> str:
    """Case- and whitespace-insensitive form of a card name."""
    return " ".join(name.split()).casefold()


def front_face_name(name: str) -> str | None:
    """Return the first face of a "Front // Back" name, or None."""
    if FACE_SEPARATOR not in name:
        return None
    front = name.split(FACE_SEPARATOR, 1)[0].strip()
    return front or None


def build_ladder(name: str, set_code: str | None) -> list[LookupAttempt]:
    """
    Build the exact-match attempts in priority order.

    Set-constrained attempts come first when a set code is known. A
    double-faced name repeats the whole ladder with its front face.
    """
    names = [name]
    front = front_face_name(name)
    if front:
        names.append(front)

    set_constraints: list[str | None] = [set_code, None] if set_code else [None]

    return [
        LookupAttempt(name=variant, set_code=constraint, allow_foil=allow_foil)
        for variant in names
        for constraint in set_constraints
        for allow_foil in (False, True)
    ]


def names_match(query: str, card: dict[str, Any]) -> bool:
    """True if the card's name, or one of its face names, equals the query."""
    wanted = normalize_name(query)
    candidates = [str(card.get("name", ""))]
    candidates.extend(str(face.get("name", "")) for face in card.get("card_faces") or [])
    return any(normalize_name(candidate) == wanted for candidate in candidates if candidate)


def extends_name(query: str, candidate: str) -> bool:
    """
    True if candidate is the query followed by more words.

    "Badgermole Cub" extends "Badgermole"; "Lightning Bolt" does not extend
    "Lightnin Bolt".
    """
    wanted = normalize_name(query)
    found = normalize_name(candidate)
    if len(found) <= len(wanted) or not found.startswith(wanted):
        return False
    return _WORD_CHAR.match(found[len(wanted)]) is None


def select_printing(query: str, results: list[dict[str, Any]]) -> Printing | None:
    """
    Choose the best printing among search results.

    Only exact-name matches are eligible. A special printing wins over a
    plain one; otherwise the first (newest) match wins.
    """
    matches = [card for card in results if names_match(query, card)]
    if not matches:
        return None

    best = next((card for card in matches if is_special_printing(card)), matches[0])
    return Printing.from_scryfall(best)


def resolution_key(name: str, set_hint: str | None) -> ResolutionKey:
    hint = set_hint.strip().lower() if set_hint and set_hint.strip() else "any"
    return normalize_name(name), hint


class CardResolver:
    """
    Resolves card names to Scryfall printings.

    Stateless apart from the ImportSession it is bound to; create one
    resolver per import session.
    """

    def __init__(self, lookup: CardLookup, session: ImportSession) -> None:
        self._lookup = lookup
        self._session = session

    async def resolve(self, name: str, set_hint: str | None = None) -> Printing | None:
        """
        Resolve a card name to its best printing.

        Concurrent calls for the same (name, set hint) share one lookup.

        Returns:
            The chosen Printing, or None if no strategy found the card
        """
        key = resolution_key(name, set_hint)
        task = self._session.resolutions.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve_uncached(name.strip(), set_hint))
            self._session.resolutions[key] = task
        # Shield so one cancelled caller does not cancel the shared lookup
        return await asyncio.shield(task)

    async def _resolve_uncached(self, name: str, set_hint: str | None) -> Printing | None:
        set_code = await self._map_set_hint(set_hint)

        printing = await self._run_ladder(name, set_code)
        if printing is not None:
            return printing

        printing = await self._resolve_fuzzy(name, set_code)
        if printing is None:
            logger.info("No printing found for %r (set hint %r)", name, set_hint)
        return printing

    async def _run_ladder(self, name: str, set_code: str | None) -> Printing | None:
        for attempt in build_ladder(name, set_code):
            results = await self._lookup.search_cards(attempt.query())
            printing = select_printing(attempt.name, results)
            if printing is not None:
                logger.debug("Resolved %r via %s", name, attempt.query())
                return printing
        return None

    async def _resolve_fuzzy(self, name: str, set_code: str | None) -> Printing | None:
        card = await self._lookup.named_fuzzy(name)
        if card is None:
            return None

        corrected = str(card.get("name", ""))
        if not corrected or extends_name(name, corrected):
            # A longer card that merely starts with the query is not a typo fix
            logger.debug("Rejected fuzzy match %r for %r", corrected, name)
            return None

        if normalize_name(corrected) != normalize_name(name):
            logger.info("Fuzzy match: %r -> %r", name, corrected)
            printing = await self._run_ladder(corrected, set_code)
            if printing is not None:
                return printing

        return Printing.from_scryfall(card)

    async def _map_set_hint(self, set_hint: str | None) -> str | None:
        if not set_hint or not set_hint.strip():
            return None
        if set_hint.strip().strip("()").strip().lower() in COMMON_SET_CODES:
            return map_set_hint(set_hint)

        async with self._session.set_index_lock:
            if self._session.set_index is None:
                self._session.set_index = build_set_index(await self._lookup.list_sets())

        set_code = map_set_hint(set_hint, self._session.set_index)
        if set_code is None:
            logger.debug("Ignoring unmappable set hint %r", set_hint)
        return set_code
