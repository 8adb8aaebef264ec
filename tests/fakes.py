"""Test doubles for the Scryfall lookup."""

import re
from typing import Any


_QUERY = re.compile(r'^!"((?:[^"\\]|\\.)*)"(?: set:(\S+))?( is:nonfoil)?$')


class FakeLookup:
    """
    In-memory stand-in for ScryfallClient.

    Search matches loosely (name containment) so callers must do their own
    exact-name filtering, like against the real service.
    """

    def __init__(self) -> None:
        self.printings: list[dict[str, Any]] = []
        self.fuzzy: dict[str, dict[str, Any]] = {}
        self.sets: list[dict[str, Any]] = []
        self.queries: list[str] = []
        self.fuzzy_queries: list[str] = []
        self.set_calls = 0
        self.rate_limited_count = 0

    def add(self, *cards: dict[str, Any]) -> None:
        self.printings.extend(cards)

    async def search_cards(self, query: str) -> list[dict[str, Any]]:
        self.queries.append(query)
        match = _QUERY.match(query)
        if match is None:
            return []

        name = match.group(1).replace('\\"', '"').casefold()
        set_code = match.group(2)
        nonfoil_only = match.group(3) is not None

        results = []
        for card in self.printings:
            if name not in str(card["name"]).casefold():
                continue
            if set_code and card["set"] != set_code:
                continue
            if nonfoil_only and "nonfoil" not in card.get("finishes", []):
                continue
            results.append(card)
        return results

    async def named_fuzzy(self, name: str) -> dict[str, Any] | None:
        self.fuzzy_queries.append(name)
        return self.fuzzy.get(name.casefold())

    async def list_sets(self) -> list[dict[str, Any]]:
        self.set_calls += 1
        return self.sets


def scryfall_card(
    name: str,
    set_code: str = "m10",
    set_name: str = "Magic 2010",
    collector_number: str = "1",
    rarity: str = "common",
    usd: str | None = "1.00",
    usd_foil: str | None = None,
    finishes: tuple[str, ...] = ("nonfoil", "foil"),
    **extra: Any,
) -> dict[str, Any]:
    """Build a minimal Scryfall card object."""
    card: dict[str, Any] = {
        "object": "card",
        "id": f"{set_code}-{collector_number}-{name}",
        "name": name,
        "set": set_code,
        "set_name": set_name,
        "collector_number": collector_number,
        "rarity": rarity,
        "finishes": list(finishes),
        "image_uris": {"normal": f"https://img.example/{set_code}/{collector_number}.jpg"},
        "prices": {"usd": usd, "usd_foil": usd_foil, "usd_etched": None},
    }
    card.update(extra)
    return card
