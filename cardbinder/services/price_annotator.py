"""
Price annotation.

Attaches a USD value to a resolved card. Absence of a price is a normal
outcome (0.0), never an error.
"""

import logging
from dataclasses import replace

import httpx

from cardbinder.config import settings
from cardbinder.models.binder import Binder
from cardbinder.models.printing import Printing
from cardbinder.services.card_resolver import CardLookup, LookupAttempt, select_printing

logger = logging.getLogger(__name__)


def price_for(printing: Printing | None, finish: str = "nonfoil") -> float:
    """
    Best-known price for a printing in the given finish.

    Foil falls back to the etched price; non-foil uses the regular price.
    Returns 0.0 when unknown.
    """
    if printing is None:
        return 0.0

    if finish in ("foil", "etched"):
        price = printing.price_usd_foil
        if price is None:
            price = printing.price_usd_etched
    else:
        price = printing.price_usd

    return price if price is not None else 0.0


def estimate_price(finish: str = "nonfoil") -> float:
    """Placeholder price for a card that could not be resolved."""
    base = settings.fallback_price
    return base * 2 if finish == "foil" else base


async def lookup_price(
    lookup: CardLookup,
    name: str,
    set_code: str | None = None,
    finish: str = "nonfoil",
) -> float:
    """
    Fetch a price for a card that has no resolved printing at hand.

    Returns:
        Price in USD, or 0.0 if the card or its price is unknown
    """
    attempt = LookupAttempt(name=name, set_code=set_code, allow_foil=True)
    try:
        results = await lookup.search_cards(attempt.query())
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Price lookup failed for %r: %s", name, e)
        return 0.0

    return price_for(select_printing(name, results), finish)


async def refresh_prices(binder: Binder, lookup: CardLookup) -> int:
    """
    Re-price every placed card from current Scryfall data.

    Each distinct (name, set, finish) is looked up once. Cards whose price
    cannot be found keep their existing price.

    Returns:
        Number of cards whose price changed
    """
    prices: dict[tuple[str, str, str], float] = {}
    updated = 0

    for page in binder.pages:
        for slot in page.slots:
            card = slot.card
            if card is None:
                continue

            key = (card.name, card.set_code.lower(), card.finish)
            if key not in prices:
                prices[key] = await lookup_price(lookup, card.name, key[1] or None, card.finish)

            price = prices[key]
            if price and price != card.price:
                slot.card = replace(card, price=price)
                updated += 1

    logger.info("Refreshed prices for binder %s: %d updated", binder.id, updated)
    return updated
