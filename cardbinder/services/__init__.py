"""
CardBinder services.

Business logic for binder layout, card resolution and CSV import.
"""

from cardbinder.services.binder_layout import (
    SlotAddress,
    add_page,
    create_binder,
    create_empty_page,
    find_first_empty_slot,
    place_card,
    place_card_at,
    rearrange,
    remove_card,
)
from cardbinder.services.card_resolver import CardLookup, CardResolver, build_ladder
from cardbinder.services.import_pipeline import ImportPipeline, ImportSummary
from cardbinder.services.import_session import ImportSession
from cardbinder.services.price_annotator import estimate_price, price_for, refresh_prices
from cardbinder.services.scryfall_client import ScryfallClient
from cardbinder.services.set_codes import map_set_hint

__all__ = [
    # Binder layout
    "SlotAddress",
    "add_page",
    "create_binder",
    "create_empty_page",
    "find_first_empty_slot",
    "place_card",
    "place_card_at",
    "rearrange",
    "remove_card",
    # Resolution
    "CardLookup",
    "CardResolver",
    "ScryfallClient",
    "build_ladder",
    "map_set_hint",
    # Import
    "ImportPipeline",
    "ImportSession",
    "ImportSummary",
    # Prices
    "estimate_price",
    "price_for",
    "refresh_prices",
]
