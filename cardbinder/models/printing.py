"""
Printing Model.

A Printing is TRUSTED data: one specific published version of a card
(set + collector number) as returned by Scryfall. Construction implies a
successful resolution.
"""

from dataclasses import dataclass
from typing import Any

# Frame effects that mark a printing as a special (non-plain) version
SPECIAL_FRAME_EFFECTS = frozenset({"showcase", "extendedart", "etched", "inverted"})


def _parse_price(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_image_url(card: dict[str, Any]) -> str:
    """
    Pick the best available image for a Scryfall card object.

    Double-faced cards have no top-level image_uris; use the front face.
    """
    image_uris = card.get("image_uris") or {}
    for size in ("normal", "border_crop", "small"):
        if image_uris.get(size):
            return str(image_uris[size])

    faces = card.get("card_faces") or []
    if faces:
        face_uris = faces[0].get("image_uris") or {}
        if face_uris.get("normal"):
            return str(face_uris["normal"])
    return ""


def is_special_printing(card: dict[str, Any]) -> bool:
    """True for borderless, full-art, showcase, extended-art and similar treatments."""
    if card.get("border_color") == "borderless" or card.get("full_art"):
        return True
    return bool(SPECIAL_FRAME_EFFECTS.intersection(card.get("frame_effects") or []))


@dataclass(frozen=True, slots=True)
class Printing:
    """
    One Scryfall printing.

    Attributes:
        scryfall_id: Scryfall printing id
        name: Full card name ("Fire // Ice" for split and double-faced cards)
        face_names: Names of individual faces, empty for single-faced cards
        set_code: Set code, uppercased (e.g., "M10")
        set_name: Full set name
        collector_number: Collector number within set
        image_url: Best available image URL, blank if none
        rarity: common, uncommon, rare, mythic, special, bonus
        finishes: Finishes this printing exists in (nonfoil, foil, etched)
        is_special: Borderless / full art / showcase style treatment
        price_usd: Non-foil USD price
        price_usd_foil: Foil USD price
        price_usd_etched: Etched foil USD price
    """

    scryfall_id: str
    name: str
    face_names: tuple[str, ...] = ()
    set_code: str = ""
    set_name: str = ""
    collector_number: str = ""
    image_url: str = ""
    rarity: str = "Unknown"
    finishes: tuple[str, ...] = ()
    is_special: bool = False
    price_usd: float | None = None
    price_usd_foil: float | None = None
    price_usd_etched: float | None = None

    @classmethod
    def from_scryfall(cls, card: dict[str, Any]) -> "Printing":
        """Build a Printing from a Scryfall card object."""
        prices = card.get("prices") or {}
        faces = card.get("card_faces") or []
        return cls(
            scryfall_id=str(card.get("id", "")),
            name=str(card.get("name", "")),
            face_names=tuple(str(face["name"]) for face in faces if face.get("name")),
            set_code=str(card.get("set", "")).upper(),
            set_name=str(card.get("set_name", "")),
            collector_number=str(card.get("collector_number", "")),
            image_url=extract_image_url(card),
            rarity=str(card.get("rarity", "Unknown")),
            finishes=tuple(card.get("finishes") or ()),
            is_special=is_special_printing(card),
            price_usd=_parse_price(prices.get("usd")),
            price_usd_foil=_parse_price(prices.get("usd_foil")),
            price_usd_etched=_parse_price(prices.get("usd_etched")),
        )
