from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Card:
    """
    A canonical card placed in a binder.

    Cards are immutable once created; a binder slot either holds one or is empty.

    Attributes:
        id: Unique identifier of this owned card
        name: Card name as printed (e.g., "Lightning Bolt")
        set_name: Full set name (e.g., "Magic 2010"), blank if unresolved
        set_code: Set code (e.g., "M10"), blank if unresolved
        collector_number: Collector number within set
        image_url: Card image URL, blank if unknown
        rarity: common, uncommon, rare, mythic or "Unknown"
        condition: Physical condition (NM, LP, MP, HP, DMG)
        finish: Printing treatment (nonfoil, foil, etched)
        quantity: Number of copies this entry represents
        price: Market value in USD per copy, if known
        notes: Free-text notes from the import
    """

    id: str
    name: str
    set_name: str = ""
    set_code: str = ""
    collector_number: str = ""
    image_url: str = ""
    rarity: str = "Unknown"
    condition: str = "NM"
    finish: str = "nonfoil"
    quantity: int = 1
    price: float | None = None
    notes: str | None = None
