"""
Set hint normalization.

Scanner exports write set names the way the app displays them
("Double Masters 2022", "(M21)", "2x2"). Scryfall searches need set codes.
"""

import re
from typing import Any

# Names scanner apps commonly emit that differ from Scryfall's set names
COMMON_SET_CODES: dict[str, str] = {
    "outlaws of thunder junction": "otj",
    "the brothers' war commander": "brc",
    "tarkir: dragonstorm": "tdm",
    "strixhaven: school of mages": "stx",
    "rivals of ixalan promos": "prix",
    "theros": "ths",
    "double masters 2022": "2x2",
    "modern masters 2015": "mm2",
    "bloomburrow": "blb",
    "wilds of eldraine: enchanting tales": "wot",
    "the list": "plst",
    "chronicles": "chr",
    "strixhaven mystical archive": "sta",
    "wilds of eldraine": "woe",
    "war of the spark": "war",
    "the big score": "big",
    "commander 2020": "c20",
    "planeshift": "pls",
    "iconic masters": "ima",
    "guilds of ravnica": "grn",
    "murders at karlov manor": "mkm",
    "limited edition alpha": "lea",
    "dominaria united": "dmu",
}

SET_CODE_PATTERN = re.compile(r"^[a-z0-9]{2,6}$")


def build_set_index(sets: list[dict[str, Any]]) -> dict[str, str]:
    """
    Build a lowercase name-or-code -> set code index from Scryfall /sets data.
    """
    index: dict[str, str] = {}
    for entry in sets:
        code = str(entry.get("code", "")).lower()
        if not code:
            continue
        index[code] = code
        name = entry.get("name")
        if name:
            index[str(name).strip().lower()] = code
    return index


def map_set_hint(hint: str | None, set_index: dict[str, str] | None = None) -> str | None:
    """
    Map a free-text set hint to a Scryfall set code.

    Args:
        hint: Set name or code from the import row
        set_index: Index from build_set_index, if the set listing is available

    Returns:
        Lowercase set code, or None if the hint cannot be mapped. Without a
        set listing, a hint shaped like a set code is trusted as-is.
    """
    if not hint or not hint.strip():
        return None

    normalized = hint.strip().strip("()").strip().lower()

    if normalized in COMMON_SET_CODES:
        return COMMON_SET_CODES[normalized]

    if set_index:
        return set_index.get(normalized)

    if SET_CODE_PATTERN.match(normalized):
        return normalized
    return None
