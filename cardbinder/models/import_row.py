"""
Raw import rows.

A RawImportRow is UNTRUSTED data taken directly from one CSV line. It only
exists for the duration of an import and must be resolved against Scryfall
before it becomes a Card.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RawImportRow:
    """
    One parsed CSV line.

    Attributes:
        row_number: 1-based line number in the source text
        name: Card name as typed or scanned
        set_name: Set or edition hint, parentheses stripped (optional)
        quantity: Number of copies (defaults to 1)
        condition: Condition code (defaults to "NM")
        finish: "foil" or "nonfoil"
        notes: Free-text notes
    """

    row_number: int
    name: str
    set_name: str = ""
    quantity: int = 1
    condition: str = "NM"
    finish: str = "nonfoil"
    notes: str = ""


@dataclass(frozen=True, slots=True)
class RowFailure:
    """
    A row (or whole import) that did not produce a resolved card.

    Attributes:
        row: 1-based line number, or None for whole-import failures
        content: The offending line or card name
        error: Human-readable reason
    """

    row: int | None
    content: str
    error: str

    def __str__(self) -> str:
        if self.row is None:
            return self.error
        return f"Row {self.row}: {self.error}"
