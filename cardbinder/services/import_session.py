"""
Per-import session state.

One ImportSession is created per import (per user, per CSV upload). It owns
the resolution memo cache and the cancellation flag. Sessions are never
shared between users.
"""

import asyncio
import uuid
from dataclasses import dataclass, field

from cardbinder.models.printing import Printing

# Memo key: (normalized card name, set hint or "any")
ResolutionKey = tuple[str, str]


@dataclass
class ImportSession:
    """
    Mutable state scoped to a single import.

    Attributes:
        owner_id: User the import belongs to
        id: Session identifier, for logging
        resolutions: In-flight or finished lookups keyed by (name, set hint)
        set_index: Scryfall set name/code index, loaded on first use
    """

    owner_id: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    resolutions: dict[ResolutionKey, "asyncio.Task[Printing | None]"] = field(
        default_factory=dict
    )
    set_index: dict[str, str] | None = None
    set_index_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _cancelled: bool = False

    def cancel(self) -> None:
        """Abandon the import. Results that arrive afterwards are discarded."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
