"""
CSV Import Pipeline.

CSV text -> RawImportRows -> Scryfall resolution (batched, throttled) ->
Cards in original row order -> placed into the binder.

INVARIANTS:
1. Every input row yields a Card or a RowFailure; none is dropped silently
2. One failing row never aborts the batch
3. Cards are placed in original row order, whatever order lookups finish in
4. A cancelled session places nothing
"""

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from cardbinder.config import settings
from cardbinder.models.binder import Binder
from cardbinder.models.card import Card
from cardbinder.models.import_row import RawImportRow, RowFailure
from cardbinder.models.printing import Printing
from cardbinder.parsers.csv_import import ingest_csv
from cardbinder.services.binder_layout import SlotAddress, place_card
from cardbinder.services.card_resolver import CardLookup, CardResolver
from cardbinder.services.import_session import ImportSession
from cardbinder.services.price_annotator import estimate_price, price_for

logger = logging.getLogger(__name__)

NOT_FOUND_ERROR = "Card not found"

ProgressCallback = Callable[[int, int], None]


@dataclass
class ResolveResult:
    """Resolved cards (in row order) plus per-row failures."""

    cards: list[Card] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)
    cancelled: bool = False


@dataclass
class ImportSummary:
    """
    Outcome of importing a CSV into a binder.

    Attributes:
        created: Number of cards placed into the binder
        failed: Structural, row-level and resolution failures
        cancelled: True if the session was abandoned before placement
        placements: (page_number, position) for each placed card, in row order
    """

    created: int = 0
    failed: list[RowFailure] = field(default_factory=list)
    cancelled: bool = False
    placements: list[SlotAddress] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _RowOutcome:
    row: RawImportRow
    printing: Printing | None = None
    error: str | None = None


def card_from_printing(row: RawImportRow, printing: Printing) -> Card:
    """Build the canonical Card for a resolved row."""
    return Card(
        id=uuid.uuid4().hex,
        name=printing.name,
        set_name=printing.set_name,
        set_code=printing.set_code,
        collector_number=printing.collector_number,
        image_url=printing.image_url,
        rarity=printing.rarity,
        condition=row.condition,
        finish=row.finish,
        quantity=row.quantity,
        price=price_for(printing, row.finish),
        notes=row.notes or None,
    )


def placeholder_card(row: RawImportRow) -> Card:
    """Build a best-effort Card for a row that could not be resolved."""
    return Card(
        id=uuid.uuid4().hex,
        name=row.name,
        set_name=row.set_name,
        condition=row.condition,
        finish=row.finish,
        quantity=row.quantity,
        price=estimate_price(row.finish),
        notes=row.notes or None,
    )


class ImportPipeline:
    """
    Resolves import rows against Scryfall and places them into a binder.

    Rows are resolved in batches issued concurrently, with a small stagger
    between items and a cooldown between batches. When the remote service
    starts answering 429, the rest of the import runs one row at a time.
    """

    def __init__(
        self,
        lookup: CardLookup,
        session: ImportSession | None = None,
        *,
        batch_size: int | None = None,
        item_delay: float | None = None,
        batch_delay: float | None = None,
        not_found_policy: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.session = session or ImportSession()
        self._lookup = lookup
        self._resolver = CardResolver(lookup, self.session)
        self._batch_size = max(1, batch_size or settings.import_batch_size)
        self._item_delay = settings.import_item_delay if item_delay is None else item_delay
        self._batch_delay = settings.import_batch_delay if batch_delay is None else batch_delay
        self._not_found_policy = not_found_policy or settings.not_found_policy
        self._on_progress = on_progress
        self._completed = 0

    def _rate_limited_count(self) -> int:
        return self._lookup.rate_limited_count

    def _report_progress(self, total: int) -> None:
        self._completed += 1
        if self._on_progress is not None:
            self._on_progress(self._completed, total)

    async def _resolve_row(self, row: RawImportRow, offset: int, total: int) -> _RowOutcome:
        if offset and self._item_delay:
            await asyncio.sleep(self._item_delay * offset)

        try:
            printing = await self._resolver.resolve(row.name, row.set_name or None)
        except Exception as e:
            logger.exception("Error resolving row %d (%r)", row.row_number, row.name)
            outcome = _RowOutcome(row=row, error=f"Lookup failed: {e}")
        else:
            outcome = _RowOutcome(row=row, printing=printing)

        self._report_progress(total)
        return outcome

    async def resolve_rows(self, rows: list[RawImportRow]) -> ResolveResult:
        """
        Resolve rows to Cards, preserving row order.

        Returns:
            ResolveResult. If the session was cancelled, cards and failures
            are empty and cancelled is True.
        """
        total = len(rows)
        outcomes: list[_RowOutcome] = []
        batch_size = self._batch_size
        self._completed = 0

        index = 0
        while index < total:
            if self.session.cancelled:
                break

            batch = rows[index : index + batch_size]
            rate_limited_before = self._rate_limited_count()

            outcomes.extend(
                await asyncio.gather(
                    *(self._resolve_row(row, offset, total) for offset, row in enumerate(batch))
                )
            )
            index += len(batch)

            if batch_size > 1 and self._rate_limited_count() > rate_limited_before:
                logger.warning(
                    "Rate limited during import %s; continuing one card at a time",
                    self.session.id,
                )
                batch_size = 1

            if index < total and self._batch_delay:
                await asyncio.sleep(self._batch_delay)

        if self.session.cancelled:
            logger.info(
                "Import %s cancelled; discarding %d results", self.session.id, len(outcomes)
            )
            return ResolveResult(cancelled=True)

        return self._assemble(outcomes)

    def _assemble(self, outcomes: list[_RowOutcome]) -> ResolveResult:
        result = ResolveResult()
        for outcome in outcomes:
            row = outcome.row
            if outcome.printing is not None:
                result.cards.append(card_from_printing(row, outcome.printing))
                continue

            error = outcome.error or NOT_FOUND_ERROR
            result.failures.append(RowFailure(row.row_number, row.name, error))
            if self._not_found_policy == "placeholder":
                result.cards.append(placeholder_card(row))
        return result

    async def run(
        self, csv_text: str, binder: Binder, has_header: bool | None = None
    ) -> ImportSummary:
        """
        Import CSV text into a binder.

        Cards are placed with place_card, one per resolved row, in row order.
        The caller persists the binder afterwards.

        Returns:
            ImportSummary with created count and all failures
        """
        ingest = ingest_csv(csv_text, has_header)
        if ingest.structural_failure:
            return ImportSummary(created=0, failed=list(ingest.failures))

        resolved = await self.resolve_rows(ingest.rows)
        failed = sorted(ingest.failures + resolved.failures, key=lambda f: f.row or 0)

        if resolved.cancelled:
            return ImportSummary(created=0, failed=failed, cancelled=True)

        placements = [place_card(binder, card) for card in resolved.cards]

        logger.info(
            "Imported %d of %d rows into binder %s (%d failures)",
            len(placements),
            len(ingest.rows) + len(ingest.failures),
            binder.id,
            len(failed),
        )
        return ImportSummary(created=len(placements), failed=failed, placements=placements)
