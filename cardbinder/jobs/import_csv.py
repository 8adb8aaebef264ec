"""
Import a scanner-app CSV file into a stored binder.

Usage:
    python -m cardbinder.jobs.import_csv BINDER_ID cards.csv [--no-header]

Resolves every row against Scryfall, places the resulting cards in row
order and saves the binder. Failed rows are logged, never fatal.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from cardbinder.db.database import session_scope
from cardbinder.db.operations import get_binder, save_binder
from cardbinder.models.failure import BinderNotFoundError, KnownError
from cardbinder.services.import_pipeline import ImportPipeline, ImportSummary
from cardbinder.services.import_session import ImportSession
from cardbinder.services.scryfall_client import ScryfallClient

logger = logging.getLogger(__name__)

PROGRESS_LOG_EVERY = 25


def log_progress(completed: int, total: int) -> None:
    if completed == total or completed % PROGRESS_LOG_EVERY == 0:
        logger.info("Resolved %d/%d rows", completed, total)


async def import_file(
    binder_id: str,
    csv_path: Path,
    has_header: bool | None = None,
) -> ImportSummary:
    """
    Import one CSV file into a binder.

    Args:
        binder_id: Id of an existing binder
        csv_path: Path to the CSV export
        has_header: Whether the first line is a header; None to auto-detect

    Returns:
        The import summary

    Raises:
        BinderNotFoundError: If the binder does not exist
    """
    text = csv_path.read_text(encoding="utf-8-sig")

    async with session_scope() as session:
        binder = await get_binder(session, binder_id)
        if binder is None:
            raise BinderNotFoundError(binder_id)

        async with ScryfallClient() as client:
            pipeline = ImportPipeline(
                client,
                ImportSession(owner_id=binder.owner_id),
                on_progress=log_progress,
            )
            summary = await pipeline.run(text, binder, has_header=has_header)

        if summary.created:
            await save_binder(session, binder)

    for failure in summary.failed:
        logger.warning("%s", failure)

    logger.info(
        "Import into %s complete: %d created, %d failed",
        binder_id,
        summary.created,
        len(summary.failed),
    )
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import a card scanner CSV into a binder")
    parser.add_argument("binder_id", help="Id of the binder to import into")
    parser.add_argument("csv_path", type=Path, help="Path to the CSV file")
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Treat the first line as data (default: auto-detect)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for importing a CSV file."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    has_header = False if args.no_header else None
    try:
        asyncio.run(import_file(args.binder_id, args.csv_path, has_header=has_header))
    except KnownError as e:
        logger.error("Import failed: %s (%s)", e.message, e.detail)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
