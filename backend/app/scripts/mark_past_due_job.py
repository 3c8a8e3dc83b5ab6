"""Command line entry-point to flag overdue invoices as past due."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Optional

from ..database import session_scope
from ..services.billing_periods import system_clock, to_local_date
from ..services.invoices import InvoiceService

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mark sent invoices whose due date has passed as past due."
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        help="Reference date (YYYY-MM-DD); defaults to today in America/New_York.",
    )
    parser.add_argument(
        "--organization-id",
        help="Only process invoices of this organization.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print additional debugging information.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    today = args.today or to_local_date(system_clock())
    with session_scope() as session:
        updated = InvoiceService.mark_past_due(
            session, today, organization_id=args.organization_id
        )
    LOGGER.info("Invoices marked past due as of %s: %s", today, updated)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
