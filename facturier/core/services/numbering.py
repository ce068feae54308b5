"""
Document numbering.

Numbers look like ``F-2026-0001``: prefix, year of creation, 4-digit sequence.
Invoices and quotes count independently, and every (prefix, year) pair
restarts at 1. The next number is derived from what is persisted on every
call, never from an in-memory counter, so it survives restarts and never
reuses the number of a deleted document.
"""

import re
from enum import Enum

from facturier.config import get_logger
from facturier.core.exceptions import NumberingExhaustedError
from facturier.core.interfaces.storage import IStorage

logger = get_logger(__name__)

NUMBER_PATTERN = re.compile(r"[A-Za-z0-9]+-[0-9]{4}-[0-9]{4}")


class DocumentKind(str, Enum):
    """Which sequence space a number belongs to."""

    INVOICE = "invoice"
    QUOTE = "quote"


def format_number(prefix: str, year: int, sequence: int) -> str:
    return f"{prefix}-{year}-{sequence:04d}"


def is_valid_number(number: str) -> bool:
    """Check a document number against ``PREFIX-YYYY-NNNN``."""
    return NUMBER_PATTERN.fullmatch(number) is not None


class NumberingService:
    """Allocates the next document number from the stored maximum."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def next_number(self, prefix: str, kind: DocumentKind, year: int) -> str:
        """
        Return the number following the highest one stored for (kind, prefix, year).

        Stored numbers whose trailing segment is not an integer are skipped;
        with nothing usable the sequence starts at 1.

        Raises:
            NumberingExhaustedError: 9999 is already taken for (prefix, year).
        """
        if kind == DocumentKind.INVOICE:
            existing = await self._storage.invoices.list_numbers(prefix, year)
        else:
            existing = await self._storage.quotes.list_numbers(prefix, year)

        head = f"{prefix}-{year}-"
        highest = 0
        for number in existing:
            tail = number[len(head):] if number.startswith(head) else ""
            if not (tail.isascii() and tail.isdigit()):
                logger.warning(
                    "numbering_skipped_malformed",
                    kind=kind.value,
                    number=number,
                )
                continue
            highest = max(highest, int(tail))

        number = format_number(prefix, year, highest + 1)
        if not is_valid_number(number):
            logger.error("numbering_exhausted", kind=kind.value, prefix=prefix, year=year)
            raise NumberingExhaustedError(prefix, year)
        logger.debug("number_allocated", kind=kind.value, number=number)
        return number
