"""
Invoice sequence allocator.

Keeps a single persisted counter (the highest invoice number seen) in step
with the invoices actually stored. The counter only ever moves forward:
deleting an invoice does not free its number, and a late or backfilled
commit of a lower number leaves the counter alone.

Invoice numbers are free-form labels; only the first run of ASCII digits
counts, so "INV-2024-007" is numbered 2024.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

COUNTER_KEY = "lastInvoiceNumber"

# The counter is a Postgres bigint
MAX_INVOICE_NUMBER = 2 ** 63 - 1

_NUMERIC_RUN = re.compile(r"[0-9]+")


def extract_first_numeric_run(label) -> Optional[int]:
    """Return the first contiguous digit run in label as an int, or None.

    Runs too large for the counter count as no number at all.
    """
    if label is None:
        return None
    match = _NUMERIC_RUN.search(str(label))
    if not match:
        return None
    digits = match.group(0).lstrip("0") or "0"
    if len(digits) > len(str(MAX_INVOICE_NUMBER)):
        return None
    number = int(digits)
    return number if number <= MAX_INVOICE_NUMBER else None


class CounterStore(ABC):
    """Persisted integer counters keyed by a fixed identifier"""

    @abstractmethod
    def get(self, key: str) -> Optional[int]:
        """Return the stored value, or None when no counter record exists"""

    @abstractmethod
    def advance(self, key: str, value: int) -> int:
        """Atomically set the counter to value if it is absent or lower.

        Returns the stored value afterwards, which may exceed value.

        Must be a single compare-and-advance at the storage layer so that
        concurrent callers converge on the maximum in any order.
        """


class InvoiceNumberSource(ABC):
    @abstractmethod
    def iter_invoice_numbers(self) -> Iterable[str]:
        """Yield the invoice number of every stored invoice, newest first"""


class InvoiceSequenceAllocator:
    """Derives the next invoice number and advances the stored counter.

    Storage errors are never swallowed here: whatever the stores raise
    reaches the caller, who decides whether to retry or fail the request.
    """

    def __init__(self, counters: CounterStore, invoices: InvoiceNumberSource, key: str = COUNTER_KEY):
        self.counters = counters
        self.invoices = invoices
        self.key = key

    def peek_last(self) -> int:
        last_number = self.counters.get(self.key)
        if last_number:
            return last_number
        return self.reconcile(previous=last_number)

    def peek_next(self) -> int:
        # Advisory only; nothing is reserved
        return self.peek_last() + 1

    def commit(self, invoice_number: str) -> None:
        number = extract_first_numeric_run(invoice_number)
        if number is None:
            logger.debug("Invoice number %r has no digits; counter unchanged", invoice_number)
            return
        stored = self.counters.advance(self.key, number)
        logger.info("Committed invoice %s (counter now %d)", invoice_number, stored)

    def reconcile(self, previous: Optional[int] = None) -> int:
        """Recompute the counter from invoice history and persist it"""
        highest = None
        for invoice_number in self.invoices.iter_invoice_numbers():
            number = extract_first_numeric_run(invoice_number)
            if number is not None and (highest is None or number > highest):
                highest = number

        if highest is None:
            return 0

        # A concurrent commit may already have moved the counter past highest
        stored = self.counters.advance(self.key, highest)
        logger.warning(
            "Invoice counter %r was %s; recovered %d from invoice history",
            self.key,
            "missing" if previous is None else previous,
            stored,
        )
        return stored
