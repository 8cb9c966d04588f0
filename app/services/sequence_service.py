"""
SequenceService - collision-safe document numbers.

Numbers come from a per-account counter document that is read, incremented
and written back inside one store transaction, so two concurrent callers can
never receive the same value. Abandoned transactions may leave gaps; that is
acceptable, duplicates are not.
"""

import logging

from app.core.errors import ValidationError
from app.db.store import COUNTERS, DocumentStore, Transaction, collection_path
from app.models.base import utcnow_iso
from app.models.counter import Counter

logger = logging.getLogger(__name__)

SEQUENCE_PREFIXES = {
    "invoices": "INV",
    "receipts": "REC",
}


def format_number(sequence_name: str, value: int) -> str:
    """INV-0001 style formatting; numbers past 9999 simply grow wider."""
    return f"{SEQUENCE_PREFIXES[sequence_name]}-{value:04d}"


class SequenceService:

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _check_sequence(sequence_name: str) -> None:
        if sequence_name not in SEQUENCE_PREFIXES:
            raise ValidationError(f"Unknown sequence: {sequence_name}")

    async def allocate(self, account_id: str, sequence_name: str) -> str:
        """
        Reserve the next number for ``sequence_name``.

        Raises ConflictError (from the store) if the counter transaction
        cannot commit within the retry budget.
        """
        self._check_sequence(sequence_name)
        path = collection_path(account_id, COUNTERS)

        async def increment(transaction: Transaction) -> int:
            doc = await transaction.get(path, sequence_name)
            counter = Counter(**doc) if doc else Counter()
            next_value = counter.current_count + 1
            transaction.set(path, sequence_name, {
                "current_count": next_value,
                "updated_at": utcnow_iso()
            })
            return next_value

        value = await self.store.run_transaction(increment)
        number = format_number(sequence_name, value)
        logger.info("Allocated %s for account %s", number, account_id)
        return number

    async def peek(self, account_id: str, sequence_name: str) -> str:
        """Preview the next number without reserving it."""
        self._check_sequence(sequence_name)
        doc = await self.store.get_document(collection_path(account_id, COUNTERS), sequence_name)
        counter = Counter(**doc) if doc else Counter()
        return format_number(sequence_name, counter.current_count + 1)
