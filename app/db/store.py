"""
DocumentStore - the storage contract the billing core depends on.

Collections are addressed by slash separated paths scoped to a business
account, e.g. ``accounts/{account_id}/invoices``. Documents are plain dicts;
the document id is returned as ``id`` and never stored inside ``fields``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from app.core.errors import ValidationError

T = TypeVar("T")

CUSTOMERS = "customers"
INVOICES = "invoices"
RECEIPTS = "receipts"
COUNTERS = "counters"
PROFILE = "profile"

COLLECTIONS = (CUSTOMERS, INVOICES, RECEIPTS, COUNTERS, PROFILE)

OPERATORS = ("==", ">=", "<=")


def collection_path(account_id: str, name: str) -> str:
    """Build the account scoped path for a collection."""
    if not account_id:
        raise ValidationError("account_id is required")
    if name not in COLLECTIONS:
        raise ValidationError(f"Unknown collection: {name}")
    return f"accounts/{account_id}/{name}"


def split_path(path: str) -> Tuple[str, str]:
    """Return (account_id, collection_name) for a collection path."""
    parts = path.split("/")
    if len(parts) != 3 or parts[0] != "accounts" or parts[2] not in COLLECTIONS:
        raise ValidationError(f"Invalid collection path: {path}")
    return parts[1], parts[2]


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValidationError(f"Unsupported filter operator: {self.op}")

    def matches(self, doc: Dict[str, Any]) -> bool:
        if self.field not in doc or doc[self.field] is None:
            return False
        current = doc[self.field]
        if self.op == "==":
            return current == self.value
        if self.op == ">=":
            return current >= self.value
        return current <= self.value


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


class Transaction(ABC):
    """Read/write handle passed to ``run_transaction`` callbacks."""

    @abstractmethod
    async def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def set(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Stage a full overwrite of the document, applied on commit."""
        ...


class DocumentStore(ABC):
    """Abstract document database with query and transaction primitives."""

    @abstractmethod
    async def get_document(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def query_documents(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create_document(self, path: str, fields: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    async def update_document(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into the document. Raises NotFoundError if absent."""
        ...

    @abstractmethod
    async def delete_document(self, path: str, doc_id: str) -> None:
        ...

    @abstractmethod
    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        """
        Run ``fn`` atomically. Retries on write conflicts up to the store's
        attempt budget, then raises ConflictError.
        """
        ...

    async def close(self) -> None:
        return None
