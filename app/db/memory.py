"""
In-process DocumentStore.

Used by the test suite and for local development (STORE_BACKEND=memory).
Transactions are optimistic: every document carries a version number, reads
inside a transaction record the version they saw, and the commit is rejected
if any of those versions moved. Rejected transactions are re-run up to
``max_attempts`` times before ConflictError is raised.
"""

import asyncio
import copy
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError
from app.db.store import DocumentStore, Filter, OrderBy, T, Transaction, split_path

logger = logging.getLogger(__name__)

Key = Tuple[str, str]


class _CommitConflict(Exception):
    pass


class InMemoryTransaction(Transaction):

    def __init__(self, store: "InMemoryDocumentStore"):
        self._store = store
        self._reads: Dict[Key, int] = {}
        self._writes: Dict[Key, Dict[str, Any]] = {}

    async def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        split_path(path)
        key = (path, doc_id)
        if key in self._writes:
            return self._store._with_id(doc_id, self._writes[key])
        self._reads[key] = self._store._versions.get(key, 0)
        doc = self._store._docs.get(key)
        snapshot = self._store._with_id(doc_id, doc) if doc is not None else None
        # Yield like a network round trip so concurrent transactions interleave
        await asyncio.sleep(0)
        return snapshot

    def set(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        split_path(path)
        self._writes[(path, doc_id)] = copy.deepcopy(fields)

    def commit(self) -> None:
        for key, seen in self._reads.items():
            if self._store._versions.get(key, 0) != seen:
                raise _CommitConflict(f"{key[0]}/{key[1]} changed during transaction")
        for key, fields in self._writes.items():
            self._store._put(key, fields)


class InMemoryDocumentStore(DocumentStore):

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS
        self._docs: Dict[Key, Dict[str, Any]] = {}
        self._versions: Dict[Key, int] = {}

    def _put(self, key: Key, fields: Dict[str, Any]) -> None:
        self._docs[key] = copy.deepcopy(fields)
        self._versions[key] = self._versions.get(key, 0) + 1

    @staticmethod
    def _with_id(doc_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(doc)
        result["id"] = doc_id
        return result

    async def get_document(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        split_path(path)
        doc = self._docs.get((path, doc_id))
        if doc is None:
            return None
        return self._with_id(doc_id, doc)

    async def query_documents(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None
    ) -> List[Dict[str, Any]]:
        split_path(path)
        results = [
            self._with_id(doc_id, doc)
            for (doc_path, doc_id), doc in self._docs.items()
            if doc_path == path and all(f.matches(doc) for f in filters)
        ]
        if order_by is not None:
            results = [doc for doc in results if doc.get(order_by.field) is not None]
            results.sort(key=lambda doc: doc[order_by.field], reverse=order_by.descending)
        return results

    async def create_document(self, path: str, fields: Dict[str, Any]) -> str:
        split_path(path)
        doc_id = uuid.uuid4().hex
        fields = {k: v for k, v in fields.items() if k != "id"}
        self._put((path, doc_id), fields)
        return doc_id

    async def update_document(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        split_path(path)
        key = (path, doc_id)
        if key not in self._docs:
            raise NotFoundError(f"Document {path}/{doc_id} not found")
        merged = {**self._docs[key], **{k: v for k, v in fields.items() if k != "id"}}
        self._put(key, merged)

    async def delete_document(self, path: str, doc_id: str) -> None:
        split_path(path)
        key = (path, doc_id)
        if key in self._docs:
            del self._docs[key]
            self._versions[key] = self._versions.get(key, 0) + 1

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        for attempt in range(1, self.max_attempts + 1):
            transaction = InMemoryTransaction(self)
            result = await fn(transaction)
            try:
                transaction.commit()
                return result
            except _CommitConflict as exc:
                logger.debug("Transaction attempt %s/%s conflicted: %s", attempt, self.max_attempts, exc)
        raise ConflictError(f"Transaction aborted after {self.max_attempts} attempts")
