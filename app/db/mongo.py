import copy
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, StoreError
from app.db.store import (
    COLLECTIONS,
    CUSTOMERS,
    INVOICES,
    RECEIPTS,
    DocumentStore,
    Filter,
    OrderBy,
    T,
    Transaction,
    split_path,
)

logger = logging.getLogger(__name__)

TRANSIENT_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")


def _scope(path: str, doc_id: Optional[str] = None) -> Dict[str, Any]:
    account_id, _ = split_path(path)
    query: Dict[str, Any] = {"account_id": account_id}
    if doc_id is not None:
        query["doc_id"] = doc_id
    return query


def _to_document(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Strip Mongo bookkeeping and expose doc_id as id."""
    doc = {k: v for k, v in raw.items() if k not in ("_id", "doc_id")}
    doc["id"] = raw["doc_id"]
    return doc


def _to_mongo_query(path: str, filters: Sequence[Filter]) -> Dict[str, Any]:
    query = _scope(path)
    for f in filters:
        if f.op == "==":
            query[f.field] = f.value
        else:
            operator = "$gte" if f.op == ">=" else "$lte"
            existing = query.get(f.field)
            if not isinstance(existing, dict):
                existing = {}
            existing[operator] = f.value
            query[f.field] = existing
    return query


def _is_transient(exc: PyMongoError) -> bool:
    return any(exc.has_error_label(label) for label in TRANSIENT_LABELS)


class MongoTransaction(Transaction):

    def __init__(self, db: AsyncIOMotorDatabase, session):
        self.db = db
        self.session = session
        self._writes: Dict[Tuple[str, str], Dict[str, Any]] = {}

    async def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        _, name = split_path(path)
        staged = self._writes.get((path, doc_id))
        if staged is not None:
            return {**copy.deepcopy(staged), "id": doc_id}
        raw = await self.db[name].find_one(_scope(path, doc_id), session=self.session)
        return _to_document(raw) if raw else None

    def set(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        split_path(path)
        self._writes[(path, doc_id)] = copy.deepcopy(fields)

    async def flush(self) -> None:
        for (path, doc_id), fields in self._writes.items():
            _, name = split_path(path)
            body = {k: v for k, v in fields.items() if k != "id"}
            body.update(_scope(path, doc_id))
            await self.db[name].replace_one(
                _scope(path, doc_id),
                body,
                upsert=True,
                session=self.session
            )


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by MongoDB (motor). Transactions need a replica set."""

    def __init__(self, client: AsyncIOMotorClient, db_name: str, max_attempts: Optional[int] = None):
        self.client = client
        self.db: AsyncIOMotorDatabase = client[db_name]
        self.max_attempts = max_attempts or settings.TRANSACTION_MAX_ATTEMPTS

    async def get_document(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        _, name = split_path(path)
        try:
            raw = await self.db[name].find_one(_scope(path, doc_id))
        except PyMongoError as exc:
            logger.error("get_document %s/%s failed: %s", path, doc_id, exc)
            raise StoreError(str(exc)) from exc
        return _to_document(raw) if raw else None

    async def query_documents(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None
    ) -> List[Dict[str, Any]]:
        _, name = split_path(path)
        cursor = self.db[name].find(_to_mongo_query(path, filters))
        if order_by is not None:
            cursor = cursor.sort(order_by.field, DESCENDING if order_by.descending else ASCENDING)
        try:
            docs = await cursor.to_list(None)
        except PyMongoError as exc:
            logger.error("query_documents %s failed: %s", path, exc)
            raise StoreError(str(exc)) from exc
        return [_to_document(doc) for doc in docs]

    async def create_document(self, path: str, fields: Dict[str, Any]) -> str:
        _, name = split_path(path)
        doc_id = str(ObjectId())
        body = {k: v for k, v in fields.items() if k != "id"}
        body.update(_scope(path, doc_id))
        try:
            await self.db[name].insert_one(body)
        except PyMongoError as exc:
            logger.error("create_document %s failed: %s", path, exc)
            raise StoreError(str(exc)) from exc
        return doc_id

    async def update_document(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        _, name = split_path(path)
        changes = {k: v for k, v in fields.items() if k not in ("id", "account_id", "doc_id")}
        try:
            result = await self.db[name].update_one(_scope(path, doc_id), {"$set": changes})
        except PyMongoError as exc:
            logger.error("update_document %s/%s failed: %s", path, doc_id, exc)
            raise StoreError(str(exc)) from exc
        if result.matched_count == 0:
            raise NotFoundError(f"Document {path}/{doc_id} not found")

    async def delete_document(self, path: str, doc_id: str) -> None:
        _, name = split_path(path)
        try:
            await self.db[name].delete_one(_scope(path, doc_id))
        except PyMongoError as exc:
            logger.error("delete_document %s/%s failed: %s", path, doc_id, exc)
            raise StoreError(str(exc)) from exc

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with await self.client.start_session() as session:
                    async with session.start_transaction():
                        transaction = MongoTransaction(self.db, session)
                        result = await fn(transaction)
                        await transaction.flush()
                return result
            except PyMongoError as exc:
                if not _is_transient(exc):
                    logger.error("Transaction failed: %s", exc)
                    raise StoreError(str(exc)) from exc
                logger.warning("Transaction attempt %s/%s conflicted: %s", attempt, self.max_attempts, exc)
        raise ConflictError(f"Transaction aborted after {self.max_attempts} attempts")

    async def create_indexes(self) -> None:
        """Create database indexes."""
        for name in COLLECTIONS:
            await self.db[name].create_index(
                [("account_id", ASCENDING), ("doc_id", ASCENDING)],
                unique=True
            )

        # Invoice indexes
        await self.db[INVOICES].create_index([("account_id", ASCENDING), ("created_at", ASCENDING)])
        await self.db[INVOICES].create_index([("account_id", ASCENDING), ("customer_id", ASCENDING)])
        await self.db[INVOICES].create_index(
            [("account_id", ASCENDING), ("invoice_number", ASCENDING)],
            unique=True
        )

        # Receipt indexes
        await self.db[RECEIPTS].create_index([("account_id", ASCENDING), ("invoice_id", ASCENDING)])
        await self.db[RECEIPTS].create_index(
            [("account_id", ASCENDING), ("receipt_number", ASCENDING)],
            unique=True
        )

        # Customer indexes
        await self.db[CUSTOMERS].create_index([("account_id", ASCENDING), ("party_name", ASCENDING)])

    async def close(self) -> None:
        self.client.close()
