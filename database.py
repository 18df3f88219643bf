"""
Database helpers for the Bar do Vaqueiro backend

Each table is a MongoDB collection. Handlers never talk to pymongo directly;
they go through ``TableStore``, a small table-query client that filters rows
by column and always exposes the row key as ``id``.
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from dotenv import load_dotenv
from pymongo import ASCENDING, DESCENDING, MongoClient, UpdateOne
from pymongo.database import Database
from pymongo.errors import PyMongoError

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Tables
PRODUCTS = "products"
CATEGORIES = "categories"
ORDERS = "orders"
ADMIN_CREDENTIALS = "admin_credentials"


class ConfigurationError(RuntimeError):
    """Store connection settings are missing from the environment."""


class StoreError(Exception):
    """Any failure reported by the table store."""


class MissingTableError(StoreError):
    """The backing table does not exist."""


def connect(url: Optional[str] = None, name: Optional[str] = None) -> Database:
    url = url or DATABASE_URL
    name = name or DATABASE_NAME
    if not url or not name:
        raise ConfigurationError("DATABASE_URL and DATABASE_NAME environment variables are required")
    client = MongoClient(url)
    return client[name]


@contextmanager
def _store_errors(operation: str, table: str):
    try:
        yield
    except PyMongoError as e:
        logger.error("%s on %s failed: %s", operation, table, e)
        raise StoreError(str(e)) from e


def _query(filters: Optional[Dict[str, Any]] = None, exclude: Optional[Dict[str, Iterable]] = None) -> dict:
    query = dict(filters or {})
    for column, values in (exclude or {}).items():
        query[column] = {"$nin": list(values)}
    return query


def _row(doc: dict) -> dict:
    d = dict(doc)
    d.pop("_id", None)
    return d


class TableStore:
    """Column-filtered select/insert/update/upsert/delete over collections."""

    def __init__(self, db: Database):
        self.db = db

    def _table(self, table: str, must_exist: bool = False):
        if must_exist:
            with _store_errors("lookup", table):
                names = self.db.list_collection_names()
            if table not in names:
                raise MissingTableError(f'relation "{table}" does not exist')
        return self.db[table]

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence[Tuple[str, bool]] = (),
    ) -> List[dict]:
        """Return matching rows; ``order_by`` holds (column, ascending) pairs."""
        collection = self._table(table, must_exist=True)
        with _store_errors("select", table):
            cursor = collection.find(_query(filters), {"_id": 0})
            if order_by:
                cursor = cursor.sort([(col, ASCENDING if asc else DESCENDING) for col, asc in order_by])
            return [_row(doc) for doc in cursor]

    def select_one(self, table: str, filters: Dict[str, Any]) -> Optional[dict]:
        collection = self._table(table, must_exist=True)
        with _store_errors("select", table):
            doc = collection.find_one(_query(filters), {"_id": 0})
        return _row(doc) if doc else None

    def insert(self, table: str, rows: List[dict]) -> List[dict]:
        """Insert rows, assigning an ``id`` to each row that has none."""
        docs = []
        for row in rows:
            doc = dict(row)
            if doc.get("id") is None:
                doc["id"] = str(ObjectId())
            docs.append(doc)
        if not docs:
            return []
        with _store_errors("insert", table):
            self.db[table].insert_many(docs)
        return [_row(doc) for doc in docs]

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, Any]) -> int:
        with _store_errors("update", table):
            res = self.db[table].update_many(_query(filters), {"$set": values})
        return res.matched_count

    def upsert(self, table: str, rows: List[dict], on_conflict: str = "id") -> int:
        """Insert rows or update the existing row sharing the ``on_conflict`` value."""
        ops = [UpdateOne({on_conflict: row[on_conflict]}, {"$set": dict(row)}, upsert=True) for row in rows]
        if not ops:
            return 0
        with _store_errors("upsert", table):
            self.db[table].bulk_write(ops, ordered=True)
        return len(ops)

    def delete(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        exclude: Optional[Dict[str, Iterable]] = None,
    ) -> int:
        """Delete matching rows. ``exclude`` keeps rows whose column value is in the set."""
        with _store_errors("delete", table):
            res = self.db[table].delete_many(_query(filters, exclude))
        return res.deleted_count
