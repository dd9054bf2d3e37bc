"""
Document Store - generic CRUD over one MongoDB collection.

Every portal record type (profiles, drives, trainings, ledger entries)
goes through this one wrapper:

    create(record)            -> id
    get_all(query, sort)      -> records
    get_by_id(id)             -> record
    update(id, partial)       -> record
    delete(id)                -> None
    add_to_set(id, field, v)  -> bool   (atomic $addToSet)

Documents use string ids (`_id`), exposed to callers as `id`.
pymongo failures are re-raised as RemoteStoreError so callers see a
single failure type for "the store did not answer".
"""

import logging
from functools import wraps
from typing import Optional, List, Dict, Any, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError, DuplicateKeyError

from campus_portal.core.errors import NotFoundError, RemoteStoreError
from campus_portal.db.mongodb import get_collection

logger = logging.getLogger(__name__)


# ============================================================
# HELPER: Convert stored documents to API-shaped dicts
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Rename `_id` to `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> list:
    return [serialize_doc(doc) for doc in docs]


def new_id() -> str:
    return str(ObjectId())


def dotted_updates(partial: Dict[str, Any], *nested: str) -> Dict[str, Any]:
    """
    Turn a partial sub-document into dotted $set keys:

        {"eligibility_criteria": {"min_cgpa": 8}}
            -> {"eligibility_criteria.min_cgpa": 8}

    so the fields of the sub-document that were not sent keep their values.
    """
    flat = {}
    for key, value in partial.items():
        if key in nested and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def store_call(func):
    """Translate pymongo failures into RemoteStoreError."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except DuplicateKeyError:
            raise
        except PyMongoError as e:
            logger.error("%s on '%s' failed: %s", func.__name__, self.name, e)
            raise RemoteStoreError(f"Document store unavailable: {e}") from e
    return wrapper


class DocumentStore:
    """
    Thin CRUD wrapper around a single collection.

    Args:
        name: collection name (see db.mongodb.COLLECTIONS)
        label: human name used in "not found" messages
    """

    def __init__(self, name: str, label: str = "Record"):
        self.name = name
        self.label = label
        self.collection: Collection = get_collection(name)

    @store_call
    def create(self, record: dict, doc_id: Optional[str] = None) -> str:
        doc = {k: v for k, v in record.items() if k != "id"}
        doc["_id"] = doc_id or new_id()
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    @store_call
    def get_all(
        self,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[List[Tuple[str, int]]] = None
    ) -> List[dict]:
        cursor = self.collection.find(query or {})
        if sort:
            cursor = cursor.sort(sort)
        return serialize_docs(cursor)

    @store_call
    def find_one(self, query: Dict[str, Any]) -> Optional[dict]:
        return serialize_doc(self.collection.find_one(query))

    @store_call
    def get_by_id(self, doc_id: str) -> dict:
        doc = self.collection.find_one({"_id": doc_id})
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return serialize_doc(doc)

    @store_call
    def update(self, doc_id: str, partial: Dict[str, Any]) -> dict:
        """Set the given fields. Returns the updated document."""
        partial = {k: v for k, v in partial.items() if k not in ("id", "_id")}
        doc = self.collection.find_one_and_update(
            {"_id": doc_id},
            {"$set": partial},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return serialize_doc(doc)

    @store_call
    def update_many(self, query: Dict[str, Any], partial: Dict[str, Any]) -> int:
        result = self.collection.update_many(query, {"$set": partial})
        return result.matched_count

    @store_call
    def delete(self, doc_id: str) -> None:
        result = self.collection.delete_one({"_id": doc_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.label} not found")

    @store_call
    def add_to_set(
        self,
        doc_id: str,
        field: str,
        value: Any,
        unless_in: Optional[str] = None
    ) -> bool:
        """
        Atomic set-union of `value` into the array `field`.

        With `unless_in`, the update only applies while `value` is absent
        from that other array field. Returns False when the guard blocked
        the update or the document does not exist; callers decide which.
        """
        query: Dict[str, Any] = {"_id": doc_id}
        if unless_in:
            query[unless_in] = {"$nin": [value]}
        result = self.collection.update_one(query, {"$addToSet": {field: value}})
        return result.matched_count > 0
