"""
MongoDB Service - shared helpers for document collections.

Every route and service goes through these helpers to:
1. Turn ObjectIds into strings before documents leave the API
2. Parse ObjectIds coming in through path parameters
3. Page through large result sets
"""

import math
from typing import Any, Dict, List, Optional, Tuple
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo.collection import Collection


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: _serialize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document (including nested ObjectIds) to a JSON-serializable dict."""
    if doc is None:
        return None
    return _serialize_value(doc)


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# HELPER: ObjectId parsing
# ============================================================

def parse_object_id(value: str, detail: str = "Not found") -> ObjectId:
    """
    Parse a path parameter into an ObjectId.

    A malformed id can never match a document, so it is reported
    the same way as a missing one (404).
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail=detail)


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


# ============================================================
# HELPER: Pagination
# ============================================================

def paginate(
    collection: Collection,
    query: dict,
    sort: List[Tuple[str, int]],
    page: int = 1,
    page_size: int = 10,
    projection: Optional[dict] = None,
) -> Tuple[List[dict], int]:
    """Return one page of documents plus the total match count."""
    total = collection.count_documents(query)
    cursor = collection.find(query, projection)
    if sort:
        cursor = cursor.sort(sort)
    docs = list(cursor.skip((page - 1) * page_size).limit(page_size))
    return docs, total


def page_meta(total: int, page: int, page_size: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }
