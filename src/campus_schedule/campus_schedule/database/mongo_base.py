from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId


def alternate_key_filter(key: str) -> Dict[str, Any]:
    """Match a document by its ObjectId hex string or by its string ``id`` field."""
    key = str(key)
    clauses: list[Dict[str, Any]] = [{"id": key}]
    if ObjectId.is_valid(key):
        clauses.insert(0, {"_id": ObjectId(key)})
    return {"$or": clauses}


def scoped(filter_: Dict[str, Any], *, user_id: Optional[str]) -> Dict[str, Any]:
    if user_id is None:
        return filter_
    return {"$and": [filter_, {"userId": str(user_id)}]}
