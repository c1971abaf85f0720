# odesa/serialize.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId


def utcnow() -> datetime:
    # naive UTC, matching what pymongo hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Mongo document -> plain dict with `_id` renamed to a string `id`."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if key == "_id":
            # templates carry their own string `id`, which wins
            out.setdefault("id", str(value))
        elif isinstance(value, ObjectId):
            out[key] = str(value)
        else:
            out[key] = value
    return out
