"""
Firestore helpers: query filters and model <-> document conversion.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Uses positional arguments, which work reliably with firebase_admin.

    Usage:
        query = where_filter(collection, "status", "==", "active")
    """
    return query.where(field_path, op_string, value)


def to_document(model: BaseModel, exclude: Optional[set] = None) -> Dict[str, Any]:
    """
    Convert a model to a Firestore document.

    Enums and nested models are flattened to JSON types; datetimes are
    kept native so Firestore stores them as timestamps.
    """
    data = model.model_dump(mode="json", exclude=exclude)
    native = model.model_dump(exclude=exclude)
    for key, value in native.items():
        if isinstance(value, datetime):
            data[key] = value
    return data


def from_document(model_cls: Type[ModelT], snapshot, id_field: Optional[str] = "id") -> ModelT:
    data = snapshot.to_dict() or {}
    if id_field:
        data[id_field] = snapshot.id
    return model_cls.model_validate(data)
