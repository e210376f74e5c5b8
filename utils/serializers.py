from beanie import Document, PydanticObjectId
from bson import ObjectId
from fastapi import HTTPException
from typing import Any, Dict, Iterable, List, Optional


def convert_special_types(data):
    """Recursively convert ObjectIds to strings so the data can go out as JSON."""
    if isinstance(data, dict):
        return {k: convert_special_types(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [convert_special_types(item) for item in data]
    elif isinstance(data, (PydanticObjectId, ObjectId)):
        return str(data)
    return data


def to_public_dict(document: Document, exclude: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    exclude_fields = {"hashed_password", "revision_id"}
    if exclude:
        exclude_fields.update(exclude)
    data = document.model_dump(mode="json", by_alias=True, exclude=exclude_fields)
    return convert_special_types(data)


def to_public_list(documents: Iterable[Document], exclude: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
    return [to_public_dict(document, exclude) for document in documents]


def parse_object_id(value: str, label: str) -> ObjectId:
    if not value or not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")
    return ObjectId(value)
