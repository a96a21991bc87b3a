# rollover/schemas/common.py
from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def normalize_id(value: Any) -> str:
    """Resolve "abc", {"_id": "abc"}, {"id": ...} and {"$oid": "abc"} forms to a plain id."""
    if not value:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        nested = value.get("_id") or value.get("id") or value.get("$oid") or ""
        if isinstance(nested, str):
            return nested.strip()
        if isinstance(nested, dict) and isinstance(nested.get("$oid"), str):
            return nested["$oid"].strip()
    return ""


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime from the API; naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ApiModel(BaseModel):
    """Base for records owned by the school API (camelCase on the wire, Mongo-style ids)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field("", validation_alias=AliasChoices("_id", "id"))

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, v):
        return normalize_id(v)


class Page(BaseModel, Generic[T]):
    """List endpoints answer {"data": [...], "totalPages": n}."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: List[T] = Field(default_factory=list, validation_alias=AliasChoices("data", "items"))
    total_pages: int = Field(1, validation_alias=AliasChoices("totalPages", "total_pages"))

    @field_validator("items", mode="before")
    @classmethod
    def _only_records(cls, v):
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("total_pages", mode="before")
    @classmethod
    def _default_pages(cls, v):
        try:
            return max(int(v or 1), 1)
        except (TypeError, ValueError):
            return 1


def unwrap_record(payload: Any) -> Optional[dict]:
    """Single-record endpoints answer either {"data": {...}} or the bare record."""
    if not isinstance(payload, dict):
        return None
    if "data" in payload:
        data = payload.get("data")
        return data if isinstance(data, dict) and data else None
    return payload or None
