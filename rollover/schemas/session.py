from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from rollover.schemas.common import ApiModel, parse_timestamp

class SessionOut(ApiModel):
    name: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return str(v or "")

    @field_validator("is_active", mode="before")
    @classmethod
    def _flag(cls, v):
        return bool(v)

    @property
    def starts_at(self) -> Optional[datetime]:
        return parse_timestamp(self.start_date)

    @property
    def label(self) -> str:
        name = self.name.strip() or "Session"
        start = self.starts_at
        return f"{name} ({start.year})" if start else name

class SessionCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    start_date: str
    end_date: str
    is_active: bool = False

class SessionUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: Optional[bool] = None
