from typing import Optional

from pydantic import AliasChoices, Field, field_validator

from rollover.schemas.common import ApiModel, normalize_id

class StudentOut(ApiModel):
    name: str = Field("", validation_alias=AliasChoices("name", "firstName"))
    scholar_number: str = ""
    parent_name: str = ""
    phone_number: str = Field("", validation_alias=AliasChoices("phoneNumber", "number"))
    class_id: str = Field("", validation_alias=AliasChoices("classId", "class"))
    session_id: str = Field("", validation_alias=AliasChoices("sessionId", "session"))
    status: str = "active"

    @field_validator("class_id", "session_id", mode="before")
    @classmethod
    def _ref(cls, v):
        return normalize_id(v)

    @field_validator("name", "scholar_number", "parent_name", "phone_number", mode="before")
    @classmethod
    def _text(cls, v):
        return str(v or "").strip()

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return "inactive" if str(v or "").strip().lower() == "inactive" else "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def in_session(self, session_id: Optional[str]) -> bool:
        return bool(session_id) and self.session_id == session_id
