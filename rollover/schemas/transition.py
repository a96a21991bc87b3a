# rollover/schemas/transition.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransitionAction(str, Enum):
    PROMOTE = "promote"
    RETAIN = "retain"
    TRANSFER = "transfer"


class TransitionUpdateIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    student_id: str
    action: TransitionAction = TransitionAction.PROMOTE
    target_class_id: Optional[str] = None


class SessionTransitionRequest(BaseModel):
    """Batch body for the session transition endpoint.

    Wire shape:
        {"sessionId": "...", "sourceClassId": "...",
         "updates": [{"studentId": "...", "action": "promote", "targetClassId": "..."}]}
    `targetClassId` is left out for transfer entries.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = ""
    source_class_id: str = ""
    updates: List[TransitionUpdateIn] = Field(default_factory=list)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PlanRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_class_id: str
    session_id: Optional[str] = None
