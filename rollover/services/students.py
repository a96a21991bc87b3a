# rollover/services/students.py
from typing import Any, List, Optional

from rollover.core.config import settings
from rollover.core.endpoints import Candidate, ResilientEndpointCaller
from rollover.core.http import CoreHTTP
from rollover.core.logging import log
from rollover.schemas.common import Page, normalize_id
from rollover.schemas.student import StudentOut
from rollover.schemas.transition import SessionTransitionRequest

TRANSITION_PATHS = (
    "/student/session-transition",
    "/student/transition",
    "/session/transition",
)

class StudentService:
    def __init__(self, http: CoreHTTP, caller: Optional[ResilientEndpointCaller] = None):
        self.http = http
        self.caller = caller or ResilientEndpointCaller(http)

    async def list_students(
        self,
        class_id: Optional[str] = None,
        session_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        search: str = "",
    ) -> Page[StudentOut]:
        params: dict = {"page": page, "limit": limit, "search": search}
        if session_id:
            params["sessionId"] = session_id

        class_id = normalize_id(class_id)
        path = f"/student/class/{class_id}" if class_id else "/student/all"
        payload = await self.http.get(path, params)
        return Page[StudentOut].model_validate(payload if isinstance(payload, dict) else {})

    async def list_all_students(self, class_id: Optional[str] = None) -> List[StudentOut]:
        students: List[StudentOut] = []
        page = 1
        while True:
            result = await self.list_students(class_id, page=page, limit=settings.PAGE_LIMIT)
            students.extend(result.items)
            if page >= result.total_pages:
                return students
            page += 1

    async def submit_session_transition(self, request: SessionTransitionRequest) -> Any:
        body = request.to_wire()
        log.info(
            "session_transition_submit",
            session_id=request.session_id,
            source_class_id=request.source_class_id,
            updates=len(request.updates),
        )
        return await self.caller.call(Candidate("POST", path, body) for path in TRANSITION_PATHS)
