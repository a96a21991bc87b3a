# rollover/services/classes.py
from typing import Any, List, Optional

from rollover.core.config import settings
from rollover.core.endpoints import ResilientEndpointCaller, delete_candidates, update_candidates
from rollover.core.errors import PlanValidationError
from rollover.core.http import CoreHTTP
from rollover.schemas.class_schema import ClassOut
from rollover.schemas.common import Page, unwrap_record

class ClassService:
    def __init__(self, http: CoreHTTP, caller: Optional[ResilientEndpointCaller] = None):
        self.http = http
        self.caller = caller or ResilientEndpointCaller(http)

    async def list_classes(self, page: int = 1, limit: int = 5) -> Page[ClassOut]:
        payload = await self.http.get("/class/all", {"page": page, "limit": limit})
        return Page[ClassOut].model_validate(payload if isinstance(payload, dict) else {})

    async def list_all_classes(self) -> List[ClassOut]:
        classes: List[ClassOut] = []
        page = 1
        while True:
            result = await self.list_classes(page, settings.PAGE_LIMIT)
            classes.extend(result.items)
            if page >= result.total_pages:
                return classes
            page += 1

    async def create_class(self, name: str, section: str = "") -> ClassOut:
        name = str(name or "").strip()
        if not name:
            raise PlanValidationError("Class name is required.")
        # the API stores sections as a list of upper-case labels
        body = {"name": name, "section": [str(section or "").strip().upper()]}
        created = await self.http.post("/class/create", body)
        return ClassOut.model_validate(unwrap_record(created) or {})

    async def update_class(self, class_id: str, payload: dict) -> Any:
        return await self.caller.call(update_candidates("class", class_id, payload))

    async def delete_class(self, class_id: str) -> Any:
        return await self.caller.call(delete_candidates("class", class_id))
