# rollover/services/sessions.py
"""
Academic session access and the single-active-session rule.

Only one session may be active at a time, and the backend does not enforce
it. Before a session is created or updated with `isActive: true`, the
currently active one is deactivated. The two steps are separate network calls
with no transaction:

1. `SessionExclusivityGuard.deactivate_previous()` sets the old session inactive
2. the create/update call activates the new one

Known failure modes, surfaced rather than papered over:
- if step 1 succeeds and step 2 fails, no session is active afterwards.
  `SessionExclusivityError` is raised and the administrator must retry; the
  old session is not re-activated since its state may itself be stale.
- the active-session lookup can race with another administrator, so two
  sessions may briefly both be active. Closing that gap needs a server-side
  compare-and-swap.
"""

from typing import Any, List, Optional, Union

from rollover.core.config import settings
from rollover.core.endpoints import ResilientEndpointCaller, update_candidates
from rollover.core.errors import ApiError, PlanValidationError, SessionExclusivityError
from rollover.core.http import CoreHTTP
from rollover.core.logging import log
from rollover.schemas.common import Page, unwrap_record
from rollover.schemas.session import SessionCreate, SessionOut, SessionUpdate


def _session_from(payload: Any) -> SessionOut:
    return SessionOut.model_validate(unwrap_record(payload) or {})


class SessionExclusivityGuard:
    """Keeps at most one session active by deactivating the current one first."""

    def __init__(self, sessions: "SessionService"):
        self.sessions = sessions

    async def deactivate_previous(self, exclude_id: Optional[str] = None) -> Optional[SessionOut]:
        """Deactivate the active session unless it is `exclude_id`; returns the session deactivated."""
        active = await self.sessions.get_active_session()
        if active is None or not active.id:
            return None
        if exclude_id and active.id == exclude_id:
            return None

        log.info("session_deactivate_previous", session_id=active.id, exclude_id=exclude_id)
        await self.sessions.send_update(active.id, {"isActive": False})
        return active

    async def ensure_single_active(self, exclude_id: Optional[str] = None) -> None:
        await self.deactivate_previous(exclude_id)


class SessionService:
    def __init__(self, http: CoreHTTP, caller: Optional[ResilientEndpointCaller] = None):
        self.http = http
        self.caller = caller or ResilientEndpointCaller(http)
        self.guard = SessionExclusivityGuard(self)

    # --- reads ---

    async def list_sessions(self, page: int = 1, limit: int = 5) -> Page[SessionOut]:
        payload = await self.http.get("/session/all", {"page": page, "limit": limit})
        return Page[SessionOut].model_validate(payload if isinstance(payload, dict) else {})

    async def list_all_sessions(self) -> List[SessionOut]:
        sessions: List[SessionOut] = []
        page = 1
        while True:
            result = await self.list_sessions(page, settings.PAGE_LIMIT)
            sessions.extend(result.items)
            if page >= result.total_pages:
                return sessions
            page += 1

    async def get_active_session(self) -> Optional[SessionOut]:
        """Fetch the active session fresh from the API; never cached."""
        try:
            payload = await self.http.get("/session/active")
        except ApiError as e:
            # some deployments answer 404 instead of {"data": null}
            if e.status_code == 404:
                return None
            raise
        record = unwrap_record(payload)
        if record is None:
            return None
        session = SessionOut.model_validate(record)
        return session if session.id else None

    # --- writes ---

    async def send_update(self, session_id: str, body: dict) -> Any:
        return await self.caller.call(update_candidates("session", session_id, body))

    async def create_session(self, payload: Union[SessionCreate, dict]) -> SessionOut:
        data = SessionCreate.model_validate(payload)
        if not data.name.strip():
            raise PlanValidationError("Session name is required.")
        body = data.model_dump(by_alias=True)
        body["name"] = data.name.strip()

        deactivated = await self.guard.deactivate_previous() if data.is_active else None
        try:
            created = await self.http.post("/session/create", body)
        except ApiError as e:
            if deactivated is None:
                raise
            raise self._partial_failure(e, deactivated, "create") from e

        log.info("session_created", name=data.name, is_active=data.is_active)
        return _session_from(created)

    async def update_session(self, session_id: str, payload: Union[SessionUpdate, dict]) -> SessionOut:
        data = SessionUpdate.model_validate(payload)
        if data.name is not None and not data.name.strip():
            raise PlanValidationError("Session name is required for edit.")

        deactivated = await self.guard.deactivate_previous(exclude_id=session_id) if data.is_active else None
        try:
            updated = await self.send_update(session_id, data.model_dump(by_alias=True, exclude_none=True))
        except ApiError as e:
            if deactivated is None:
                raise
            raise self._partial_failure(e, deactivated, "update") from e

        log.info("session_updated", session_id=session_id, is_active=data.is_active)
        return _session_from(updated)

    async def activate_session(self, session_id: str) -> SessionOut:
        return await self.update_session(session_id, SessionUpdate(is_active=True))

    def _partial_failure(self, error: ApiError, deactivated: SessionOut, step: str) -> SessionExclusivityError:
        log.error(
            "session_exclusivity_partial_failure",
            step=step,
            deactivated_session_id=deactivated.id,
            status_code=error.status_code,
        )
        return SessionExclusivityError(
            f"Session '{deactivated.label}' was deactivated but the {step} failed: {error.message}. "
            "No session is active now; retry the operation.",
            deactivated_session_id=deactivated.id,
        )
