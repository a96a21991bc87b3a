# rollover/routers/sessions.py
from fastapi import APIRouter, Depends, Query

from rollover.core.http import CoreHTTP
from rollover.deps.auth import get_core_http
from rollover.schemas.session import SessionCreate, SessionOut, SessionUpdate
from rollover.services.sessions import SessionService

router = APIRouter(prefix="/sessions", tags=["sessions"])

def _out(session: SessionOut) -> dict:
    data = session.model_dump(by_alias=True)
    data["label"] = session.label
    return data

@router.get("")
async def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1, le=200),
    http: CoreHTTP = Depends(get_core_http),
):
    result = await SessionService(http).list_sessions(page, limit)
    return {"data": [_out(s) for s in result.items], "totalPages": result.total_pages}

@router.get("/active")
async def active_session(http: CoreHTTP = Depends(get_core_http)):
    session = await SessionService(http).get_active_session()
    return {"data": _out(session) if session else None}

@router.post("")
async def create_session(body: SessionCreate, http: CoreHTTP = Depends(get_core_http)):
    """Create a session; when it starts active, the current active session is deactivated first."""
    session = await SessionService(http).create_session(body)
    return {"success": True, "data": _out(session)}

@router.patch("/{session_id}")
async def update_session(session_id: str, body: SessionUpdate, http: CoreHTTP = Depends(get_core_http)):
    session = await SessionService(http).update_session(session_id, body)
    return {"success": True, "data": _out(session)}
