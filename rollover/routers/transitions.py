# rollover/routers/transitions.py
from fastapi import APIRouter, Depends

from rollover.core.http import CoreHTTP
from rollover.deps.auth import get_core_http
from rollover.schemas.transition import PlanRequest, SessionTransitionRequest, TransitionAction
from rollover.services.transition import TransitionPlan, TransitionService

router = APIRouter(prefix="/transitions", tags=["transitions"])

@router.post("/plan")
async def build_plan(body: PlanRequest, http: CoreHTTP = Depends(get_core_http)):
    """Default per-student plan for a source class; already-moved students are left out."""
    plan = await TransitionService(http).open(body.source_class_id, body.session_id)
    data = plan.to_dict()
    data["targetOptions"] = {
        action.value: [{"id": c.id, "label": c.label} for c in plan.target_options(action)]
        for action in (TransitionAction.PROMOTE, TransitionAction.RETAIN)
    }
    return data

@router.post("/submit")
async def submit_plan(body: SessionTransitionRequest, http: CoreHTTP = Depends(get_core_http)):
    result = await TransitionService(http).submit(TransitionPlan.from_request(body))
    return {
        "success": result.success,
        "submitted": result.submitted,
        "dropped": result.dropped,
        "message": result.message,
    }
