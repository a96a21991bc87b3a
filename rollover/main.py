# rollover/main.py
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rollover.core.errors import ApiError, PlanValidationError, SessionExclusivityError, error_message
from rollover.core.logging import setup_logging, log
from rollover.routers import sessions, transitions

setup_logging()

app = FastAPI(title="SchoolOps Session Rollover", version="0.1.0")

@app.middleware("http")
async def add_trace(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))
    start = time.time()
    response = await call_next(request)
    took = int((time.time() - start) * 1000)
    log.info("request", path=request.url.path, method=request.method, status=response.status_code, took_ms=took, trace_id=trace_id)
    response.headers["X-Trace-Id"] = trace_id
    return response

@app.exception_handler(PlanValidationError)
async def plan_validation_error(request: Request, exc: PlanValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})

@app.exception_handler(SessionExclusivityError)
async def session_exclusivity_error(request: Request, exc: SessionExclusivityError):
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message, "deactivatedSessionId": exc.deactivated_session_id},
    )

@app.exception_handler(ApiError)
async def api_error(request: Request, exc: ApiError):
    # transport failures have no upstream status
    status = exc.status_code or 502
    return JSONResponse(status_code=status, content={"detail": error_message(exc, "Request to school API failed.")})

@app.get("/healthz")
async def healthz():
    return {"ok": True}

app.include_router(sessions.router)
app.include_router(transitions.router)

if __name__ == "__main__":
    import uvicorn
    from rollover.core.config import settings
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
