
from fastapi import FastAPI, Request, Depends
from typing import Annotated
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uuid
import logging
import time
import httpx

from app.core.errors import PlatformError
from app.core.settings import get_settings
from app.core.logging import setup_logging
from app.core.observability import TraceManager
from app.api.schemas import AutomationRequest, AutomationResponse, HealthResponse
from app.api.deps import get_automation_service
from app.services.automation import AutomationService

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    # One shared connection pool for every outbound platform call
    http_client = httpx.AsyncClient(timeout=settings.platform.timeout_seconds)
    app.state.automation_service = AutomationService.from_settings(settings, http_client=http_client)
    logger.info(f"Automation service ready (workspace={settings.platform.workspace}, classifier={app.state.automation_service.classifier.name})")

    yield

    # Shutdown
    await http_client.aclose()

app = FastAPI(title="Chat Automation Assistant", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware for Trace ID
@app.middleware("http")
async def add_trace_id(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4()))
    TraceManager.set_trace_id(trace_id)
    request.state.trace_id = trace_id

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    response.headers["X-Trace-Id"] = trace_id
    TraceManager.info(f"Request: {request.method} {request.url.path}", status=response.status_code, duration_ms=duration*1000)
    return response

# Routes
@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    settings = get_settings()
    service = getattr(request.app.state, "automation_service", None)
    return HealthResponse(
        status="healthy",
        env=settings.env,
        platform_configured=settings.platform.is_configured,
        workspace=settings.platform.workspace,
        classifier=service.classifier.name if service else "uninitialised"
    )

@app.get("/health/platform")
async def platform_health(service: Annotated[AutomationService, Depends(get_automation_service)]):
    """Connectivity probe: lists flows in the configured workspace."""
    if service.platform is None:
        return {"status": "unconfigured", "detail": "WINDMILL_TOKEN is not set"}
    try:
        flows = await service.platform.list_flows()
        return {"status": "connected", "flow_count": len(flows)}
    except PlatformError as e:
        logger.error(f"Platform probe failed: {e}")
        return {"status": "error", "detail": str(e)}

@app.post("/api/nl2flow", response_model=AutomationResponse)
async def nl2flow(
    automation_request: AutomationRequest,
    service: Annotated[AutomationService, Depends(get_automation_service)]
):
    logger.info(f"Received automation request ({len(automation_request.prompt)} chars)")
    return await service.handle(automation_request.prompt)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
