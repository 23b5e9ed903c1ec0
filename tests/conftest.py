import json
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest
import pytest_asyncio

from app.core.platform import WorkflowPlatformClient
from app.core.settings import AppSettings, LLMSettings, WorkflowPlatformSettings

BASE = "https://windmill.test/api/w/main/"


class FakeWindmill:
    """
    In-memory stand-in for the Workflow Platform REST API, served through httpx.MockTransport.
    Creating a path twice answers 400 "already exists" like the real platform.
    """

    def __init__(self):
        self.existing: Set[str] = set()
        self.requests: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.unreachable: Set[str] = set()
        self.job: Dict[str, Any] = {"type": "CompletedJob", "success": True, "result": {"summary": "3 unread emails", "urgent": 0}}
        self.job_id = "job-123"

    def handler(self, request: httpx.Request) -> httpx.Response:
        route = str(request.url).replace(BASE, "")
        payload = json.loads(request.content) if request.content else None
        self.requests.append((request.method, route, payload))

        for prefix in self.unreachable:
            if route.startswith(prefix):
                raise httpx.ConnectTimeout("timed out", request=request)
        for prefix, (status, body) in self.failures.items():
            if route.startswith(prefix):
                return httpx.Response(status, text=body)

        if route in ("scripts/create", "flows/create", "schedules/create"):
            path = payload["path"]
            if path in self.existing:
                return httpx.Response(400, text=f"Path conflict for {path}: already exists")
            self.existing.add(path)
            return httpx.Response(201, text=path)
        if route.startswith("jobs/run/p/"):
            return httpx.Response(201, text=self.job_id)
        if route.startswith("jobs_u/get/"):
            return httpx.Response(200, json=self.job)
        if route == "flows/list":
            return httpx.Response(200, json=[{"path": p} for p in sorted(self.existing)])
        return httpx.Response(404, text="not found")

    def routes(self, method: Optional[str] = None) -> List[str]:
        return [route for m, route, _ in self.requests if method is None or m == method]

    def payload_for(self, route: str) -> Optional[Dict[str, Any]]:
        for _, r, payload in self.requests:
            if r == route:
                return payload
        return None


@pytest.fixture
def platform_settings():
    return WorkflowPlatformSettings(
        host="https://windmill.test",
        token="test-token",
        workspace="main",
        mcp_url=None,
        timezone="America/New_York",
        poll_delay_seconds=0
    )


@pytest.fixture
def app_settings(platform_settings):
    return AppSettings(
        env="test",
        platform=platform_settings,
        llm=LLMSettings(enabled=False)
    )


@pytest.fixture
def fake_windmill():
    return FakeWindmill()


@pytest_asyncio.fixture
async def http_client(fake_windmill):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_windmill.handler)) as client:
        yield client


@pytest.fixture
def platform(platform_settings, http_client):
    return WorkflowPlatformClient(platform_settings, http_client=http_client)


async def no_sleep(_seconds: float):
    return None


@pytest.fixture
def automation_service(app_settings, platform):
    from app.intent.rules import RuleBasedClassifier
    from app.services.automation import AutomationService

    return AutomationService(app_settings, RuleBasedClassifier(), platform, sleep=no_sleep)


@pytest_asyncio.fixture
async def async_client(automation_service):
    from app.api.main import app

    # ASGITransport does not run the lifespan, so the service is attached directly
    app.state.automation_service = automation_service
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.state.automation_service
