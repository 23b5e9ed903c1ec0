import pytest
from app.api.main import app


@pytest.mark.asyncio
async def test_health_check(async_client):
    response = await async_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["classifier"] == "heuristic"
    assert "X-Trace-Id" in response.headers


@pytest.mark.asyncio
async def test_trace_id_is_echoed(async_client):
    response = await async_client.get("/health", headers={"X-Trace-Id": "trace-abc"})
    assert response.headers["X-Trace-Id"] == "trace-abc"


@pytest.mark.asyncio
async def test_platform_probe(async_client, fake_windmill):
    fake_windmill.existing.update({"f/automations/a", "f/automations/b"})
    response = await async_client.get("/health/platform")
    assert response.json() == {"status": "connected", "flow_count": 2}


@pytest.mark.asyncio
async def test_platform_probe_reports_errors(async_client, fake_windmill):
    fake_windmill.failures["flows/list"] = (401, "unauthorized")
    response = await async_client.get("/health/platform")
    body = response.json()
    assert body["status"] == "error"
    assert "401" in body["detail"]


@pytest.mark.asyncio
async def test_nl2flow_schedule(async_client):
    response = await async_client.post("/api/nl2flow", json={"prompt": "summarize my gmail every day at 9am"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["details"]["flow"] == "f/automations/gmail_daily_summary"


@pytest.mark.asyncio
async def test_nl2flow_requires_prompt(async_client):
    response = await async_client.post("/api/nl2flow", json={})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_nl2flow_without_service():
    import httpx

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/nl2flow", json={"prompt": "hi"})
    assert response.status_code == 503
