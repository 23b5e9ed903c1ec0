import pytest

from app.core.prompts import CONFIGURATION_MISSING_MESSAGE, GREETING_MESSAGE, HELP_MESSAGE, SAMPLE_DATA_NOTE
from app.core.settings import AppSettings, LLMSettings, WorkflowPlatformSettings
from app.intent.rules import RuleBasedClassifier
from app.services.automation import AutomationService


@pytest.mark.asyncio
async def test_schedule_request_end_to_end(automation_service, fake_windmill):
    response = await automation_service.handle("summarize my gmail every day at 9am")

    assert response.success
    assert response.message == "✅ Set up daily Gmail summary at 9:00"
    assert response.details["script_paths"] == ["f/automations/gmail_summary"]
    assert response.details["flow"] == "f/automations/gmail_daily_summary"
    assert response.details["schedule"] == "f/schedules/gmail_daily_summary"
    assert response.details["cron"] == "0 9 * * *"
    assert "webhook_url" not in response.details
    assert fake_windmill.routes("POST") == ["scripts/create", "flows/create", "schedules/create"]


@pytest.mark.asyncio
async def test_repeated_request_is_idempotent(automation_service):
    first = await automation_service.handle("summarize my gmail every day at 9am")
    second = await automation_service.handle("summarize my gmail every day at 9am")

    assert first.success and second.success
    assert first.details["flow"] == second.details["flow"]
    assert all(op["already_existed"] for op in second.details["operations"])


@pytest.mark.asyncio
async def test_webhook_request_returns_url(automation_service):
    response = await automation_service.handle("when webhook received, send to slack")

    url = "https://windmill.test/api/w/main/jobs/run/f/f/automations/webhook_to_slack"
    assert response.success
    assert response.details["webhook_url"] == url
    assert url in response.message
    assert "schedule" not in response.details


@pytest.mark.asyncio
async def test_webhook_url_hidden_when_flow_fails(automation_service, fake_windmill):
    fake_windmill.failures["flows/create"] = (400, "invalid modules")
    response = await automation_service.handle("when webhook received, send to slack")

    assert not response.success
    assert "webhook_url" not in response.details
    assert "invalid modules" in response.message


@pytest.mark.asyncio
async def test_schedule_failure_keeps_success_with_warning(automation_service, fake_windmill):
    fake_windmill.failures["schedules/create"] = (400, "bad cron")
    response = await automation_service.handle("summarize my gmail every day at 9am")

    assert response.success
    assert "schedule could not be created" in response.message


@pytest.mark.asyncio
async def test_run_now_request(automation_service):
    response = await automation_service.handle("run now")

    assert response.success
    assert response.details["job_id"] == "job-123"
    assert response.details["executed"] is True
    assert response.details["run_state"] == "resolved"


@pytest.mark.asyncio
async def test_run_now_fallback_still_succeeds(automation_service, fake_windmill):
    fake_windmill.job = {"type": "QueuedJob"}
    response = await automation_service.handle("run now")

    assert response.success
    assert response.details["sample"] is True
    assert response.details["run_state"] == "timed_out"
    assert response.message.endswith(SAMPLE_DATA_NOTE)


@pytest.mark.asyncio
async def test_chat_and_unknown(automation_service, fake_windmill):
    chat = await automation_service.handle("hi")
    assert chat.success
    assert chat.message == GREETING_MESSAGE
    assert chat.details["intent"]["kind"] == "chat"

    unknown = await automation_service.handle("what is the weather like")
    assert not unknown.success
    assert unknown.message == HELP_MESSAGE

    assert fake_windmill.requests == []


@pytest.mark.asyncio
async def test_unsupported_schedule_is_not_applied(automation_service, fake_windmill):
    response = await automation_service.handle("backup my photos daily")
    assert not response.success
    assert fake_windmill.requests == []


@pytest.mark.asyncio
async def test_guardrail_blocks_empty_and_long_prompts(automation_service, fake_windmill):
    empty = await automation_service.handle("   ")
    assert not empty.success
    assert "Empty request" in empty.message

    too_long = await automation_service.handle("a" * 2001)
    assert not too_long.success
    assert "too long" in too_long.message

    assert fake_windmill.requests == []


@pytest.mark.asyncio
async def test_missing_token_reports_configuration():
    settings = AppSettings(
        platform=WorkflowPlatformSettings(host="https://windmill.test", token=None, mcp_url=None),
        llm=LLMSettings(enabled=False)
    )
    service = AutomationService(settings, RuleBasedClassifier(), platform=None)

    response = await service.handle("summarize my gmail every day at 9am")
    assert not response.success
    assert response.message == CONFIGURATION_MISSING_MESSAGE
    assert response.details["error"] == "WINDMILL_TOKEN is not configured"

    chat = await service.handle("hello")
    assert chat.success


@pytest.mark.asyncio
async def test_from_settings_without_token_disables_platform():
    settings = AppSettings(
        platform=WorkflowPlatformSettings(token=None, mcp_url=None),
        llm=LLMSettings(enabled=False)
    )
    service = AutomationService.from_settings(settings)
    assert service.platform is None
    assert isinstance(service.classifier, RuleBasedClassifier)


@pytest.mark.asyncio
async def test_details_never_contain_token(automation_service):
    response = await automation_service.handle("when webhook received, send to slack")
    assert "test-token" not in str(response.details)


@pytest.mark.asyncio
async def test_run_now_with_malformed_job_falls_back(automation_service, fake_windmill):
    fake_windmill.job = ["queued"]
    response = await automation_service.handle("run now")

    assert response.success
    assert response.details["sample"] is True
    assert response.details["run_state"] == "timed_out"
    assert response.message.endswith(SAMPLE_DATA_NOTE)
