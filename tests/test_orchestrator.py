import pytest

from app.core.intents import IntentKind
from app.intent.rules import RuleBasedClassifier
from app.services.orchestrator import ResourceOrchestrator
from app.workflow.compiler import PlanCompiler
from app.workflow.models import AutomationIntent, FlowSpec, OperationStatus, ScriptStep, WorkflowPlan


@pytest.fixture
def orchestrator(platform):
    return ResourceOrchestrator(platform)


@pytest.fixture
def schedule_plan(platform_settings):
    intent = RuleBasedClassifier().classify_text("summarize my gmail every day at 9am")
    return PlanCompiler(platform_settings).compile(intent)


@pytest.fixture
def webhook_plan(platform_settings):
    intent = RuleBasedClassifier().classify_text("when webhook received, send to slack")
    return PlanCompiler(platform_settings).compile(intent)


@pytest.mark.asyncio
async def test_apply_in_dependency_order(orchestrator, schedule_plan, fake_windmill):
    report = await orchestrator.apply(schedule_plan)

    assert report.success
    assert [e.operation for e in report.entries] == ["create_script", "create_flow", "create_schedule"]
    assert all(e.status == OperationStatus.SUCCEEDED for e in report.entries)
    assert fake_windmill.routes("POST") == ["scripts/create", "flows/create", "schedules/create"]
    assert fake_windmill.payload_for("schedules/create")["script_path"] == "f/automations/gmail_daily_summary"


@pytest.mark.asyncio
async def test_reapply_treats_duplicates_as_success(orchestrator, schedule_plan):
    first = await orchestrator.apply(schedule_plan)
    second = await orchestrator.apply(schedule_plan)

    assert first.success and second.success
    assert not any(e.already_existed for e in first.entries)
    assert all(e.already_existed for e in second.entries)
    assert [e.path for e in first.entries] == [e.path for e in second.entries]


@pytest.mark.asyncio
async def test_conflict_status_counts_as_existing(orchestrator, schedule_plan, fake_windmill):
    fake_windmill.failures["scripts/create"] = (409, "conflict")
    report = await orchestrator.apply(schedule_plan)

    assert report.success
    assert report.entry("create_script").already_existed


@pytest.mark.asyncio
async def test_flow_failure_skips_schedule(orchestrator, schedule_plan, fake_windmill):
    fake_windmill.failures["flows/create"] = (400, "invalid flow value")
    report = await orchestrator.apply(schedule_plan)

    assert not report.success
    assert report.entry("create_script").status == OperationStatus.SUCCEEDED
    flow = report.entry("create_flow")
    assert flow.status == OperationStatus.FAILED
    assert flow.error == "invalid flow value"
    assert flow.error_type == "PlatformRejected"
    assert report.entry("create_schedule").status == OperationStatus.SKIPPED
    assert "schedules/create" not in fake_windmill.routes()


@pytest.mark.asyncio
async def test_script_failure_does_not_abort_flow(orchestrator, webhook_plan, fake_windmill):
    fake_windmill.failures["scripts/create"] = (500, "internal error")
    report = await orchestrator.apply(webhook_plan)

    assert not report.success
    assert report.entry("create_script").status == OperationStatus.FAILED
    assert report.entry("create_flow").status == OperationStatus.SUCCEEDED
    assert [f.operation for f in report.failures()] == ["create_script"]


@pytest.mark.asyncio
async def test_schedule_failure_is_not_fatal(orchestrator, schedule_plan, fake_windmill):
    fake_windmill.failures["schedules/create"] = (400, "bad cron")
    report = await orchestrator.apply(schedule_plan)

    assert report.success
    schedule = report.entry("create_schedule")
    assert schedule.status == OperationStatus.FAILED
    assert not schedule.required


@pytest.mark.asyncio
async def test_unreachable_platform(orchestrator, webhook_plan, fake_windmill):
    fake_windmill.unreachable.add("")
    report = await orchestrator.apply(webhook_plan)

    assert not report.success
    assert {e.error_type for e in report.entries} == {"PlatformUnreachable"}


@pytest.mark.asyncio
async def test_invalid_plan_is_not_applied(orchestrator, fake_windmill):
    # Built directly to bypass PlanBuilder validation
    plan = WorkflowPlan(
        intent=AutomationIntent(kind=IntentKind.WEBHOOK),
        flow_to_create=FlowSpec(
            path="f/automations/orphan",
            summary="Orphan",
            modules=(ScriptStep(id="step_0", path="f/automations/missing"),),
        ),
    )
    report = await orchestrator.apply(plan)

    assert not report.success
    assert report.entries[0].operation == "validate_plan"
    assert report.entries[0].error_type == "PlanInvalid"
    assert fake_windmill.requests == []
