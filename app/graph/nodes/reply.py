
import logging
from typing import Any, Dict

from app.core.intents import IntentKind
from app.core.prompts import CONFIGURATION_MISSING_MESSAGE
from app.graph.state import AutomationState
from app.workflow.models import ExecutionReport, OperationStatus, WorkflowPlan

logger = logging.getLogger(__name__)


def plan_details(plan: WorkflowPlan) -> Dict[str, Any]:
    details: Dict[str, Any] = {"intent": plan.intent.model_dump(mode="json")}
    if plan.scripts_to_create:
        details["script_paths"] = [script.path for script in plan.scripts_to_create]
    if plan.flow_to_create:
        details["flow"] = plan.flow_to_create.path
    if plan.schedule_to_create:
        details["schedule"] = plan.schedule_to_create.path
        details["cron"] = plan.schedule_to_create.cron
    return details


class ReplyNode:
    """
    Turns whatever the pipeline produced into the {success, message, details} answer.
    """

    async def __call__(self, state: AutomationState) -> AutomationState:
        plan = state.get("plan")
        details = plan_details(plan) if plan else {}

        if state.get("error_kind") == "configuration_missing":
            return {"response": {
                "success": False,
                "message": CONFIGURATION_MISSING_MESSAGE,
                "details": {**details, "error": state.get("error")}
            }}

        if state.get("error") or plan is None:
            return {"response": {
                "success": False,
                "message": "Sorry, I couldn't build that automation. Please try rephrasing the request.",
                "details": details
            }}

        outcome = state.get("run_outcome")
        if outcome is not None:
            details.update({
                "script": outcome.script_path,
                "job_id": outcome.job_id,
                "executed": outcome.executed,
                "sample": outcome.sample,
                "run_state": outcome.state.value
            })
            return {"response": {"success": True, "message": outcome.message, "details": details}}

        report = state.get("report")
        if report is not None:
            return {"response": self._report_response(plan, report, details)}

        # No remote operations: chat, help or an unsupported request
        success = plan.supported and plan.intent.kind == IntentKind.CHAT
        return {"response": {"success": success, "message": plan.confirmation_message, "details": details}}

    def _report_response(self, plan: WorkflowPlan, report: ExecutionReport, details: Dict[str, Any]) -> Dict[str, Any]:
        details["operations"] = [entry.model_dump(mode="json") for entry in report.entries]

        flow_entry = report.entry("create_flow")
        if plan.webhook_url and flow_entry and flow_entry.status == OperationStatus.SUCCEEDED:
            details["webhook_url"] = plan.webhook_url

        if not report.success:
            failed = report.failures()
            reasons = "\n".join(f"• {e.operation} {e.path or ''}: {e.error}" for e in failed)
            logger.warning(f"Plan for {plan.intent.kind.value} failed: {[e.operation for e in failed]}")
            return {
                "success": False,
                "message": f"❌ Could not finish setting up the automation.\n\n{reasons}",
                "details": details
            }

        message = plan.confirmation_message
        if details.get("webhook_url"):
            message += f"\n\nWebhook URL: {details['webhook_url']}"

        schedule_entry = report.entry("create_schedule")
        if schedule_entry and schedule_entry.status != OperationStatus.SUCCEEDED:
            message += f"\n\n⚠️ The flow is ready but the schedule could not be created: {schedule_entry.error}"
        return {"success": True, "message": message, "details": details}
