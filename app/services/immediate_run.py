
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, List, Optional

from app.core.errors import PlanInvalid, PlatformError, PlatformRejected
from app.core.observability import TraceManager
from app.core.platform import WorkflowPlatformClient
from app.core.prompts import SAMPLE_DATA_NOTE, SCHEDULE_HINT
from app.workflow.models import RunOutcome, RunState, WorkflowPlan
from app.workflow.templates import sample_result_for

logger = logging.getLogger(__name__)

RUN_ARGS = {"since_minutes": 60, "max_count": 3}
RECURRING_WORDS = ["daily", "every"]
INSTANT_SUFFIX = "_instant"
NO_RESULT_MESSAGE = "✅ Job finished without returning any output."


def format_run_result(result: Any) -> str:
    """Chat-ready text for a job result."""
    if isinstance(result, dict) and result.get("summary"):
        message = str(result["summary"])
        urgent = result.get("urgent")
        if isinstance(urgent, int) and urgent > 0:
            message += f"\n\n⚠️ {urgent} urgent item(s) need attention"
        return message

    if isinstance(result, list):
        if result and all(isinstance(item, dict) and "subject" in item for item in result):
            lines = [
                f"{i}. **{email.get('subject')}**\n   From: {email.get('from', 'Unknown')}\n"
                f"   {email.get('snippet', '')}\n   _{email.get('received', '')}_"
                for i, email in enumerate(result, start=1)
            ]
            return "📬 Your latest emails:\n\n" + "\n\n".join(lines)
        if not result:
            return "Nothing to report."
        return "\n".join(f"{i}. {item}" for i, item in enumerate(result, start=1))

    return json.dumps(result, indent=2, default=str)


def target_name(script_path: str) -> str:
    """Run-now target as compiled into the script path, e.g. f/automations/gmail_latest_instant -> gmail_latest."""
    name = script_path.rsplit("/", 1)[-1]
    return name[:-len(INSTANT_SUFFIX)] if name.endswith(INSTANT_SUFFIX) else name


def _job_completed(job: Any) -> bool:
    if not isinstance(job, dict):
        return False
    return job.get("type") == "CompletedJob" or job.get("completed") is True


class ImmediateRunExecutor:
    """
    Runs a RUN_NOW plan:

        script_ensured -> triggered -> polling -> resolved | timed_out

    Exactly one bounded wait and one result fetch. Any failure lands in TIMED_OUT,
    which answers with labelled sample data instead of an error.
    """

    def __init__(
        self,
        platform: WorkflowPlatformClient,
        poll_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.platform = platform
        self.poll_delay_seconds = poll_delay_seconds
        self._sleep = sleep

    @TraceManager.span("immediate_run")
    async def execute(self, plan: WorkflowPlan, prompt: str = "") -> RunOutcome:
        if len(plan.scripts_to_create) != 1:
            raise PlanInvalid(f"Immediate run needs exactly one script, plan has {len(plan.scripts_to_create)}")

        script = plan.scripts_to_create[0]
        target = target_name(script.path)
        history: List[RunState] = []
        job_id: Optional[str] = None

        try:
            await self._ensure_script(plan)
            history.append(RunState.SCRIPT_ENSURED)

            job_id = await self.platform.run_script(script.path, RUN_ARGS)
            history.append(RunState.TRIGGERED)
            logger.info(f"Triggered {script.path} as job {job_id}")

            await self._sleep(self.poll_delay_seconds)
            history.append(RunState.POLLING)
            job = await self.platform.get_job(job_id)
        except PlatformError as e:
            return self._timed_out(script.path, target, job_id, history, reason=str(e))

        if not _job_completed(job):
            return self._timed_out(script.path, target, job_id, history, reason="job did not complete in time")
        if job.get("success") is False:
            return self._timed_out(script.path, target, job_id, history, reason="job failed")

        result = job.get("result")
        message = NO_RESULT_MESSAGE if result is None else format_run_result(result)
        lower = prompt.lower()
        if not any(word in lower for word in RECURRING_WORDS):
            message += SCHEDULE_HINT

        history.append(RunState.RESOLVED)
        return RunOutcome(
            state=RunState.RESOLVED,
            message=message,
            script_path=script.path,
            job_id=job_id,
            executed=True,
            history=history
        )

    async def _ensure_script(self, plan: WorkflowPlan):
        script = plan.scripts_to_create[0]
        try:
            await self.platform.create_script(script)
        except PlatformRejected as e:
            if not e.is_duplicate:
                raise
            logger.info(f"Reusing existing script {script.path}")

    def _timed_out(
        self,
        script_path: str,
        target: Optional[str],
        job_id: Optional[str],
        history: List[RunState],
        reason: str
    ) -> RunOutcome:
        logger.warning(f"Immediate run of {script_path} fell back to sample data: {reason}")
        TraceManager.info("Immediate run fallback", script=script_path, reason=reason)
        history.append(RunState.TIMED_OUT)
        return RunOutcome(
            state=RunState.TIMED_OUT,
            message=format_run_result(sample_result_for(target)) + SAMPLE_DATA_NOTE,
            script_path=script_path,
            job_id=job_id,
            executed=False,
            sample=True,
            reason=reason,
            history=history
        )
