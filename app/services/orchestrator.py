
import logging
from typing import Any, Awaitable, Callable, Optional

from app.core.errors import PlanInvalid, PlatformRejected, PlatformUnreachable
from app.core.observability import TraceManager
from app.core.platform import WorkflowPlatformClient
from app.workflow.models import (
    ExecutionReport,
    OperationResult,
    OperationStatus,
    WorkflowPlan,
    validate_plan,
)

logger = logging.getLogger(__name__)


class ResourceOrchestrator:
    """
    Applies a WorkflowPlan against the Workflow Platform in dependency order
    (scripts, flow, schedule). Each call is attempted on its own and recorded in
    the ExecutionReport; nothing is deleted or rolled back.
    """

    def __init__(self, platform: WorkflowPlatformClient):
        self.platform = platform

    @TraceManager.span("apply_plan")
    async def apply(self, plan: WorkflowPlan) -> ExecutionReport:
        report = ExecutionReport()

        try:
            validate_plan(plan)
        except PlanInvalid as e:
            logger.error(f"Refusing to apply invalid plan: {e}")
            report.entries.append(OperationResult(
                operation="validate_plan",
                status=OperationStatus.FAILED,
                error=str(e),
                error_type="PlanInvalid"
            ))
            return report

        for script in plan.scripts_to_create:
            report.entries.append(await self._attempt(
                "create_script", script.path, lambda script=script: self.platform.create_script(script)
            ))

        flow_result: Optional[OperationResult] = None
        if plan.flow_to_create:
            flow = plan.flow_to_create
            flow_result = await self._attempt("create_flow", flow.path, lambda: self.platform.create_flow(flow))
            report.entries.append(flow_result)

        if plan.schedule_to_create:
            schedule = plan.schedule_to_create
            if flow_result is None or flow_result.status != OperationStatus.SUCCEEDED:
                logger.warning(f"Skipping schedule {schedule.path}: flow {schedule.target_flow_path} was not created")
                report.entries.append(OperationResult(
                    operation="create_schedule",
                    path=schedule.path,
                    status=OperationStatus.SKIPPED,
                    error=f"flow {schedule.target_flow_path} was not created",
                    required=False
                ))
            else:
                report.entries.append(await self._attempt(
                    "create_schedule",
                    schedule.path,
                    lambda: self.platform.create_schedule(schedule),
                    required=False
                ))

        TraceManager.info(
            "Plan applied",
            success=report.success,
            operations=[f"{e.operation}:{e.status.value}" for e in report.entries]
        )
        return report

    async def _attempt(
        self,
        operation: str,
        path: str,
        call: Callable[[], Awaitable[Any]],
        required: bool = True
    ) -> OperationResult:
        try:
            remote_id = await call()
            logger.info(f"{operation} {path}: created")
            return OperationResult(
                operation=operation,
                path=path,
                status=OperationStatus.SUCCEEDED,
                remote_id=str(remote_id) if remote_id else path,
                required=required
            )
        except PlatformRejected as e:
            if e.is_duplicate:
                # Paths are deterministic, so an existing resource is the one this plan describes
                logger.info(f"{operation} {path}: already exists")
                return OperationResult(
                    operation=operation,
                    path=path,
                    status=OperationStatus.SUCCEEDED,
                    remote_id=path,
                    required=required,
                    already_existed=True
                )
            logger.warning(f"{operation} {path} rejected: {e.status_code} {e.body[:200]}")
            return OperationResult(
                operation=operation,
                path=path,
                status=OperationStatus.FAILED,
                error=e.body,
                error_type="PlatformRejected",
                required=required
            )
        except PlatformUnreachable as e:
            logger.warning(f"{operation} {path} unreachable: {e}")
            return OperationResult(
                operation=operation,
                path=path,
                status=OperationStatus.FAILED,
                error=str(e),
                error_type="PlatformUnreachable",
                required=required
            )
