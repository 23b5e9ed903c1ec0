
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from app.core.errors import PlanInvalid
from app.core.intents import IntentKind


class AutomationIntent(BaseModel):
    """
    Structured classification of a free-text automation request.
    `cron_expression` only accompanies SCHEDULE and `immediate_target_name` only RUN_NOW.
    """
    kind: IntentKind = IntentKind.UNKNOWN
    action: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    cron_expression: Optional[str] = None
    immediate_target_name: Optional[str] = None
    provider: str = "heuristic"

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_kind_fields(self):
        if (self.kind == IntentKind.SCHEDULE) != (self.cron_expression is not None):
            raise ValueError("cron_expression must be set exactly when kind is 'schedule'")
        if (self.kind == IntentKind.RUN_NOW) != (self.immediate_target_name is not None):
            raise ValueError("immediate_target_name must be set exactly when kind is 'run_now'")
        return self

    @property
    def hour(self) -> Optional[int]:
        if not self.cron_expression:
            return None
        fields = self.cron_expression.split()
        if len(fields) == 5 and fields[1].isdigit():
            return int(fields[1])
        return None


# --- Plan -------------------------------------------------------------------

class ScriptSpec(BaseModel):
    path: str
    language: str = "typescript"
    content: str
    description: str = ""

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            "content": self.content,
            "description": self.description,
            "summary": self.description,
        }


class InputTransform(BaseModel):
    type: Literal["static", "javascript"]
    value: Optional[Any] = None
    expr: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def static(cls, value: Any) -> "InputTransform":
        return cls(type="static", value=value)

    @classmethod
    def javascript(cls, expr: str) -> "InputTransform":
        return cls(type="javascript", expr=expr)

    def to_payload(self) -> Dict[str, Any]:
        if self.type == "javascript":
            return {"type": "javascript", "expr": self.expr}
        return {"type": "static", "value": self.value}


class ScriptStep(BaseModel):
    """Flow module that calls a script created by the same plan."""
    step_type: Literal["script"] = "script"
    id: str
    path: str
    input_transforms: Tuple[Tuple[str, InputTransform], ...] = ()

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": {
                "type": "script",
                "path": self.path,
                "input_transforms": {name: t.to_payload() for name, t in self.input_transforms},
            },
        }


class InlineTriggerStep(BaseModel):
    """Flow module with inline code; used as the pass-through webhook trigger."""
    step_type: Literal["rawscript"] = "rawscript"
    id: str
    language: str = "typescript"
    content: str

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": {
                "type": "rawscript",
                "language": self.language,
                "content": self.content,
                "input_transforms": {},
            },
        }


FlowStep = Annotated[Union[ScriptStep, InlineTriggerStep], Field(discriminator="step_type")]


class FlowSpec(BaseModel):
    path: str
    summary: str
    modules: Tuple[FlowStep, ...] = ()

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "summary": self.summary,
            "value": {
                "summary": self.summary,
                "modules": [module.to_payload() for module in self.modules],
            },
            "deployment_message": "Created by chat automation",
        }


class ScheduleSpec(BaseModel):
    path: str
    cron: str
    target_flow_path: str
    timezone: str
    enabled: bool = True
    summary: str = ""

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "schedule": self.cron,
            "timezone": self.timezone,
            "script_path": self.target_flow_path,
            "is_flow": True,
            "args": {},
            "enabled": self.enabled,
            "summary": self.summary,
        }


class WorkflowPlan(BaseModel):
    """
    Compiled, immutable set of remote operations for one intent.
    Only produced through PlanBuilder so references are always checked.
    """
    intent: AutomationIntent
    scripts_to_create: Tuple[ScriptSpec, ...] = ()
    flow_to_create: Optional[FlowSpec] = None
    schedule_to_create: Optional[ScheduleSpec] = None
    webhook_url: Optional[str] = None
    confirmation_message: str = ""
    supported: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def requires_platform(self) -> bool:
        return bool(self.scripts_to_create or self.flow_to_create or self.schedule_to_create)

    @property
    def resource_paths(self) -> List[str]:
        paths = [script.path for script in self.scripts_to_create]
        if self.flow_to_create:
            paths.append(self.flow_to_create.path)
        if self.schedule_to_create:
            paths.append(self.schedule_to_create.path)
        return paths


def validate_plan(plan: WorkflowPlan) -> None:
    """Raises PlanInvalid when a flow step or schedule points at a path the plan does not create."""
    script_paths = [script.path for script in plan.scripts_to_create]
    if len(set(script_paths)) != len(script_paths):
        raise PlanInvalid(f"Duplicate script paths in plan: {script_paths}")

    if plan.flow_to_create:
        for module in plan.flow_to_create.modules:
            if isinstance(module, ScriptStep) and module.path not in script_paths:
                raise PlanInvalid(f"Flow step '{module.id}' references unknown script '{module.path}'")

    if plan.schedule_to_create:
        flow_path = plan.flow_to_create.path if plan.flow_to_create else None
        if plan.schedule_to_create.target_flow_path != flow_path:
            raise PlanInvalid(
                f"Schedule '{plan.schedule_to_create.path}' targets unknown flow "
                f"'{plan.schedule_to_create.target_flow_path}'"
            )

    if plan.webhook_url and not plan.flow_to_create:
        raise PlanInvalid("Webhook URL computed without a flow to receive it")


# --- Execution ----------------------------------------------------------------

class OperationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class OperationResult(BaseModel):
    operation: str
    path: Optional[str] = None
    status: OperationStatus
    remote_id: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    required: bool = True
    already_existed: bool = False


class ExecutionReport(BaseModel):
    entries: List[OperationResult] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        return all(e.status == OperationStatus.SUCCEEDED for e in self.entries if e.required)

    def entry(self, operation: str) -> Optional[OperationResult]:
        for e in self.entries:
            if e.operation == operation:
                return e
        return None

    def failures(self) -> List[OperationResult]:
        return [e for e in self.entries if e.status == OperationStatus.FAILED]


class RunState(str, Enum):
    PENDING = "pending"
    SCRIPT_ENSURED = "script_ensured"
    TRIGGERED = "triggered"
    POLLING = "polling"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"


class RunOutcome(BaseModel):
    state: RunState
    message: str
    script_path: str
    job_id: Optional[str] = None
    executed: bool = False
    sample: bool = False
    reason: Optional[str] = None
    history: List[RunState] = Field(default_factory=list)


# --- Core boundary --------------------------------------------------------------

class AutomationResponse(BaseModel):
    success: bool
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
