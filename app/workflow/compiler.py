
import logging
import re
from typing import Dict, List, Optional

from app.core.intents import IntentKind
from app.core.prompts import (
    GREETING_MESSAGE,
    HELP_MESSAGE,
    UNSUPPORTED_SCHEDULE_MESSAGE,
    UNSUPPORTED_WEBHOOK_MESSAGE,
)
from app.core.settings import WorkflowPlatformSettings
from app.workflow.models import (
    AutomationIntent,
    FlowSpec,
    FlowStep,
    InlineTriggerStep,
    InputTransform,
    ScheduleSpec,
    ScriptSpec,
    ScriptStep,
    WorkflowPlan,
    validate_plan,
)
from app.workflow.templates import (
    DEFAULT_NOTIFY_TARGET,
    DEFAULT_WEBHOOK_SOURCE,
    NOTIFIERS,
    SCHEDULED_AUTOMATIONS,
    WEBHOOK_MESSAGE_EXPR,
    WEBHOOK_TRIGGER_SCRIPT,
    instant_script_for,
)

logger = logging.getLogger(__name__)


def slugify(value: Optional[str], fallback: str) -> str:
    """Lowercase [a-z0-9_] path segment; paths double as idempotency keys."""
    slug = re.sub(r"[^a-z0-9_]+", "_", (value or "").lower()).strip("_")
    return slug or fallback


class PlanBuilder:
    """
    Accumulates typed operation records and hands out a validated, frozen WorkflowPlan once.
    """

    def __init__(self, intent: AutomationIntent):
        self.intent = intent
        self._scripts: List[ScriptSpec] = []
        self._flow: Optional[FlowSpec] = None
        self._schedule: Optional[ScheduleSpec] = None
        self._webhook_url: Optional[str] = None
        self._message = ""
        self._supported = True

    def add_script(self, script: ScriptSpec) -> "PlanBuilder":
        self._scripts.append(script)
        return self

    def set_flow(self, flow: FlowSpec) -> "PlanBuilder":
        self._flow = flow
        return self

    def set_schedule(self, schedule: ScheduleSpec) -> "PlanBuilder":
        self._schedule = schedule
        return self

    def set_webhook_url(self, url: str) -> "PlanBuilder":
        self._webhook_url = url
        return self

    def set_message(self, message: str, supported: bool = True) -> "PlanBuilder":
        self._message = message
        self._supported = supported
        return self

    def build(self) -> WorkflowPlan:
        plan = WorkflowPlan(
            intent=self.intent,
            scripts_to_create=tuple(self._scripts),
            flow_to_create=self._flow,
            schedule_to_create=self._schedule,
            webhook_url=self._webhook_url,
            confirmation_message=self._message,
            supported=self._supported,
        )
        validate_plan(plan)
        return plan


class PlanCompiler:
    """
    Pure mapping from an AutomationIntent to the remote operations that realize it.
    Every path is a deterministic function of the intent, so compiling the same
    intent twice yields the same paths.
    """

    def __init__(self, platform: WorkflowPlatformSettings):
        self.platform = platform
        self._handlers = {
            IntentKind.SCHEDULE: self._compile_schedule,
            IntentKind.WEBHOOK: self._compile_webhook,
            IntentKind.RUN_NOW: self._compile_run_now,
            IntentKind.CHAT: self._compile_chat,
            IntentKind.UNKNOWN: self._compile_unknown,
        }

    def script_path(self, name: str) -> str:
        return f"{self.platform.script_folder}/{name}"

    def schedule_path(self, name: str) -> str:
        return f"{self.platform.schedule_folder}/{name}"

    def webhook_url(self, flow_path: str) -> str:
        return f"{self.platform.api_base}/jobs/run/f/{flow_path}"

    def compile(self, intent: AutomationIntent) -> WorkflowPlan:
        plan = self._handlers[intent.kind](intent, PlanBuilder(intent))
        logger.info(f"Compiled {intent.kind.value} intent into {len(plan.resource_paths)} operation(s): {plan.resource_paths}")
        return plan

    def _compile_schedule(self, intent: AutomationIntent, builder: PlanBuilder) -> WorkflowPlan:
        automation = SCHEDULED_AUTOMATIONS.get((intent.action, intent.source))
        if automation is None:
            return builder.set_message(UNSUPPORTED_SCHEDULE_MESSAGE, supported=False).build()

        script_path = self.script_path(automation.script_name)
        flow_path = self.script_path(automation.flow_name)

        builder.add_script(ScriptSpec(
            path=script_path,
            content=automation.content,
            description=automation.script_description,
        ))
        builder.set_flow(FlowSpec(
            path=flow_path,
            summary=automation.flow_summary,
            modules=(
                ScriptStep(
                    id="step_0",
                    path=script_path,
                    input_transforms=tuple(
                        (name, InputTransform(**transform)) for name, transform in automation.input_transforms
                    ),
                ),
            ),
        ))
        builder.set_schedule(ScheduleSpec(
            path=self.schedule_path(automation.flow_name),
            cron=intent.cron_expression,
            target_flow_path=flow_path,
            timezone=self.platform.timezone,
            enabled=True,
            summary=f"Daily {automation.label}",
        ))

        hour = intent.hour
        when = f"{hour}:00" if hour is not None else intent.cron_expression
        return builder.set_message(f"✅ Set up daily {automation.label} at {when}").build()

    def _compile_webhook(self, intent: AutomationIntent, builder: PlanBuilder) -> WorkflowPlan:
        target = intent.target or DEFAULT_NOTIFY_TARGET
        notifier = NOTIFIERS.get(target)
        if notifier is None:
            return builder.set_message(UNSUPPORTED_WEBHOOK_MESSAGE, supported=False).build()

        source = slugify(intent.source, DEFAULT_WEBHOOK_SOURCE)
        script_path = self.script_path(notifier.script_name)
        flow_path = self.script_path(f"{source}_to_{target}")

        inputs: Dict[str, InputTransform] = {"message": InputTransform.javascript(WEBHOOK_MESSAGE_EXPR)}
        for name, value in notifier.static_inputs:
            inputs[name] = InputTransform.static(value)

        modules: List[FlowStep] = [
            InlineTriggerStep(id="webhook_trigger", content=WEBHOOK_TRIGGER_SCRIPT),
            ScriptStep(id="step_1", path=script_path, input_transforms=tuple(inputs.items())),
        ]

        builder.add_script(ScriptSpec(path=script_path, content=notifier.content, description=notifier.description))
        builder.set_flow(FlowSpec(
            path=flow_path,
            summary=f"{source.capitalize()} to {notifier.label}",
            modules=tuple(modules),
        ))
        builder.set_webhook_url(self.webhook_url(flow_path))
        return builder.set_message(f"✅ Created {source} → {notifier.label} automation").build()

    def _compile_run_now(self, intent: AutomationIntent, builder: PlanBuilder) -> WorkflowPlan:
        name = slugify(intent.immediate_target_name, "gmail_summary")
        content, description = instant_script_for(name)
        builder.add_script(ScriptSpec(
            path=self.script_path(f"{name}_instant"),
            content=content,
            description=description,
        ))
        return builder.set_message(f"✅ Running {name}").build()

    def _compile_chat(self, intent: AutomationIntent, builder: PlanBuilder) -> WorkflowPlan:
        return builder.set_message(GREETING_MESSAGE).build()

    def _compile_unknown(self, intent: AutomationIntent, builder: PlanBuilder) -> WorkflowPlan:
        return builder.set_message(HELP_MESSAGE, supported=False).build()
