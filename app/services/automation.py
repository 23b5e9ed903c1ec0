
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from app.core.errors import ConfigurationMissing
from app.core.guardrails import Guardrails
from app.core.observability import TraceManager
from app.core.platform import WorkflowPlatformClient
from app.core.prompts import HELP_MESSAGE
from app.core.settings import AppSettings
from app.graph.main import build_automation_graph
from app.intent import build_classifier
from app.intent.base import IntentClassifier
from app.services.immediate_run import ImmediateRunExecutor
from app.services.orchestrator import ResourceOrchestrator
from app.workflow.compiler import PlanCompiler
from app.workflow.models import AutomationResponse

logger = logging.getLogger(__name__)


class AutomationService:
    """
    Core boundary: one free-text request in, one {success, message, details} out.
    Never raises; every failure becomes success=False with a readable message.
    """

    def __init__(
        self,
        settings: AppSettings,
        classifier: IntentClassifier,
        platform: Optional[WorkflowPlatformClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.settings = settings
        self.classifier = classifier
        self.platform = platform

        orchestrator = ResourceOrchestrator(platform) if platform else None
        executor = ImmediateRunExecutor(
            platform,
            poll_delay_seconds=settings.platform.poll_delay_seconds,
            sleep=sleep
        ) if platform else None

        self.graph = build_automation_graph(
            classifier,
            PlanCompiler(settings.platform),
            orchestrator=orchestrator,
            executor=executor
        )

    @classmethod
    def from_settings(cls, settings: AppSettings, http_client: Optional[httpx.AsyncClient] = None) -> "AutomationService":
        classifier = build_classifier(settings)
        platform = None
        try:
            platform = WorkflowPlatformClient(settings.platform, http_client=http_client)
        except ConfigurationMissing as e:
            # Chat replies still work; automation requests will report the missing setting
            logger.warning(f"Workflow platform disabled: {e}")
        return cls(settings, classifier, platform)

    async def handle(self, prompt: str) -> AutomationResponse:
        is_safe, violation = Guardrails.validate_input(prompt, self.settings.max_prompt_length)
        if not is_safe:
            return AutomationResponse(
                success=False,
                message=f"I cannot process that request. {violation}.\n\n{HELP_MESSAGE}",
                details={}
            )

        try:
            final_state = await self.graph.ainvoke({"prompt": prompt})
            response = AutomationResponse(**final_state["response"])
        except Exception as e:
            logger.error(f"Automation request failed: {e}", exc_info=True)
            TraceManager.error("Automation request failed", exc=e)
            return AutomationResponse(
                success=False,
                message="An internal error occurred while handling the automation request.",
                details={}
            )

        TraceManager.info("Automation request handled", success=response.success)
        return response

    async def aclose(self):
        if self.platform:
            await self.platform.aclose()
