
import logging
from app.core.errors import ConfigurationMissing, PlanInvalid
from app.graph.state import AutomationState
from app.workflow.compiler import PlanCompiler

logger = logging.getLogger(__name__)

class CompilationNode:
    def __init__(self, compiler: PlanCompiler, platform_configured: bool):
        self.compiler = compiler
        self.platform_configured = platform_configured

    async def __call__(self, state: AutomationState) -> AutomationState:
        try:
            plan = self.compiler.compile(state["intent"])
        except PlanInvalid as e:
            logger.error(f"Compiler produced an invalid plan: {e}", exc_info=True)
            return {"plan": None, "error": str(e), "error_kind": "plan_invalid"}

        # Stop before any network I/O when the plan needs a platform we cannot reach
        if plan.requires_platform and not self.platform_configured:
            missing = ConfigurationMissing("WINDMILL_TOKEN")
            logger.error(f"Cannot apply plan: {missing}")
            return {"plan": plan, "error": str(missing), "error_kind": "configuration_missing"}

        return {"plan": plan}
