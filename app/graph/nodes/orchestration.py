
from app.graph.state import AutomationState
from app.services.orchestrator import ResourceOrchestrator

class OrchestrationNode:
    def __init__(self, orchestrator: ResourceOrchestrator):
        self.orchestrator = orchestrator

    async def __call__(self, state: AutomationState) -> AutomationState:
        report = await self.orchestrator.apply(state["plan"])
        return {"report": report}
