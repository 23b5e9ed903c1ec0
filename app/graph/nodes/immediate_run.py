
from app.graph.state import AutomationState
from app.services.immediate_run import ImmediateRunExecutor

class ImmediateRunNode:
    def __init__(self, executor: ImmediateRunExecutor):
        self.executor = executor

    async def __call__(self, state: AutomationState) -> AutomationState:
        outcome = await self.executor.execute(state["plan"], prompt=state.get("prompt", ""))
        return {"run_outcome": outcome}
