
from typing import Literal, Optional
from langgraph.graph import StateGraph, END
from app.core.intents import IntentKind
from app.graph.state import AutomationState
from app.graph.nodes.classification import ClassificationNode
from app.graph.nodes.compilation import CompilationNode
from app.graph.nodes.orchestration import OrchestrationNode
from app.graph.nodes.immediate_run import ImmediateRunNode
from app.graph.nodes.reply import ReplyNode
from app.intent.base import IntentClassifier
from app.services.immediate_run import ImmediateRunExecutor
from app.services.orchestrator import ResourceOrchestrator
from app.workflow.compiler import PlanCompiler

# Conditional Logic
def route_plan(state: AutomationState) -> Literal["orchestrate", "immediate_run", "reply"]:
    plan = state.get("plan")
    if state.get("error") or plan is None or not plan.requires_platform:
        return "reply"
    if plan.intent.kind == IntentKind.RUN_NOW:
        return "immediate_run"
    return "orchestrate"

def build_automation_graph(
    classifier: IntentClassifier,
    compiler: PlanCompiler,
    orchestrator: Optional[ResourceOrchestrator] = None,
    executor: Optional[ImmediateRunExecutor] = None
):
    """
    classify -> compile -> (orchestrate | immediate_run)? -> reply

    Without a platform client the remote nodes are still wired, but compile
    short-circuits to reply with a configuration error before they are reached.
    """
    workflow = StateGraph(AutomationState)

    workflow.add_node("classify", ClassificationNode(classifier))
    workflow.add_node("compile", CompilationNode(compiler, platform_configured=orchestrator is not None and executor is not None))
    workflow.add_node("orchestrate", OrchestrationNode(orchestrator))
    workflow.add_node("immediate_run", ImmediateRunNode(executor))
    workflow.add_node("reply", ReplyNode())

    # Set Entry Point
    workflow.set_entry_point("classify")

    # Add Edges
    workflow.add_edge("classify", "compile")
    workflow.add_conditional_edges(
        "compile",
        route_plan,
        {
            "orchestrate": "orchestrate",
            "immediate_run": "immediate_run",
            "reply": "reply"
        }
    )
    workflow.add_edge("orchestrate", "reply")
    workflow.add_edge("immediate_run", "reply")
    workflow.add_edge("reply", END)

    # Compile
    return workflow.compile()
