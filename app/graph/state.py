
from typing import TypedDict, Optional, Any, Dict
from app.workflow.models import AutomationIntent, ExecutionReport, RunOutcome, WorkflowPlan

class AutomationState(TypedDict, total=False):
    """
    Request-scoped state of one automation request as it moves through the graph.
    """
    prompt: str

    # Classification / compilation
    intent: Optional[AutomationIntent]
    plan: Optional[WorkflowPlan]

    # Remote execution
    report: Optional[ExecutionReport]
    run_outcome: Optional[RunOutcome]

    # Failures that stop the pipeline before any remote call
    error: Optional[str]
    error_kind: Optional[str] # configuration_missing, plan_invalid

    # Final {success, message, details}
    response: Optional[Dict[str, Any]]
