
import logging
from app.core.observability import TraceManager
from app.graph.state import AutomationState
from app.intent.base import IntentClassifier

logger = logging.getLogger(__name__)

class ClassificationNode:
    def __init__(self, classifier: IntentClassifier):
        self.classifier = classifier

    async def __call__(self, state: AutomationState) -> AutomationState:
        intent = await self.classifier.classify(state["prompt"])

        # [MONITORING] Structured feature logging
        TraceManager.info(
            f"Intent Classified: {intent.kind.value}",
            feature=intent.kind.value,
            provider=intent.provider,
            action=intent.action,
            source=intent.source,
            target=intent.target
        )
        return {"intent": intent}
