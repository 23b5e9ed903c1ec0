from abc import ABC, abstractmethod

from app.workflow.models import AutomationIntent


class IntentClassifier(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier reported as the intent's provider."""
        pass

    @abstractmethod
    async def classify(self, prompt: str) -> AutomationIntent:
        """
        Total function: never raises. Unparsable text yields kind=UNKNOWN.
        """
        pass
