
from abc import ABC, abstractmethod
from langchain_core.language_models import BaseChatModel
from typing import Optional

class LLMClient(ABC):
    """
    Abstract Base Class for LLM Providers.
    Wraps LangChain's BaseChatModel and provides a unified interface.
    """

    @abstractmethod
    def get_chat_model(self, model_name: Optional[str] = None, temperature: float = 0.0) -> BaseChatModel:
        """Returns a configured LangChain ChatModel instance."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider has the credentials/endpoint it needs."""
        pass
