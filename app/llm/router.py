
import logging
from typing import Dict, Optional, Tuple
from langchain_core.language_models import BaseChatModel
from app.core.settings import AppSettings
from app.llm.client import LLMClient
from app.llm.providers.anthropic_client import AnthropicClient
from app.llm.providers.groq_client import GroqClient
from app.llm.providers.gemini_client import GeminiClient
from app.llm.providers.self_hosted_client import SelfHostedClient

logger = logging.getLogger(__name__)

class LLMRouter:
    def __init__(self, settings: AppSettings, clients: Optional[Dict[str, LLMClient]] = None):
        self.settings = settings
        timeout = settings.llm.timeout_seconds
        self.clients = clients if clients is not None else {
            "anthropic": AnthropicClient(settings.anthropic, timeout=timeout),
            "groq": GroqClient(settings.groq, timeout=timeout),
            "gemini": GeminiClient(settings.gemini, timeout=timeout),
            "self_hosted": SelfHostedClient(settings.self_hosted, timeout=timeout)
        }

    def get_client(self, provider: str) -> Optional[LLMClient]:
        return self.clients.get(provider)

    def provider_chain(self):
        chain = [self.settings.llm.primary_provider, self.settings.llm.fallback_provider]
        # Any other configured provider is a last resort
        chain += [name for name in self.clients if name not in chain]
        return chain

    def get_chat_model(self) -> Optional[Tuple[BaseChatModel, str]]:
        """
        Returns (ChatModel, provider_name) for the first configured provider in the
        chain primary -> fallback -> rest, or None when no provider has credentials.
        """
        for provider in self.provider_chain():
            client = self.clients.get(provider)
            if not client:
                continue

            if client.is_configured():
                logger.info(f"Routing intent classification to {provider}")
                return client.get_chat_model(
                    model_name=self.settings.llm.classifier_model,
                    temperature=self.settings.llm.temperature
                ), provider
            else:
                logger.debug(f"Provider {provider} not configured, falling back...")

        return None
