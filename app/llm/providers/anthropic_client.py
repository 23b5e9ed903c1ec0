
from typing import Optional
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from app.core.settings import AnthropicSettings
from app.llm.client import LLMClient

class AnthropicClient(LLMClient):
    def __init__(self, settings: AnthropicSettings, timeout: float = 8.0):
        self.settings = settings
        self.timeout = timeout

    def get_chat_model(self, model_name: Optional[str] = None, temperature: float = 0.0) -> BaseChatModel:
        return ChatAnthropic(
            api_key=self.settings.api_key,
            model=model_name or self.settings.default_model,
            temperature=temperature,
            max_tokens=512,
            timeout=self.timeout,
            max_retries=0
        )

    def is_configured(self) -> bool:
        return bool(self.settings.api_key)
