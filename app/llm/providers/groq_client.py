
from typing import Optional
from langchain_groq import ChatGroq
from langchain_core.language_models import BaseChatModel
from app.core.settings import GroqSettings
from app.llm.client import LLMClient

class GroqClient(LLMClient):
    def __init__(self, settings: GroqSettings, timeout: float = 8.0):
        self.settings = settings
        self.timeout = timeout

    def get_chat_model(self, model_name: Optional[str] = None, temperature: float = 0.0) -> BaseChatModel:
        return ChatGroq(
            groq_api_key=self.settings.api_key,
            model_name=model_name or self.settings.default_model,
            temperature=temperature,
            base_url=self.settings.base_url,
            timeout=self.timeout,
            max_retries=0
        )

    def is_configured(self) -> bool:
        return bool(self.settings.api_key)
