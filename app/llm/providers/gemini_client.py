
from typing import Optional
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.language_models import BaseChatModel
from app.core.settings import GeminiSettings
from app.llm.client import LLMClient

class GeminiClient(LLMClient):
    def __init__(self, settings: GeminiSettings, timeout: float = 8.0):
        self.settings = settings
        self.timeout = timeout

    def get_chat_model(self, model_name: Optional[str] = None, temperature: float = 0.0) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            google_api_key=self.settings.api_key,
            model=model_name or self.settings.default_model,
            temperature=temperature,
            timeout=self.timeout,
            max_retries=0
        )

    def is_configured(self) -> bool:
        return bool(self.settings.api_key)
