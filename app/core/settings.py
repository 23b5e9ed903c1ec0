
from functools import lru_cache
from typing import Optional
from urllib.parse import parse_qs, urlparse
import re

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Common Config for all settings classes to pick up .env
settings_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True
)

class WorkflowPlatformSettings(BaseSettings):
    host: str = Field("https://app.windmill.dev", alias="WINDMILL_HOST")
    token: Optional[str] = Field(None, alias="WINDMILL_TOKEN")
    workspace: str = Field("main", alias="WINDMILL_WORKSPACE")
    mcp_url: Optional[str] = Field(None, alias="WINDMILL_MCP_URL")
    timezone: str = Field("America/New_York", alias="WINDMILL_TIMEZONE")
    timeout_seconds: float = Field(5.0, alias="WINDMILL_TIMEOUT_SECONDS")
    poll_delay_seconds: float = Field(1.0, alias="WINDMILL_POLL_DELAY_SECONDS")
    script_folder: str = Field("f/automations", alias="WINDMILL_SCRIPT_FOLDER")
    schedule_folder: str = Field("f/schedules", alias="WINDMILL_SCHEDULE_FOLDER")

    model_config = settings_config

    @model_validator(mode="after")
    def _apply_mcp_url(self):
        """
        An MCP endpoint URL (https://host/api/mcp/w/<workspace>/sse?token=...)
        carries host, workspace and token in one value. Explicit settings win.
        """
        if not self.mcp_url:
            return self

        parsed = urlparse(self.mcp_url)
        if parsed.scheme and parsed.netloc and "host" not in self.model_fields_set:
            self.host = f"{parsed.scheme}://{parsed.netloc}"

        if not self.token:
            token = parse_qs(parsed.query).get("token")
            if token:
                self.token = token[0]

        if "workspace" not in self.model_fields_set:
            match = re.search(r"/w/([^/]+)", parsed.path)
            if match:
                self.workspace = match.group(1)
        return self

    @property
    def api_base(self) -> str:
        return f"{self.host.rstrip('/')}/api/w/{self.workspace}"

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

class AnthropicSettings(BaseSettings):
    api_key: Optional[str] = Field(None, alias="ANTHROPIC_API_KEY")
    default_model: str = Field("claude-3-haiku-20240307", alias="ANTHROPIC_DEFAULT_MODEL")

    model_config = settings_config

class GroqSettings(BaseSettings):
    api_key: Optional[str] = Field(None, alias="GROQ_API_KEY")
    base_url: str = Field("https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")
    default_model: str = Field("llama-3.3-70b-versatile", alias="GROQ_DEFAULT_MODEL")

    model_config = settings_config

class GeminiSettings(BaseSettings):
    api_key: Optional[str] = Field(None, alias="GEMINI_API_KEY")
    default_model: str = Field("gemini-1.5-flash", alias="GEMINI_DEFAULT_MODEL")

    model_config = settings_config

class SelfHostedSettings(BaseSettings):
    # No default URL: a self-hosted model only counts as configured when pointed at one
    base_url: Optional[str] = Field(None, alias="SELF_HOSTED_BASE_URL")
    api_key: str = Field("none", alias="SELF_HOSTED_API_KEY")
    default_model: str = Field("qwen2.5:0.5b", alias="SELF_HOSTED_DEFAULT_MODEL")

    model_config = settings_config

class LLMSettings(BaseSettings):
    primary_provider: str = Field("anthropic", alias="LLM_PRIMARY_PROVIDER")
    fallback_provider: str = Field("groq", alias="LLM_FALLBACK_PROVIDER")
    classifier_model: Optional[str] = Field(None, alias="LLM_CLASSIFIER_MODEL")
    temperature: float = Field(0.0, alias="LLM_TEMPERATURE")
    timeout_seconds: float = Field(8.0, alias="LLM_TIMEOUT_SECONDS")
    enabled: bool = Field(True, alias="LLM_CLASSIFIER_ENABLED")

    model_config = settings_config

class AppSettings(BaseSettings):
    env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    max_prompt_length: int = Field(2000, alias="MAX_PROMPT_LENGTH")

    # Using default_factory with BaseSettings classes will trigger their own env loading
    platform: WorkflowPlatformSettings = Field(default_factory=WorkflowPlatformSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    anthropic: AnthropicSettings = Field(default_factory=AnthropicSettings)
    groq: GroqSettings = Field(default_factory=GroqSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    self_hosted: SelfHostedSettings = Field(default_factory=SelfHostedSettings)

    model_config = settings_config

@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Process-wide settings, built once at startup and passed down explicitly."""
    return AppSettings()
