
import asyncio
import logging
import re
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from app.core.intents import SERVICE_ALIASES, IntentKind
from app.core.observability import TraceManager
from app.core.prompts import CLASSIFIER_SYSTEM_PROMPT
from app.intent.base import IntentClassifier
from app.intent.rules import RuleBasedClassifier, cron_for_hour, extract_run_target, parse_hour
from app.workflow.models import AutomationIntent

logger = logging.getLogger(__name__)

CRON_PATTERN = re.compile(r"^\s*\S+(\s+\S+){4}\s*$")


class IntentData(BaseModel):
    kind: str = Field(..., description="One of: 'schedule', 'webhook', 'run_now', 'chat', 'unknown'.")
    action: Optional[str] = Field(None, description="Verb such as 'summarize' or 'send'.")
    source: Optional[str] = Field(None, description="Service the data comes from, e.g. 'gmail', 'airtable', 'webhook'.")
    target: Optional[str] = Field(None, description="Service the result goes to, e.g. 'slack'.")
    cron_expression: Optional[str] = Field(None, description="5-field cron, only for 'schedule'.")
    immediate_target_name: Optional[str] = Field(None, description="Script/flow name to run, only for 'run_now'.")
    reasoning: Optional[str] = Field(None, description="Brief explanation of why this kind was chosen.")


def _clean(value: Any) -> Optional[str]:
    if value is None or not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value or None


def _service(value: Any) -> Optional[str]:
    name = _clean(value)
    return SERVICE_ALIASES.get(name, name) if name else None


class LanguageModelClassifier(IntentClassifier):
    """
    Asks a chat model for the intent as JSON. Any failure (API error, timeout,
    unparsable output) degrades to the rule-based result.
    """

    def __init__(
        self,
        model: BaseChatModel,
        fallback: RuleBasedClassifier,
        provider: str = "llm",
        timeout_seconds: float = 8.0
    ):
        self.model = model
        self.fallback = fallback
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        self.parser = JsonOutputParser(pydantic_object=IntentData)

        self.prompt = ChatPromptTemplate.from_messages([
            ("system", CLASSIFIER_SYSTEM_PROMPT),
            ("user", "Request: {input}\n\n{format_instructions}")
        ])

    @property
    def name(self) -> str:
        return self.provider

    async def classify(self, prompt: str) -> AutomationIntent:
        fallback_intent = self.fallback.classify_text(prompt)
        try:
            chain = self.prompt | self.model | self.parser
            result = await asyncio.wait_for(
                chain.ainvoke({
                    "input": prompt,
                    "format_instructions": self.parser.get_format_instructions()
                }),
                timeout=self.timeout_seconds
            )
            logger.info(f"LLM classification result: {result}")
            intent = self._coerce(result, prompt)
        except Exception as e:
            logger.warning(f"LLM classification failed ({type(e).__name__}: {e}); using heuristic result")
            TraceManager.info("Classifier fallback", provider=self.provider, reason=type(e).__name__)
            return fallback_intent

        TraceManager.info(f"Intent Detected: {intent.kind.value}", provider=self.provider, kind=intent.kind.value)
        return intent

    def _coerce(self, result: Any, prompt: str) -> AutomationIntent:
        """Forces raw model output into a valid AutomationIntent."""
        if not isinstance(result, dict):
            raise ValueError(f"Classifier payload must be a JSON object, got {type(result).__name__}")

        kind = IntentKind.coerce(result.get("kind"))
        fields = {
            "kind": kind,
            "action": _clean(result.get("action")),
            "source": _service(result.get("source")),
            "target": _service(result.get("target")),
        }

        if kind == IntentKind.SCHEDULE:
            cron = result.get("cron_expression")
            if not isinstance(cron, str) or not CRON_PATTERN.match(cron):
                cron = cron_for_hour(parse_hour(prompt.lower()))
            fields["cron_expression"] = " ".join(cron.split())
        elif kind == IntentKind.RUN_NOW:
            fields["immediate_target_name"] = _clean(result.get("immediate_target_name")) or extract_run_target(prompt.lower())

        return AutomationIntent(provider=self.provider, **fields)
