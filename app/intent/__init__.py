import logging
from typing import Optional

from app.core.settings import AppSettings
from app.intent.base import IntentClassifier
from app.intent.llm import LanguageModelClassifier
from app.intent.rules import RuleBasedClassifier
from app.llm.router import LLMRouter

logger = logging.getLogger(__name__)


def build_classifier(settings: AppSettings, router: Optional[LLMRouter] = None) -> IntentClassifier:
    """
    Picks the classifier once, from configuration: the language-model classifier
    when a provider has credentials, otherwise the rule-based one.
    """
    rules = RuleBasedClassifier()
    if not settings.llm.enabled:
        logger.info("LLM classifier disabled; using heuristic classifier")
        return rules

    router = router or LLMRouter(settings)
    selected = router.get_chat_model()
    if selected is None:
        logger.info("No LLM provider configured; using heuristic classifier")
        return rules

    model, provider = selected
    logger.info(f"Using LLM classifier via {provider}")
    return LanguageModelClassifier(
        model,
        fallback=rules,
        provider=provider,
        timeout_seconds=settings.llm.timeout_seconds
    )


__all__ = ["IntentClassifier", "LanguageModelClassifier", "RuleBasedClassifier", "build_classifier"]
