
import logging
import re
import string
from typing import Optional

from app.core.intents import (
    DEFAULT_RUN_TARGET,
    DEFAULT_SCHEDULE_HOUR,
    GREETINGS,
    SCHEDULE_KEYWORDS,
    WEBHOOK_KEYWORD,
    WEBHOOK_SOURCES,
    IntentKind,
)
from app.intent.base import IntentClassifier
from app.workflow.models import AutomationIntent

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"\bat\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)
RUN_WORD_PATTERN = re.compile(r"\brun\b", re.IGNORECASE)
# TODO: multi-word targets ("run sales report now") are cut to the first token; needs a product decision
RUN_TARGET_PATTERN = re.compile(r"\brun\s+(?:the\s+)?([^\s]+)", re.IGNORECASE)
GREETING_PATTERN = re.compile(r"\b(" + "|".join(GREETINGS) + r")\b", re.IGNORECASE)


def parse_hour(text: str) -> int:
    """
    24-hour clock hour from 'at HH[:MM] [am|pm]'. Minutes are dropped.
    Missing or out-of-range times fall back to 9.
    """
    match = TIME_PATTERN.search(text)
    if not match:
        return DEFAULT_SCHEDULE_HOUR

    hour = int(match.group(1))
    meridiem = (match.group(3) or "").lower()
    if meridiem:
        if not 1 <= hour <= 12:
            return DEFAULT_SCHEDULE_HOUR
        if meridiem == "pm" and hour < 12:
            hour += 12
        if meridiem == "am" and hour == 12:
            hour = 0

    if not 0 <= hour <= 23:
        return DEFAULT_SCHEDULE_HOUR
    return hour


def cron_for_hour(hour: int) -> str:
    return f"0 {hour} * * *"


def extract_run_target(text: str) -> str:
    match = RUN_TARGET_PATTERN.search(text)
    if not match:
        return DEFAULT_RUN_TARGET
    token = match.group(1).lower().strip(string.punctuation)
    # "run now" names no target
    if not token or token == "now":
        return DEFAULT_RUN_TARGET
    return token


def first_mentioned(text: str, candidates) -> Optional[str]:
    """Candidate that appears earliest in the text."""
    positions = [(text.find(c), c) for c in candidates if c in text]
    if not positions:
        return None
    return min(positions)[1]


class RuleBasedClassifier(IntentClassifier):
    """
    Deterministic keyword classifier. Always available and used as the fallback
    of the language-model classifier.
    """

    @property
    def name(self) -> str:
        return "heuristic"

    async def classify(self, prompt: str) -> AutomationIntent:
        return self.classify_text(prompt)

    def classify_text(self, prompt: Optional[str]) -> AutomationIntent:
        try:
            return self._classify(prompt or "")
        except Exception as e:
            logger.error(f"Rule-based classification failed: {e}", exc_info=True)
            return AutomationIntent(kind=IntentKind.UNKNOWN, provider=self.name)

    def _classify(self, prompt: str) -> AutomationIntent:
        lower = prompt.lower().strip()
        fields = {}

        if any(keyword in lower for keyword in SCHEDULE_KEYWORDS):
            fields["kind"] = IntentKind.SCHEDULE
            fields["cron_expression"] = cron_for_hour(parse_hour(lower))
        elif WEBHOOK_KEYWORD in lower:
            fields["kind"] = IntentKind.WEBHOOK
            fields["source"] = first_mentioned(lower, WEBHOOK_SOURCES)
        elif RUN_WORD_PATTERN.search(lower):
            fields["kind"] = IntentKind.RUN_NOW
            fields["immediate_target_name"] = extract_run_target(lower)
        elif GREETING_PATTERN.search(lower):
            fields["kind"] = IntentKind.CHAT
        else:
            fields["kind"] = IntentKind.UNKNOWN

        # Secondary fields pick the script template, whatever the kind
        if "summarize" in lower:
            fields["action"] = "summarize"
            if "gmail" in lower or "email" in lower:
                fields["source"] = "gmail"

        if "send" in lower:
            fields["action"] = "send"
            if "slack" in lower:
                fields["target"] = "slack"

        intent = AutomationIntent(provider=self.name, **fields)
        logger.info(f"Heuristic classification: {intent.kind.value} (action={intent.action}, source={intent.source}, target={intent.target})")
        return intent
