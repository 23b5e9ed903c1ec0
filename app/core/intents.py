
from enum import Enum


class IntentKind(str, Enum):
    SCHEDULE = "schedule"
    WEBHOOK = "webhook"
    RUN_NOW = "run_now"
    CHAT = "chat"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value) -> "IntentKind":
        """Maps any raw value (e.g. LLM output) onto one of the five kinds."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
        for kind in cls:
            if kind.value == normalized:
                return kind
        return cls.UNKNOWN


# Intent Metadata for LLM System Prompt
INTENT_DESCRIPTIONS = {
    IntentKind.SCHEDULE: "Recurring automation (daily, every day, every hour, at a time, scheduled)",
    IntentKind.WEBHOOK: "Event-triggered automation: 'when X happens, do Y'",
    IntentKind.RUN_NOW: "Run something immediately, e.g. 'run gmail_summary now' or 'what's my latest gmail'",
    IntentKind.CHAT: "Greetings or small talk",
    IntentKind.UNKNOWN: "Anything that is not an automation request",
}

# Rule-based keyword tables
SCHEDULE_KEYWORDS = ["every day", "daily", "every hour", "schedule"]
WEBHOOK_KEYWORD = "when"
WEBHOOK_SOURCES = ["airtable", "slack", "gmail", "webhook"]
GREETINGS = ["hi", "hello", "hey"]

DEFAULT_SCHEDULE_HOUR = 9
DEFAULT_RUN_TARGET = "gmail_summary"

# Service names as the LLM may spell them, mapped onto template keys
SERVICE_ALIASES = {
    "email": "gmail",
    "e-mail": "gmail",
    "mail": "gmail",
    "google mail": "gmail",
    "inbox": "gmail",
    "slack channel": "slack",
}
