
from typing import Optional, Tuple
from app.core.observability import TraceManager

class Guardrails:
    """
    Basic input checks run before a prompt reaches the classifier.
    """

    # Prompts that try to steer the classifier instead of describing an automation
    BLOCKED_KEYWORDS = ["ignore all instructions", "ignore previous instructions", "system prompt"]

    @staticmethod
    def validate_input(text: Optional[str], max_length: int = 2000) -> Tuple[bool, Optional[str]]:
        """
        Returns: (is_safe, violation_reason)
        """
        if not text or not text.strip():
            return False, "Empty request"

        if len(text) > max_length:
            TraceManager.info("Guardrail blocked input", reason="too_long", length=len(text))
            return False, f"Request is too long ({len(text)} characters, limit {max_length})"

        text_lower = text.lower()
        for keyword in Guardrails.BLOCKED_KEYWORDS:
            if keyword in text_lower:
                TraceManager.info("Guardrail blocked input", keyword=keyword)
                return False, f"Blocked keyword detected: {keyword}"

        return True, None
