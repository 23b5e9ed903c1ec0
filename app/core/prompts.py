
from app.core.intents import INTENT_DESCRIPTIONS

# Dynamic parts for Classifier Prompt
intent_descriptions = "\n".join([f"- '{k.value}': {v}" for k, v in INTENT_DESCRIPTIONS.items()])

CLASSIFIER_SYSTEM_PROMPT = f"""You classify automation requests for a workflow platform.
Map the user's request onto exactly one kind:
{intent_descriptions}

RULES:
- Default to 'run_now' only when the user asks to run something or asks for something right now.
- "summarize my gmail EVERY DAY at 9am" = 'schedule' with cron_expression "0 9 * * *" (minute is always 0).
- "what's my latest gmail" = 'run_now' with immediate_target_name "gmail_latest".
- "run sales now" = 'run_now' with immediate_target_name "sales".
- "when a webhook arrives, send it to slack" = 'webhook' with source "webhook" and target "slack".
- action is a verb such as "summarize" or "send"; source/target are services such as "gmail", "slack", "airtable".
- Leave fields you cannot determine as null.

OUTPUT FORMAT:
You MUST return a single valid JSON object. Do not include markdown formatting or explanations.
Example:
{{{{
  "kind": "schedule",
  "action": "summarize",
  "source": "gmail",
  "target": null,
  "cron_expression": "0 9 * * *",
  "immediate_target_name": null,
  "reasoning": "Recurring daily request at 9am."
}}}}
"""

GREETING_MESSAGE = """Hi! I can help you automate things:
• Schedule tasks: 'summarize my gmail every day at 9am'
• React to events: 'when webhook received, send to slack'
• Run something now: 'run gmail_summary now'"""

HELP_MESSAGE = ("I couldn't understand that request. Try: 'summarize my gmail every day at 9am' "
                "or 'when webhook received, send slack message'")

UNSUPPORTED_SCHEDULE_MESSAGE = ("I can only schedule Gmail summaries right now. "
                                "Try: 'summarize my gmail every day at 9am'")

UNSUPPORTED_WEBHOOK_MESSAGE = "I can only forward webhooks to Slack right now. Try: 'when webhook received, send to slack'"

SCHEDULE_HINT = "\n\n💡 Want me to run this daily at 9am? Just say 'summarize my gmail every day at 9am'"

SAMPLE_DATA_NOTE = "\n\n_Note: Using sample data - Windmill script execution pending_"

CONFIGURATION_MISSING_MESSAGE = """❌ **Workflow platform not configured**

Set WINDMILL_TOKEN (or WINDMILL_MCP_URL) so I can create automations.
Also check WINDMILL_HOST and WINDMILL_WORKSPACE."""
