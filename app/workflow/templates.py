
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

# Scripts are deployed to the Workflow Platform as TypeScript (Deno/Bun runtime).
# Third-party calls are mocked or read from platform resources ($res:...).

GMAIL_SUMMARY_SCRIPT = """
import * as wmill from "windmill-client"

type Gmail = {
  token: string
  refresh_token?: string
}

export async function main(
  gmail: Gmail
) {
  const response = await fetch('https://gmail.googleapis.com/gmail/v1/users/me/messages?maxResults=10&q=is:unread', {
    headers: {
      'Authorization': `Bearer ${gmail.token}`
    }
  })

  if (!response.ok) {
    throw new Error(`Gmail API error: ${response.status}`)
  }

  const data = await response.json()
  const messages = data.messages || []

  const summaries = await Promise.all(
    messages.slice(0, 5).map(async (msg) => {
      const detailRes = await fetch(`https://gmail.googleapis.com/gmail/v1/users/me/messages/${msg.id}`, {
        headers: {
          'Authorization': `Bearer ${gmail.token}`
        }
      })

      if (!detailRes.ok) return null

      const detail = await detailRes.json()
      const headers = detail.payload?.headers || []
      const subject = headers.find(h => h.name === 'Subject')?.value || 'No subject'
      const from = headers.find(h => h.name === 'From')?.value || 'Unknown'

      return `• ${subject} (from ${from})`
    })
  )

  return {
    summary: `Unread emails:\\n${summaries.filter(Boolean).join('\\n')}`,
    count: messages.length,
    hasMore: messages.length > 5
  }
}
"""

SLACK_NOTIFY_SCRIPT = """
import * as wmill from "windmill-client"

type Slack = {
  token: string
}

export async function main(
  message: string,
  channel: string = "#general",
  slack: Slack
) {
  const response = await fetch('https://slack.com/api/chat.postMessage', {
    method: 'POST',
    headers: {
      'Authorization': `Bearer ${slack.token}`,
      'Content-Type': 'application/json'
    },
    body: JSON.stringify({
      channel: channel,
      text: message
    })
  })

  if (!response.ok) {
    throw new Error(`Slack API error: ${response.status}`)
  }

  const result = await response.json()

  if (!result.ok) {
    throw new Error(`Slack error: ${result.error}`)
  }

  return {
    success: true,
    channel: result.channel,
    ts: result.ts,
    message: message
  }
}
"""

WEBHOOK_TRIGGER_SCRIPT = "export async function main(webhook_body: any) { return webhook_body }"

WEBHOOK_MESSAGE_EXPR = 'flow_input.webhook_body.message || "New webhook received"'

INSTANT_GMAIL_SUMMARY_SCRIPT = """
export async function main(since_minutes: number = 60) {
  // Sample data until a Gmail resource is connected
  const emails = [
    "📧 Q4 Budget Review from Sarah - Needs your approval by EOD",
    "✅ PR #234 approved - Ready to merge dark mode feature",
    "💬 3 Slack messages in #engineering about deployment success"
  ]

  const summary = "📨 Email Summary (last " + since_minutes + " minutes):\\n\\n" +
    emails.map((e, i) => (i+1) + ". " + e).join("\\n") +
    "\\n\\n📊 Total: " + emails.length + " emails"

  return {
    summary,
    count: emails.length,
    urgent: 1
  }
}
"""

INSTANT_GMAIL_LATEST_SCRIPT = """
export async function main(max_count: number = 3) {
  // Sample data until a Gmail resource is connected
  const emails = [
    {
      from: "sarah@company.com",
      subject: "Q4 Budget Review - Action Required",
      snippet: "Hi team, Please review the attached Q4 budget proposal...",
      received: "10 minutes ago"
    },
    {
      from: "github-noreply@github.com",
      subject: "[PR #234] Feature: Add dark mode support",
      snippet: "Your pull request has been approved and is ready to merge...",
      received: "25 minutes ago"
    },
    {
      from: "notifications@slack.com",
      subject: "3 new messages in #engineering",
      snippet: "John: The deployment succeeded. Sarah: Great work everyone!...",
      received: "1 hour ago"
    }
  ]

  return emails.slice(0, max_count)
}
"""

GENERIC_INSTANT_SCRIPT = """
export async function main(since_minutes: number = 60, max_count: number = 3) {
  return {
    summary: "Ran __NAME__ (no integration connected yet)",
    count: 0
  }
}
"""


@dataclass(frozen=True)
class ScheduledAutomation:
    """A recurring automation: one script wrapped in a one-step flow plus a schedule."""
    script_name: str
    flow_name: str
    content: str
    script_description: str
    flow_summary: str
    label: str
    input_transforms: Tuple[Tuple[str, Dict[str, Any]], ...] = ()


@dataclass(frozen=True)
class Notifier:
    """Target-specific script called by a webhook-triggered flow."""
    script_name: str
    content: str
    description: str
    label: str
    static_inputs: Tuple[Tuple[str, Any], ...] = ()


# Keyed by (action, source)
SCHEDULED_AUTOMATIONS = {
    ("summarize", "gmail"): ScheduledAutomation(
        script_name="gmail_summary",
        flow_name="gmail_daily_summary",
        content=GMAIL_SUMMARY_SCRIPT,
        script_description="Fetch and summarize Gmail emails",
        flow_summary="Gmail Daily Summary",
        label="Gmail summary",
        input_transforms=(("gmail", {"type": "static", "value": "$res:u/user/gmail"}),),
    ),
}

# Keyed by target
NOTIFIERS = {
    "slack": Notifier(
        script_name="slack_notify",
        content=SLACK_NOTIFY_SCRIPT,
        description="Send Slack notification",
        label="Slack",
        static_inputs=(("channel", "#general"), ("slack", "$res:u/user/slack")),
    ),
}

DEFAULT_NOTIFY_TARGET = "slack"
DEFAULT_WEBHOOK_SOURCE = "webhook"


def instant_script_for(name: str) -> Tuple[str, str]:
    """Returns (content, description) for a run-now script."""
    if name == "gmail_summary":
        return INSTANT_GMAIL_SUMMARY_SCRIPT, "Instant gmail_summary"
    if name == "gmail_latest":
        return INSTANT_GMAIL_LATEST_SCRIPT, "Instant gmail_latest"
    return GENERIC_INSTANT_SCRIPT.replace("__NAME__", name), f"Instant {name}"


# Shown when an immediate run cannot be completed in time
SAMPLE_RESULTS: Dict[str, Any] = {
    "gmail_latest": [
        {
            "from": "team@company.com",
            "subject": "Weekly standup notes",
            "snippet": "Here are this week's updates...",
            "received": "just now",
        }
    ],
    "default": {
        "summary": "📨 Email Summary\n\n1. Meeting invite from Sarah\n2. GitHub notifications (3)\n3. Slack digest",
        "count": 3,
        "urgent": 1,
    },
}


def sample_result_for(name: Optional[str]) -> Any:
    return SAMPLE_RESULTS.get(name or "", SAMPLE_RESULTS["default"])
