# Oekodata - Slack Notifications
# ==============================
# Operator messages and approve/reject decisions over Slack
"""
Notification gateway for the operator channel.

Delivery is best-effort: a failed post is logged and reported as False,
never raised, so pipeline state transitions do not depend on Slack.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

APPROVE_ACTION_ID = "approve_ingestion"
REJECT_ACTION_ID = "reject_ingestion"
FOOTER_TEXT = "KBOB Ökobilanzdaten - version pipeline"


class NotificationGateway:
    """Delivers operator messages; send() returns whether delivery succeeded."""

    def send(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> bool:
        raise NotImplementedError


class SlackWebhookNotifier(NotificationGateway):
    """Posts messages to a Slack incoming webhook."""

    def __init__(self, webhook_url: Optional[str], timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    def send(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> bool:
        if not self.webhook_url:
            logger.warning("SLACK_WEBHOOK_URL not configured, skipping notification")
            return False

        payload: Dict[str, Any] = {"text": text}
        if blocks:
            payload["blocks"] = blocks

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.webhook_url, json=payload)
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}")
            return False


class LogNotifier(NotificationGateway):
    """Writes messages to the log only; used when no webhook is configured."""

    def send(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> bool:
        logger.info(f"[notification] {text}")
        return True


def build_approval_blocks(version_label: str, publish_date: Optional[str],
                          materials_count: int, preview: List[Dict[str, Any]],
                          url: Optional[str] = None) -> List[Dict[str, Any]]:
    """Slack blocks asking the operator to approve or reject a staged version."""
    preview_text = json.dumps(preview, ensure_ascii=False, indent=2, default=str)
    if len(preview_text) > 500:
        preview_text = preview_text[:500] + "..."

    return [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "New KBOB Version Detected", "emoji": True},
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Version:*\n{version_label}"},
                {"type": "mrkdwn", "text": f"*Date:*\n{publish_date or 'unknown'}"},
                {"type": "mrkdwn", "text": f"*Materials:*\n{materials_count}"},
                {"type": "mrkdwn", "text": f"*Source:*\n{url or '-'}"},
            ],
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Preview:*\n```{preview_text}```"},
        },
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Approve", "emoji": True},
                    "style": "primary",
                    "value": version_label,
                    "action_id": APPROVE_ACTION_ID,
                },
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Reject", "emoji": True},
                    "style": "danger",
                    "value": version_label,
                    "action_id": REJECT_ACTION_ID,
                },
            ],
        },
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": FOOTER_TEXT}],
        },
    ]


@dataclass
class Decision:
    """An operator decision taken from an interactive message."""
    action: str  # approve | reject
    version_label: str
    user: str = "slack"


def parse_interaction_payload(payload: Dict[str, Any]) -> Optional[Decision]:
    """
    Extract the approve/reject decision from a Slack block_actions payload.

    Returns None for interactions that are not one of our buttons.
    """
    if payload.get("type") != "block_actions":
        return None
    actions = payload.get("actions") or []
    if not actions:
        return None

    action = actions[0]
    action_id = action.get("action_id")
    if action_id == APPROVE_ACTION_ID:
        verb = "approve"
    elif action_id == REJECT_ACTION_ID:
        verb = "reject"
    else:
        return None

    user = payload.get("user") or {}
    return Decision(
        action=verb,
        version_label=action.get("value", ""),
        user=user.get("username") or user.get("name") or user.get("id") or "slack",
    )
