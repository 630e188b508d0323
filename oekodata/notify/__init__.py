# Oekodata Notify Module
"""Operator notifications and interactive decisions."""

from .slack import (
    NotificationGateway,
    SlackWebhookNotifier,
    LogNotifier,
    Decision,
    build_approval_blocks,
    parse_interaction_payload,
    APPROVE_ACTION_ID,
    REJECT_ACTION_ID,
)

__all__ = [
    'NotificationGateway',
    'SlackWebhookNotifier',
    'LogNotifier',
    'Decision',
    'build_approval_blocks',
    'parse_interaction_payload',
    'APPROVE_ACTION_ID',
    'REJECT_ACTION_ID',
]
