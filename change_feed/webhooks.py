"""
Database webhook ingestion.

The hosted database posts a JSON body for every row change:

    {"type": "INSERT" | "UPDATE" | "DELETE", "table": "...", "schema": "...",
     "record": {...} | null, "old_record": {...} | null}

Each body is logged and published into the change feed.
"""

import logging
from typing import Any

from change_feed.events import ChangeEvent, ChangeKind
from change_feed.feed import ChangeFeed
from change_feed.subscriptions import log_state_sync

logger = logging.getLogger("change_feed")


def handle_webhook_event(payload: dict[str, Any], feed: ChangeFeed) -> int:
    """
    Log a webhook body and publish it as a ChangeEvent.

    Returns:
        Number of channels that received the change (0 for unknown or
        malformed payloads)
    """
    event_type = str(payload.get("type", "")).upper()
    log_state_sync("webhook event received", type=event_type, table=payload.get("table"))

    if event_type == ChangeKind.INSERT.value:
        logger.info(f"New record created: {payload.get('record')}")
    elif event_type == ChangeKind.UPDATE.value:
        logger.info(f"Record updated: {payload.get('record')}")
    elif event_type == ChangeKind.DELETE.value:
        logger.info(f"Record deleted: {payload.get('old_record')}")
    else:
        logger.warning(f"Unknown webhook event: {payload}")
        return 0

    try:
        event = ChangeEvent.from_webhook_payload(payload)
    except ValueError as e:
        logger.error(f"Error handling webhook event: {e}")
        return 0

    return feed.publish(event)
