"""
Realtime change feed.

- Row change events and filters
- The in-process feed that fans changes out to channels
- The subscription registry and the session that owns it
- Database webhook ingestion
"""

from change_feed.events import ChangeEvent, ChangeKind, row_identifier
from change_feed.filters import ChangeFilter, InvalidFilterError
from change_feed.feed import Channel, ChangeFeed
from change_feed.subscriptions import SubscriptionRegistry, block_channel_key, page_channel_key
from change_feed.session import RealtimeSession
from change_feed.webhooks import handle_webhook_event

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "row_identifier",
    "ChangeFilter",
    "InvalidFilterError",
    "Channel",
    "ChangeFeed",
    "SubscriptionRegistry",
    "block_channel_key",
    "page_channel_key",
    "RealtimeSession",
    "handle_webhook_event",
]
