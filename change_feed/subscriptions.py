"""
Registry of named change-feed subscriptions.

Keeps at most one active channel per channel key ("pages:<user_id>",
"blocks:<page_id>"). Subscribing again under the same key releases the old
channel first, and teardown_all releases everything at shutdown.

The registry has exactly one owner: the thread that created it. Mutating it
from any other thread raises RuntimeError.

Subscriptions are best effort. A channel that cannot be established is
logged and reported as None; nothing is retried.
"""

import logging
import threading
from typing import Optional, Union

from change_feed.events import ChangeEvent, row_identifier
from change_feed.feed import ALL_EVENTS, Channel, ChangeFeed, ChangeHandler
from change_feed.filters import ChangeFilter

logger = logging.getLogger("change_feed")


def page_channel_key(user_id: str) -> str:
    return f"pages:{user_id}"


def block_channel_key(page_id: str) -> str:
    return f"blocks:{page_id}"


def log_state_sync(context: str, **details) -> None:
    """Log a realtime synchronisation step."""
    logger.info(f"State sync [{context}]: {details}")


class SubscriptionRegistry:
    """
    Map from channel key to the active channel for that key.

    Example usage:
        registry = SubscriptionRegistry(feed)
        registry.subscribe("pages:user-1", on_change, table="pages", filter="user_id=eq.user-1")
        ...
        registry.teardown_all()
    """

    def __init__(self, feed: ChangeFeed):
        self.feed = feed
        self._channels: dict[str, Channel] = {}
        self._owner = threading.get_ident()

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError("SubscriptionRegistry can only be modified by the thread that created it")

    def subscribe(
        self,
        channel_key: str,
        handler: ChangeHandler,
        *,
        table: str,
        filter: Union[str, ChangeFilter, None] = None,
        event: str = ALL_EVENTS,
    ) -> Optional[Channel]:
        """
        Subscribe a handler under a channel key.

        Any existing channel for the key is released first. The handler
        receives the raw ChangeEvent after the changed row's id has been
        logged.

        Returns:
            The new channel, or None if it could not be established
        """
        self._check_owner()
        self.unsubscribe(channel_key)

        def on_change(change: ChangeEvent) -> None:
            log_state_sync(
                f"realtime {change.table} change",
                channel=channel_key,
                event=change.kind.value,
                row_id=row_identifier(change),
                timestamp=change.commit_timestamp.isoformat(),
            )
            handler(change)

        try:
            channel = self.feed.subscribe(
                channel_key,
                table=table,
                filter=filter,
                event=event,
                callback=on_change,
            )
        except Exception as e:
            logger.error(f"Error setting up subscription {channel_key}: {e}")
            return None

        self._channels[channel_key] = channel
        logger.info(f"Subscribed to {channel_key}")
        return channel

    def unsubscribe(self, channel_key: str) -> None:
        """Release the channel for a key. No-op if there is none."""
        self._check_owner()
        channel = self._channels.pop(channel_key, None)
        if channel is None:
            return
        self.feed.remove_channel(channel)
        logger.info(f"Unsubscribed from {channel_key}")

    def teardown_all(self) -> None:
        """Release every tracked channel and empty the registry."""
        self._check_owner()
        channels, self._channels = self._channels, {}
        for channel_key, channel in channels.items():
            self.feed.remove_channel(channel)
            logger.info(f"Cleaned up subscription: {channel_key}")

    def get(self, channel_key: str) -> Optional[Channel]:
        return self._channels.get(channel_key)

    def channel_keys(self) -> list[str]:
        return list(self._channels)

    def __contains__(self, channel_key: str) -> bool:
        return channel_key in self._channels

    def __len__(self) -> int:
        return len(self._channels)
