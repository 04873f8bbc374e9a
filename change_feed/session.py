"""
Realtime session: the single owner of the subscription registry.

Created when the application starts and closed when it stops. Everything
that wants page or block updates goes through the session.

In the API the session is created inside the lifespan, so its owner is the
event loop thread. Subscribe from async code, or hand the call to the loop
(for example `TestClient.portal.call`). Async endpoints such as the database
webhook publish on that same thread.
"""

import logging
from typing import Optional

from change_feed.feed import Channel, ChangeFeed, ChangeHandler
from change_feed.filters import ChangeFilter
from change_feed.subscriptions import SubscriptionRegistry, block_channel_key, page_channel_key

logger = logging.getLogger("change_feed")


class RealtimeSession:
    """Owns the subscriptions for one running application."""

    def __init__(self, feed: ChangeFeed):
        self.feed = feed
        self.registry = SubscriptionRegistry(feed)
        self.closed = False

    def subscribe_to_page_changes(self, user_id: str, on_change: ChangeHandler) -> Optional[Channel]:
        """Watch every page owned by a user."""
        return self.registry.subscribe(
            page_channel_key(user_id),
            on_change,
            table="pages",
            filter=ChangeFilter.equals("user_id", user_id),
        )

    def unsubscribe_from_page_changes(self, user_id: str) -> None:
        self.registry.unsubscribe(page_channel_key(user_id))

    def subscribe_to_block_changes(self, page_id: str, on_change: ChangeHandler) -> Optional[Channel]:
        """Watch every block on a page."""
        return self.registry.subscribe(
            block_channel_key(page_id),
            on_change,
            table="blocks",
            filter=ChangeFilter.equals("page_id", page_id),
        )

    def unsubscribe_from_block_changes(self, page_id: str) -> None:
        self.registry.unsubscribe(block_channel_key(page_id))

    def close(self) -> None:
        """Release all subscriptions. Safe to call more than once."""
        if self.closed:
            return
        count = len(self.registry)
        self.registry.teardown_all()
        self.closed = True
        logger.info(f"Realtime session closed ({count} subscriptions released)")

    def __enter__(self) -> "RealtimeSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
