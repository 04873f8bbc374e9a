"""
In-process change feed.

Row changes arrive from the database (through the webhook endpoint) and are
fanned out to every channel subscribed to that table. A channel can narrow
what it receives with a row filter and a change kind.

Design decisions:
- Synchronous delivery in subscription order
- A channel is released exactly once; a released channel receives nothing
- A raising callback is logged and does not stop delivery to other channels
- Recent events are kept for debugging
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union
from uuid import uuid4

from change_feed.events import ChangeEvent, ChangeKind
from change_feed.filters import ChangeFilter

logger = logging.getLogger("change_feed")

# Type alias for change callbacks
ChangeHandler = Callable[[ChangeEvent], None]

ALL_EVENTS = "*"


@dataclass(eq=False)
class Channel:
    """
    Handle for one active subscription.

    Returned by ChangeFeed.subscribe and passed back to remove_channel.
    """
    name: str
    table: str
    callback: ChangeHandler
    filter: Optional[ChangeFilter] = None
    event: str = ALL_EVENTS
    schema: str = "public"
    channel_id: str = field(default_factory=lambda: str(uuid4()))
    active: bool = True

    def accepts(self, event: ChangeEvent) -> bool:
        """True if this channel should receive the event."""
        if not self.active:
            return False
        if event.table != self.table or event.schema != self.schema:
            return False
        if self.event != ALL_EVENTS and event.kind.value != self.event:
            return False
        if self.filter is None:
            return True
        return self.filter.matches(event.new) or self.filter.matches(event.old)

    def __str__(self) -> str:
        scope = f" [{self.filter}]" if self.filter else ""
        return f"Channel({self.name}, {self.event} on {self.schema}.{self.table}{scope})"


class ChangeFeed:
    """
    Pub/sub for row changes.

    Example usage:
        feed = ChangeFeed()

        def on_page_change(event):
            print(f"Page changed: {event.row_id}")

        channel = feed.subscribe(
            "pages:user-1",
            table="pages",
            filter="user_id=eq.user-1",
            callback=on_page_change,
        )
        feed.publish(ChangeEvent(kind=ChangeKind.INSERT, table="pages", new={"id": "p1", "user_id": "user-1"}))
        feed.remove_channel(channel)
    """

    def __init__(self, event_log_size: int = 100):
        self._channels: list[Channel] = []
        self._event_log: list[ChangeEvent] = []
        self._event_log_size = event_log_size

    def subscribe(
        self,
        name: str,
        *,
        table: str,
        callback: ChangeHandler,
        filter: Union[str, ChangeFilter, None] = None,
        event: str = ALL_EVENTS,
        schema: str = "public",
    ) -> Channel:
        """
        Open a channel on a table.

        Args:
            name: Channel name, e.g. "pages:<user_id>"
            table: Table to watch
            callback: Called with every matching ChangeEvent
            filter: Optional row filter, `column=op.value` or a ChangeFilter
            event: "*" or one of INSERT / UPDATE / DELETE
            schema: Database schema

        Raises:
            InvalidFilterError: If the filter string cannot be parsed
            ValueError: If event is not "*" or a change kind
        """
        if isinstance(filter, str):
            filter = ChangeFilter.parse(filter)
        if event != ALL_EVENTS:
            event = ChangeKind(event.upper()).value

        channel = Channel(
            name=name,
            table=table,
            callback=callback,
            filter=filter,
            event=event,
            schema=schema,
        )
        self._channels.append(channel)
        logger.debug(f"Subscribed {channel}")
        return channel

    def remove_channel(self, channel: Channel) -> bool:
        """
        Release a channel.

        Returns:
            True if the channel was active and is now released, False otherwise
        """
        if channel not in self._channels:
            return False
        self._channels.remove(channel)
        channel.active = False
        logger.debug(f"Removed {channel}")
        return True

    def publish(self, event: ChangeEvent) -> int:
        """
        Deliver a change to every matching channel.

        Returns:
            Number of channels that received the event
        """
        self._event_log.append(event)
        del self._event_log[:-self._event_log_size]

        delivered = 0
        for channel in list(self._channels):
            if not channel.accepts(event):
                continue
            delivered += 1
            try:
                channel.callback(event)
            except Exception as e:
                logger.error(f"Callback on {channel.name} raised for {event}: {e}")

        if delivered == 0:
            logger.debug(f"No channels for {event}")
        return delivered

    def get_channel_count(self) -> int:
        return len(self._channels)

    def get_channels(self) -> list[Channel]:
        return self._channels.copy()

    def get_event_log(self) -> list[ChangeEvent]:
        """Recent events, oldest first."""
        return self._event_log.copy()

    def clear_event_log(self) -> None:
        self._event_log.clear()
