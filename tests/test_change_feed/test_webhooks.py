"""
Tests for database webhook ingestion.
"""

from change_feed.feed import ChangeFeed
from change_feed.webhooks import handle_webhook_event


class TestHandleWebhookEvent:
    def test_insert_is_published(self, feed: ChangeFeed):
        received = []
        feed.subscribe("blocks:p1", table="blocks", filter="page_id=eq.p1", callback=received.append)

        delivered = handle_webhook_event({
            "type": "INSERT",
            "table": "blocks",
            "schema": "public",
            "record": {"id": "b1", "page_id": "p1"},
            "old_record": None,
        }, feed)

        assert delivered == 1
        assert received[0].row_id == "b1"

    def test_delete_is_published(self, feed: ChangeFeed):
        received = []
        feed.subscribe("pages", table="pages", callback=received.append)

        handle_webhook_event({"type": "DELETE", "table": "pages", "old_record": {"id": "p1"}}, feed)

        assert received[0].row_id == "p1"

    def test_unknown_type_is_ignored(self, feed: ChangeFeed, caplog):
        with caplog.at_level("WARNING", logger="change_feed"):
            delivered = handle_webhook_event({"type": "TRUNCATE", "table": "pages"}, feed)

        assert delivered == 0
        assert feed.get_event_log() == []
        assert any("Unknown webhook event" in r.getMessage() for r in caplog.records)

    def test_malformed_payload_is_ignored(self, feed: ChangeFeed):
        assert handle_webhook_event({"type": "UPDATE", "record": {"id": "x"}}, feed) == 0
        assert feed.get_event_log() == []

    def test_non_object_record_is_ignored(self, feed: ChangeFeed, caplog):
        received = []
        feed.subscribe("pages:u1", table="pages", filter="user_id=eq.u1", callback=received.append)

        with caplog.at_level("ERROR", logger="change_feed"):
            delivered = handle_webhook_event({"type": "INSERT", "table": "pages", "record": "user_id"}, feed)

        assert delivered == 0
        assert received == []
        assert feed.get_event_log() == []
        assert any("record must be an object" in r.getMessage() for r in caplog.records)

    def test_no_subscribers(self, feed: ChangeFeed):
        delivered = handle_webhook_event({"type": "UPDATE", "table": "pages", "record": {"id": "p1"}}, feed)

        assert delivered == 0
        assert len(feed.get_event_log()) == 1
