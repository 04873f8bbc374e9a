"""
Tests for change events and row id extraction.
"""

import pytest

from change_feed.events import ChangeEvent, ChangeKind, UNKNOWN_ROW_ID, row_identifier


class TestRowIdentifier:
    """row_identifier prefers the new state, then the old state."""

    def test_new_state_only(self):
        event = ChangeEvent(kind=ChangeKind.INSERT, table="pages", new={"id": "x"})

        assert row_identifier(event) == "x"

    def test_old_state_only(self):
        event = ChangeEvent(kind=ChangeKind.DELETE, table="pages", old={"id": "y"})

        assert row_identifier(event) == "y"

    def test_neither_state(self):
        event = ChangeEvent(kind=ChangeKind.UPDATE, table="pages")

        assert row_identifier(event) == UNKNOWN_ROW_ID == "unknown"

    def test_prefers_new_over_old(self):
        event = ChangeEvent(kind=ChangeKind.UPDATE, table="pages", new={"id": "n"}, old={"id": "o"})

        assert row_identifier(event) == "n"

    def test_states_without_id(self):
        event = ChangeEvent(kind=ChangeKind.UPDATE, table="pages", new={"title": "t"}, old={})

        assert row_identifier(event) == "unknown"

    def test_non_dict_state_is_ignored(self):
        event = ChangeEvent(kind=ChangeKind.UPDATE, table="pages", new="garbage", old={"id": 7})

        assert row_identifier(event) == "7"
        assert event.row_id == "7"


class TestFromWebhookPayload:
    """Tests for building events from database webhook bodies."""

    def test_insert(self):
        event = ChangeEvent.from_webhook_payload({
            "type": "INSERT",
            "table": "blocks",
            "schema": "public",
            "record": {"id": "b1", "page_id": "p1"},
            "old_record": None,
        })

        assert event.kind == ChangeKind.INSERT
        assert event.table == "blocks"
        assert event.new == {"id": "b1", "page_id": "p1"}
        assert event.old is None
        assert event.row == {"id": "b1", "page_id": "p1"}

    def test_delete_uses_old_record(self):
        event = ChangeEvent.from_webhook_payload({
            "type": "delete",
            "table": "pages",
            "record": None,
            "old_record": {"id": "p9"},
        })

        assert event.kind == ChangeKind.DELETE
        assert event.schema == "public"
        assert event.row == {"id": "p9"}

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            ChangeEvent.from_webhook_payload({"type": "TRUNCATE", "table": "pages"})

    def test_missing_table(self):
        with pytest.raises(ValueError):
            ChangeEvent.from_webhook_payload({"type": "INSERT", "record": {"id": "x"}})

    @pytest.mark.parametrize("key, state", [
        ("record", "user_id"),
        ("record", ["p1"]),
        ("old_record", 42),
    ])
    def test_row_state_must_be_an_object(self, key, state):
        with pytest.raises(ValueError, match=key):
            ChangeEvent.from_webhook_payload({"type": "UPDATE", "table": "pages", key: state})


def test_event_str():
    event = ChangeEvent(kind=ChangeKind.INSERT, table="pages", new={"id": "p1"})

    assert str(event) == "ChangeEvent(INSERT pages, row=p1)"
