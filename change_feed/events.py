"""
Row change events.

A change event records one insert, update or delete on a table. Inserts
carry only the new row, deletes only the old row, updates usually both.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

UNKNOWN_ROW_ID = "unknown"


class ChangeKind(str, Enum):
    """Kinds of row changes."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """
    A change to one row.

    Attributes:
        kind: What happened to the row
        table: Table the row belongs to
        new: Row state after the change (absent for deletes)
        old: Row state before the change (absent for inserts)
        schema: Database schema of the table
    """
    kind: ChangeKind
    table: str
    new: Optional[dict[str, Any]] = None
    old: Optional[dict[str, Any]] = None
    schema: str = "public"
    event_id: str = field(default_factory=lambda: str(uuid4()))
    commit_timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def row_id(self) -> str:
        return row_identifier(self)

    @property
    def row(self) -> Optional[dict[str, Any]]:
        """The most recent known state of the row."""
        return self.new if self.new else self.old

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> "ChangeEvent":
        """
        Build an event from a database webhook body.

        Expected shape: {"type", "table", "schema", "record", "old_record"}

        Raises:
            ValueError: If the type is not a known change kind, the table is
                missing, or a row state is not an object
        """
        kind = ChangeKind(str(payload.get("type", "")).upper())
        table = payload.get("table")
        if not table:
            raise ValueError("Webhook payload has no table")
        for key in ("record", "old_record"):
            state = payload.get(key)
            if state is not None and not isinstance(state, dict):
                raise ValueError(f"Webhook payload {key} must be an object, got {type(state).__name__}")
        return cls(
            kind=kind,
            table=table,
            schema=payload.get("schema") or "public",
            new=payload.get("record"),
            old=payload.get("old_record"),
        )

    def __str__(self) -> str:
        return f"ChangeEvent({self.kind.value} {self.table}, row={self.row_id})"


def _state_id(state: Any) -> Optional[str]:
    if isinstance(state, dict) and state.get("id") is not None:
        return str(state["id"])
    return None


def row_identifier(event: ChangeEvent) -> str:
    """
    Best-effort id of the changed row.

    Prefers the new state's id, falls back to the old state's id, and
    returns "unknown" when neither state carries one.
    """
    return _state_id(event.new) or _state_id(event.old) or UNKNOWN_ROW_ID
