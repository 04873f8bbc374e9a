"""
Row filters in the backend's change-feed syntax: `column=op.value`.

Supported operators:
    eq   user_id=eq.42
    neq  status=neq.archived
    in   page_id=in.(a,b,c)

Values are compared as strings, the same way they appear in the filter.
"""

from dataclasses import dataclass
from typing import Any, Optional

OPERATORS = ("eq", "neq", "in")


class InvalidFilterError(ValueError):
    """The filter string is not `column=op.value`."""


@dataclass(frozen=True)
class ChangeFilter:
    column: str
    operator: str
    values: tuple[str, ...]

    @classmethod
    def parse(cls, expression: str) -> "ChangeFilter":
        column, sep, rest = expression.partition("=")
        operator, dot, value = rest.partition(".")
        if not sep or not dot or not column or operator not in OPERATORS:
            raise InvalidFilterError(f"Invalid filter: {expression!r}")

        if operator == "in":
            if not (value.startswith("(") and value.endswith(")")):
                raise InvalidFilterError(f"'in' filter needs a parenthesised list: {expression!r}")
            values = tuple(v.strip() for v in value[1:-1].split(",") if v.strip())
        else:
            values = (value,)
        return cls(column=column.strip(), operator=operator, values=values)

    @classmethod
    def equals(cls, column: str, value: Any) -> "ChangeFilter":
        return cls(column=column, operator="eq", values=(str(value),))

    def matches(self, row: Optional[dict[str, Any]]) -> bool:
        if not isinstance(row, dict) or self.column not in row:
            return False
        actual = str(row[self.column])
        if self.operator == "neq":
            return actual != self.values[0]
        return actual in self.values

    def __str__(self) -> str:
        if self.operator == "in":
            return f"{self.column}=in.({','.join(self.values)})"
        return f"{self.column}={self.operator}.{self.values[0]}"
