"""
Ordered entry/exit condition rows.

Each row has a subject selector, an operator, and two value sites: a literal
number input and a value-indicator selector. ``value_kind`` picks which of the
two is rendered. The first row never carries a connective; every later row
does.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

# Forwarded verbatim into the prompt, never evaluated.
OPERATORS = (">", "<", ">=", "<=", "==", "crosses above", "crosses below")

EDITABLE_FIELDS = ("subject", "operator", "value_kind", "value", "value_ref", "connective")


class ValueKind(str, Enum):
    LITERAL = "literal"
    INDICATOR = "indicator"


class Connective(str, Enum):
    AND = "AND"
    OR = "OR"


class ConditionListKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class Condition(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    subject: str = "Price_Close"
    operator: str = ">"
    value_kind: ValueKind = ValueKind.LITERAL
    value: float = 0
    value_ref: Optional[str] = None
    connective: Optional[Connective] = None

    @field_validator("operator")
    @classmethod
    def _check_operator(cls, value: str) -> str:
        if value not in OPERATORS:
            raise ValueError(f"operator must be one of: {list(OPERATORS)}")
        return value


class ConditionList:
    def __init__(self, kind: Union[ConditionListKind, str] = ConditionListKind.ENTRY):
        self.kind = ConditionListKind(kind)
        self._rows: List[Condition] = []

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Condition]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> Condition:
        return self._rows[index]

    def add(self, condition: Optional[Condition] = None, after_index: Optional[int] = None) -> int:
        """
        Insert a row after ``after_index`` (append when omitted; ``-1`` inserts
        at the front). Returns the position of the new row.
        """
        if after_index is None:
            position = len(self._rows)
        else:
            position = min(max(after_index + 1, 0), len(self._rows))
        self._rows.insert(position, condition or Condition())
        self._normalize_connectives()
        return position

    def remove(self, index: int) -> None:
        if 0 <= index < len(self._rows):
            del self._rows[index]
            self._normalize_connectives()

    def require_index(self, index: int) -> None:
        if not 0 <= index < len(self._rows):
            raise IndexError(f"condition index {index} out of range")

    def set_connective(self, index: int, connective: Optional[Union[Connective, str]]) -> None:
        self.require_index(index)
        if index == 0:
            if connective is not None:
                raise ValueError("the first condition cannot carry a connective")
            return
        if connective is None:
            raise ValueError(f"condition {index} requires a connective")
        self._rows[index].connective = Connective(connective.upper())

    def _normalize_connectives(self) -> None:
        for position, row in enumerate(self._rows):
            if position == 0:
                row.connective = None
            elif row.connective is None:
                row.connective = Connective.AND
