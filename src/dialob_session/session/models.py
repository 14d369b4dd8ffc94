"""Pydantic models for session state and actions.

Defines the data contracts shared by the reducer, the sync coordinator and
the transport:

- ``ActionType``: Enum of the action tags the reducer understands.
- ``Action``: One tagged state transition, as sent to / received from the
  server.
- ``Item``: One node of the session item tree.
- ``ValueSet`` / ``ValueSetEntry``: Enumerations referenced by answers.
- ``ErrorRecord``: A server-reported error attached to the state.
- ``SessionState``: The immutable snapshot of the whole session.

All models are frozen (immutable).  Transitions build new snapshots, they
never modify an existing one.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

CONTAINER_TYPES = frozenset({"questionnaire", "group", "surveygroup"})
NON_ANSWERABLE_TYPES = CONTAINER_TYPES | {"note"}


class ActionType(str, Enum):
    """Action tags handled by the reducer."""

    RESET = "RESET"
    ANSWER = "ANSWER"
    ITEM = "ITEM"
    ERROR = "ERROR"
    LOCALE = "LOCALE"
    VALUE_SET = "VALUE_SET"
    REMOVE_ITEMS = "REMOVE_ITEMS"
    COMPLETE = "COMPLETE"
    NEXT = "NEXT"
    PREVIOUS = "PREVIOUS"


class Item(BaseModel):
    """A single session item.

    Attributes:
        id: Item identifier, unique within the session.
        type: Item kind (``questionnaire``, ``group``, ``text``, ...).
        items: Ordered child identifiers for container kinds.
        value: Current answer for answerable kinds.

    Any other field the server sends (label, required, ...) is kept as-is.
    """

    id: str
    type: str
    items: tuple[str, ...] | None = None
    value: Any = None

    model_config = {"frozen": True, "extra": "allow"}

    @property
    def children(self) -> tuple[str, ...]:
        """Child identifiers, empty for leaf items."""
        return self.items or ()

    @property
    def is_answerable(self) -> bool:
        return self.type not in NON_ANSWERABLE_TYPES


class ValueSetEntry(BaseModel):
    key: str
    value: Any = None

    model_config = {"frozen": True, "extra": "allow"}


class ValueSet(BaseModel):
    """A named enumeration referenced by list and multichoice answers."""

    id: str
    entries: list[ValueSetEntry] = []

    model_config = {"frozen": True, "extra": "allow"}


class ErrorRecord(BaseModel):
    """Server-reported error, e.g. a failed validation rule.

    Attributes:
        id: Identifier of the item the error refers to, if any.
        code: Machine-readable error code.
        description: Human-readable message.
    """

    id: str | None = None
    code: str | None = None
    description: str | None = None

    model_config = {"frozen": True, "extra": "allow"}


class Action(BaseModel):
    """One tagged state transition.

    ``type`` is kept as a plain string so that tags unknown to this client
    still parse and reach the reducer, which reports them as client errors.
    Only the payload fields relevant to ``type`` are set.
    """

    type: str
    id: str | None = None
    answer: Any = None
    item: Item | None = None
    error: ErrorRecord | None = None
    value: str | None = None
    value_set: ValueSet | None = Field(default=None, alias="valueSet")
    ids: list[str] | None = None

    model_config = {"frozen": True, "populate_by_name": True}

    @classmethod
    def reset(cls) -> Action:
        return cls(type=ActionType.RESET.value)

    @classmethod
    def answer_to(cls, item_id: str, answer: Any) -> Action:
        return cls(type=ActionType.ANSWER.value, id=item_id, answer=answer)

    @classmethod
    def upsert_item(cls, item: Item) -> Action:
        return cls(type=ActionType.ITEM.value, item=item)

    @classmethod
    def error_record(cls, error: ErrorRecord) -> Action:
        return cls(type=ActionType.ERROR.value, error=error)

    @classmethod
    def set_locale(cls, value: str) -> Action:
        return cls(type=ActionType.LOCALE.value, value=value)

    @classmethod
    def set_value_set(cls, value_set: ValueSet) -> Action:
        return cls(type=ActionType.VALUE_SET.value, value_set=value_set)

    @classmethod
    def remove_items(cls, ids: list[str]) -> Action:
        return cls(type=ActionType.REMOVE_ITEMS.value, ids=list(ids))

    @classmethod
    def complete(cls) -> Action:
        return cls(type=ActionType.COMPLETE.value)

    @classmethod
    def next(cls) -> Action:
        return cls(type=ActionType.NEXT.value)

    @classmethod
    def previous(cls) -> Action:
        return cls(type=ActionType.PREVIOUS.value)

    def to_wire(self) -> dict[str, Any]:
        """Serialise for the transport, using wire names and dropping
        payload fields that were never set."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=True
        )


class SessionState(BaseModel):
    """Immutable snapshot of the client-visible session state.

    Attributes:
        items: Item id to item.
        reverse_item_map: Child id to the ids of the items listing it as a
            child.  Always the exact inverse of ``items[*].items``.
        value_sets: Value set id to value set.
        errors: Server-reported errors, in arrival order.
        locale: Active locale, if the server announced one.
        rev: Last revision confirmed by the server.
        complete: Whether the session has been marked complete.
    """

    items: dict[str, Item] = {}
    reverse_item_map: dict[str, frozenset[str]] = {}
    value_sets: dict[str, ValueSet] = {}
    errors: tuple[ErrorRecord, ...] = ()
    locale: str | None = None
    rev: int = 0
    complete: bool = False

    model_config = {"frozen": True}
