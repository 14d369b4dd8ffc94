"""Pure action reducer for session state.

``reduce(state, actions, rev)`` folds an ordered batch of actions into a new
``SessionState``.  It performs no I/O and fires no events: the owning
``Session`` swaps the result in and notifies listeners once per batch, so a
reader only ever sees the snapshot from before or after a whole batch.

Copy-on-write
-------------
The reducer works on a ``_Draft`` that starts out sharing the input
snapshot's dicts.  The first write to a dict copies it; items are frozen
models and are replaced through ``model_copy``.  The input snapshot, and
anything a reader still holds from it, is never modified.

Error policy
------------
An action that violates a local invariant (unknown tag, answer on a missing
or non-answerable item) is skipped and its ``ClientError`` collected in
``ReduceResult.errors``.  The remaining actions of the batch still apply.
A skipped action leaves no partial effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from ..errors import ClientError
from .models import (
    Action,
    ActionType,
    ErrorRecord,
    Item,
    SessionState,
    ValueSet,
)

logger = logging.getLogger(__name__)


@dataclass
class ReduceResult:
    """Outcome of reducing one batch.

    Attributes:
        state: The new snapshot.
        errors: Client errors for the actions that were skipped.
    """

    state: SessionState
    errors: list[ClientError] = field(default_factory=list)


class _Draft:
    """Mutable working copy of a snapshot, used only inside ``reduce``."""

    def __init__(self, state: SessionState) -> None:
        self.items = state.items
        self.reverse_item_map = state.reverse_item_map
        self.value_sets = state.value_sets
        self.errors = state.errors
        self.locale = state.locale
        self.rev = state.rev
        self.complete = state.complete
        self._owned: set[str] = set()

    def _own(self, name: str) -> dict:
        """Return a private copy of dict attribute *name* for writing."""
        if name not in self._owned:
            setattr(self, name, dict(getattr(self, name)))
            self._owned.add(name)
        return getattr(self, name)

    def set_item(self, item: Item) -> None:
        self._own("items")[item.id] = item

    def pop_item(self, item_id: str) -> Item | None:
        if item_id not in self.items:
            return None
        return self._own("items").pop(item_id)

    def add_parent(self, child_id: str, parent_id: str) -> None:
        parents = self.reverse_item_map.get(child_id, frozenset())
        if parent_id not in parents:
            self._own("reverse_item_map")[child_id] = parents | {parent_id}

    def discard_parent(self, child_id: str, parent_id: str) -> None:
        parents = self.reverse_item_map.get(child_id)
        if parents is None or parent_id not in parents:
            return
        remaining = parents - {parent_id}
        reverse = self._own("reverse_item_map")
        if remaining:
            reverse[child_id] = remaining
        else:
            del reverse[child_id]

    def pop_parents(self, child_id: str) -> frozenset[str]:
        if child_id not in self.reverse_item_map:
            return frozenset()
        return self._own("reverse_item_map").pop(child_id)

    def freeze(self) -> SessionState:
        return SessionState(
            items=self.items,
            reverse_item_map=self.reverse_item_map,
            value_sets=self.value_sets,
            errors=self.errors,
            locale=self.locale,
            rev=self.rev,
            complete=self.complete,
        )


# ---------------------------------------------------------------------------
# Action handlers
# ---------------------------------------------------------------------------


def _reset(draft: _Draft, action: Action) -> None:
    draft.items = {}
    draft.reverse_item_map = {}
    draft.value_sets = {}
    draft.errors = ()
    draft.locale = None
    draft.complete = False
    draft._owned.update(("items", "reverse_item_map", "value_sets"))


def _answer(draft: _Draft, action: Action) -> None:
    item = draft.items.get(action.id) if action.id is not None else None
    if item is None:
        raise ClientError(f"No item found with id '{action.id}'")
    if not item.is_answerable:
        raise ClientError(f"Item '{action.id}' is not an answer")
    draft.set_item(item.model_copy(update={"value": action.answer}))


def _item(draft: _Draft, action: Action) -> None:
    item = action.item
    if item is None:
        raise ClientError("ITEM action carries no item")

    previous = draft.items.get(item.id)
    old_children = set(previous.children) if previous else set()
    new_children = set(item.children)

    draft.set_item(item)
    for child_id in old_children - new_children:
        draft.discard_parent(child_id, item.id)
    for child_id in item.children:
        draft.add_parent(child_id, item.id)


def _error(draft: _Draft, action: Action) -> None:
    error = action.error if action.error is not None else ErrorRecord()
    draft.errors = draft.errors + (error,)


def _locale(draft: _Draft, action: Action) -> None:
    draft.locale = action.value


def _value_set(draft: _Draft, action: Action) -> None:
    value_set: ValueSet | None = action.value_set
    if value_set is None:
        raise ClientError("VALUE_SET action carries no value set")
    draft._own("value_sets")[value_set.id] = value_set


def _remove_items(draft: _Draft, action: Action) -> None:
    for item_id in action.ids or ():
        removed = draft.pop_item(item_id)

        for parent_id in draft.pop_parents(item_id):
            parent = draft.items.get(parent_id)
            if parent is None or parent.items is None:
                continue
            if item_id not in parent.items:
                continue
            children = list(parent.items)
            children.remove(item_id)
            draft.set_item(
                parent.model_copy(update={"items": tuple(children)})
            )

        if removed is not None:
            for child_id in removed.children:
                draft.discard_parent(child_id, item_id)


def _complete(draft: _Draft, action: Action) -> None:
    draft.complete = True


def _navigate(draft: _Draft, action: Action) -> None:
    # Navigation is resolved server-side.
    pass


_HANDLERS: dict[str, Callable[[_Draft, Action], None]] = {
    ActionType.RESET.value: _reset,
    ActionType.ANSWER.value: _answer,
    ActionType.ITEM.value: _item,
    ActionType.ERROR.value: _error,
    ActionType.LOCALE.value: _locale,
    ActionType.VALUE_SET.value: _value_set,
    ActionType.REMOVE_ITEMS.value: _remove_items,
    ActionType.COMPLETE.value: _complete,
    ActionType.NEXT.value: _navigate,
    ActionType.PREVIOUS.value: _navigate,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def reduce(
    state: SessionState,
    actions: Iterable[Action],
    rev: int | None = None,
) -> ReduceResult:
    """Apply *actions* in order to *state* as one atomic transition.

    Args:
        state: The current snapshot.  Never modified.
        actions: Ordered batch of actions.
        rev: Authoritative revision for the result.  When given it is set
            before any action runs, so it sticks even if some actions fail.

    Returns:
        ``ReduceResult`` with the new snapshot and the client errors of the
        skipped actions.
    """
    draft = _Draft(state)
    if rev is not None:
        draft.rev = rev

    errors: list[ClientError] = []
    for action in actions:
        handler = _HANDLERS.get(action.type)
        try:
            if handler is None:
                raise ClientError(
                    f"Unexpected action type '{action.type}'"
                )
            handler(draft, action)
        except ClientError as exc:
            logger.debug("Skipping %s action: %s", action.type, exc)
            errors.append(exc)

    return ReduceResult(state=draft.freeze(), errors=errors)


def empty_state() -> SessionState:
    """The snapshot of a freshly constructed session."""
    return SessionState()
