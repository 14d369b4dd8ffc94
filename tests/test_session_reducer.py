"""Tests for the pure session reducer.

Covers:
- The group/text walkthrough: ITEM, ANSWER, REMOVE_ITEMS
- Reverse map equals the inverse of the containment graph
- ITEM upserts reconcile reverse edges when children change
- RESET shape and rev handling
- ANSWER failures (missing item, container, note) leave state untouched
- Skip-and-continue policy for bad actions inside a batch
- REMOVE_ITEMS idempotency and same-batch parent/child removal
- Input snapshots are never modified
"""

from __future__ import annotations

import pytest

from dialob_session.errors import ClientError
from dialob_session.session.models import (
    Action,
    ErrorRecord,
    Item,
    SessionState,
    ValueSet,
    ValueSetEntry,
)
from dialob_session.session.reducer import empty_state, reduce


def inverse_of_items(state: SessionState) -> dict[str, frozenset[str]]:
    """Recompute the reverse map from the forward edges."""
    expected: dict[str, set[str]] = {}
    for parent_id, item in state.items.items():
        for child_id in item.children:
            expected.setdefault(child_id, set()).add(parent_id)
    return {k: frozenset(v) for k, v in expected.items()}


def apply(state: SessionState, *actions: Action, rev=None) -> SessionState:
    result = reduce(state, list(actions), rev)
    assert result.errors == []
    return result.state


# ---------------------------------------------------------------------------
# Walkthrough
# ---------------------------------------------------------------------------


class TestWalkthrough:
    """Group with one text answer, answered then removed."""

    def test_item_answer_remove(self):
        state = empty_state()
        assert state.rev == 0

        state = apply(
            state,
            Action.upsert_item(Item(id="q1", type="group", items=("a1",))),
            Action.upsert_item(Item(id="a1", type="text", value=None)),
        )
        assert state.reverse_item_map["a1"] == {"q1"}

        state = apply(state, Action.answer_to("a1", "hello"))
        assert state.items["a1"].value == "hello"

        state = apply(state, Action.remove_items(["a1"]))
        assert "a1" not in state.items
        assert "a1" not in state.reverse_item_map
        assert "a1" not in state.items["q1"].items
        assert state.rev == 0


# ---------------------------------------------------------------------------
# ITEM and the reverse map
# ---------------------------------------------------------------------------


class TestItemAction:
    """Tests for ITEM upserts and reverse edge maintenance."""

    def test_forward_edges_produce_reverse_edges(self, form_actions):
        state = apply(empty_state(), *form_actions)
        assert state.reverse_item_map == inverse_of_items(state)
        assert state.reverse_item_map["page1"] == {"questionnaire"}
        assert state.reverse_item_map["name"] == {"page1"}

    def test_child_with_two_parents(self):
        state = apply(
            empty_state(),
            Action.upsert_item(Item(id="g1", type="group", items=("x",))),
            Action.upsert_item(Item(id="g2", type="group", items=("x",))),
        )
        assert state.reverse_item_map["x"] == {"g1", "g2"}

    def test_upsert_dropping_child_removes_reverse_edge(self):
        state = apply(
            empty_state(),
            Action.upsert_item(
                Item(id="g", type="group", items=("a", "b"))
            ),
        )
        state = apply(
            state,
            Action.upsert_item(Item(id="g", type="group", items=("b",))),
        )
        assert "a" not in state.reverse_item_map
        assert state.reverse_item_map["b"] == {"g"}
        assert state.reverse_item_map == inverse_of_items(state)

    def test_upsert_as_leaf_removes_all_edges(self):
        state = apply(
            empty_state(),
            Action.upsert_item(Item(id="g", type="group", items=("a",))),
        )
        state = apply(state, Action.upsert_item(Item(id="g", type="text")))
        assert state.reverse_item_map == {}

    def test_item_keeps_extra_fields(self):
        item = Item.model_validate(
            {"id": "n", "type": "text", "label": "Name", "required": True}
        )
        state = apply(empty_state(), Action.upsert_item(item))
        assert state.items["n"].label == "Name"


# ---------------------------------------------------------------------------
# RESET and rev
# ---------------------------------------------------------------------------


class TestResetAndRev:
    """Tests for RESET and the rev update policy."""

    def test_reset_clears_everything_but_rev(self, form_actions):
        state = apply(
            empty_state(),
            *form_actions,
            Action.error_record(ErrorRecord(id="name", code="REQUIRED")),
            Action.set_locale("fi"),
            Action.set_value_set(ValueSet(id="vs1")),
            Action.complete(),
            rev=7,
        )
        state = apply(state, Action.reset())

        assert state.items == {}
        assert state.reverse_item_map == {}
        assert state.value_sets == {}
        assert state.errors == ()
        assert state.locale is None
        assert state.complete is False
        assert state.rev == 7

    def test_rev_is_set_even_when_actions_fail(self):
        result = reduce(
            empty_state(), [Action(type="BOGUS")], rev=12
        )
        assert result.state.rev == 12
        assert len(result.errors) == 1

    def test_rev_zero_is_applied(self):
        state = apply(empty_state(), rev=5)
        state = apply(state, rev=0)
        assert state.rev == 0

    def test_rev_untouched_without_argument(self):
        state = apply(empty_state(), rev=3)
        state = apply(state, Action.set_locale("en"))
        assert state.rev == 3


# ---------------------------------------------------------------------------
# ANSWER
# ---------------------------------------------------------------------------


class TestAnswerAction:
    """Tests for ANSWER validation."""

    @pytest.fixture
    def state(self, form_actions):
        return apply(empty_state(), *form_actions)

    def test_answer_sets_value(self, state):
        new_state = apply(state, Action.answer_to("name", "Ada"))
        assert new_state.items["name"].value == "Ada"

    @pytest.mark.parametrize("item_id", ["page1", "questionnaire", "info"])
    def test_answer_on_non_answerable_fails_without_mutation(
        self, state, item_id
    ):
        result = reduce(state, [Action.answer_to(item_id, "x")])
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], ClientError)
        assert "is not an answer" in str(result.errors[0])
        assert result.state == state

    def test_answer_on_missing_item_fails(self, state):
        result = reduce(state, [Action.answer_to("nope", 1)])
        assert "No item found with id 'nope'" in str(result.errors[0])
        assert result.state == state

    def test_bad_action_is_skipped_rest_of_batch_applies(self, state):
        result = reduce(
            state,
            [
                Action.answer_to("page1", "x"),
                Action(type="SOMETHING_NEW"),
                Action.answer_to("name", "Grace"),
            ],
        )
        assert [str(e) for e in result.errors] == [
            "Item 'page1' is not an answer",
            "Unexpected action type 'SOMETHING_NEW'",
        ]
        assert result.state.items["name"].value == "Grace"


# ---------------------------------------------------------------------------
# REMOVE_ITEMS
# ---------------------------------------------------------------------------


class TestRemoveItems:
    """Tests for REMOVE_ITEMS."""

    @pytest.fixture
    def state(self, form_actions):
        return apply(empty_state(), *form_actions)

    def test_removing_absent_id_is_noop(self, state):
        assert apply(state, Action.remove_items(["ghost"])) == state

    def test_removing_twice_is_idempotent(self, state):
        once = apply(state, Action.remove_items(["name"]))
        twice = apply(once, Action.remove_items(["name"]))
        assert once == twice

    def test_only_first_occurrence_removed(self):
        state = apply(
            empty_state(),
            Action.upsert_item(
                Item(id="g", type="group", items=("a", "b", "a"))
            ),
        )
        state = apply(state, Action.remove_items(["a"]))
        assert state.items["g"].items == ("b", "a")

    def test_removing_parent_cleans_children_reverse_edges(self, state):
        state = apply(state, Action.remove_items(["page1"]))
        assert "page1" not in state.items
        assert state.items["questionnaire"].items == ()
        assert "name" not in state.reverse_item_map
        assert state.reverse_item_map == inverse_of_items(state)

    @pytest.mark.parametrize(
        "ids", [["page1", "name"], ["name", "page1"]]
    )
    def test_parent_and_child_in_same_batch(self, state, ids):
        state = apply(state, Action.remove_items(ids))
        assert "page1" not in state.items
        assert "name" not in state.items
        assert state.items["questionnaire"].items == ()
        assert state.reverse_item_map == inverse_of_items(state)


# ---------------------------------------------------------------------------
# Other actions
# ---------------------------------------------------------------------------


class TestSimpleActions:
    def test_errors_accumulate_in_order(self):
        state = apply(
            empty_state(),
            Action.error_record(ErrorRecord(id="a", code="REQUIRED")),
            Action.error_record(ErrorRecord(id="b", code="INVALID")),
        )
        assert [e.code for e in state.errors] == ["REQUIRED", "INVALID"]

    def test_locale_value_set_and_complete(self):
        vs = ValueSet(id="colors", entries=[ValueSetEntry(key="r", value="Red")])
        state = apply(
            empty_state(),
            Action.set_locale("sv"),
            Action.set_value_set(vs),
            Action.complete(),
        )
        assert state.locale == "sv"
        assert state.value_sets["colors"] == vs
        assert state.complete is True

    def test_next_and_previous_have_no_effect(self, form_actions):
        state = apply(empty_state(), *form_actions)
        assert apply(state, Action.next(), Action.previous()) == state


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------


class TestSnapshotsAreNotModified:
    def test_old_snapshot_unchanged_after_transition(self, form_actions):
        before = apply(empty_state(), *form_actions)
        items_before = dict(before.items)
        reverse_before = dict(before.reverse_item_map)

        apply(
            before,
            Action.answer_to("name", "changed"),
            Action.remove_items(["info"]),
            Action.upsert_item(Item(id="extra", type="group", items=("name",))),
        )

        assert before.items == items_before
        assert before.reverse_item_map == reverse_before
        assert before.items["name"].value is None
        assert "info" in before.items["page1"].items

    def test_frozen_snapshot_rejects_assignment(self):
        state = empty_state()
        with pytest.raises(Exception):
            state.rev = 4  # type: ignore[misc]
