"""Tests for session data contracts."""

import pytest
from pydantic import ValidationError

from dialob_session.session.models import (
    Action,
    ActionType,
    Item,
    SessionState,
)
from dialob_session.transport.base import DialobResponse


class TestItem:
    @pytest.mark.parametrize(
        "item_type, answerable",
        [
            ("questionnaire", False),
            ("group", False),
            ("surveygroup", False),
            ("note", False),
            ("text", True),
            ("boolean", True),
            ("multichoice", True),
        ],
    )
    def test_answerable_kinds(self, item_type, answerable):
        assert Item(id="i", type=item_type).is_answerable is answerable

    def test_children_default_empty(self):
        assert Item(id="t", type="text").children == ()

    def test_items_coerced_to_tuple(self):
        item = Item.model_validate({"id": "g", "type": "group", "items": ["a", "b"]})
        assert item.items == ("a", "b")


class TestAction:
    def test_unknown_type_still_parses(self):
        action = Action.model_validate({"type": "SOMETHING_NEW", "extra": 1})
        assert action.type == "SOMETHING_NEW"

    def test_value_set_alias(self):
        action = Action.model_validate(
            {"type": "VALUE_SET", "valueSet": {"id": "vs", "entries": [{"key": "a", "value": "A"}]}}
        )
        assert action.value_set.entries[0].key == "a"

    def test_factories_use_known_tags(self):
        assert Action.reset().type == ActionType.RESET.value
        assert Action.remove_items(["a"]).ids == ["a"]
        assert Action.answer_to("q", None).to_wire() == {
            "type": "ANSWER",
            "id": "q",
            "answer": None,
        }

    def test_actions_are_frozen(self):
        with pytest.raises(ValidationError):
            Action.next().type = "PREVIOUS"  # type: ignore[misc]


class TestSessionState:
    def test_empty_state(self):
        state = SessionState()
        assert state.items == {}
        assert state.reverse_item_map == {}
        assert state.value_sets == {}
        assert state.errors == ()
        assert state.locale is None
        assert state.rev == 0
        assert state.complete is False


class TestDialobResponse:
    def test_parse(self):
        response = DialobResponse.model_validate(
            {"rev": 2, "actions": [{"type": "LOCALE", "value": "en"}]}
        )
        assert response.actions[0].value == "en"

    def test_rev_required(self):
        with pytest.raises(ValidationError):
            DialobResponse.model_validate({"actions": []})
