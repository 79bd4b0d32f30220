"""Unit tests for the action bus."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from make_async_function.actions import Action, matches, payload_of
from make_async_function.bus import Bus


class TestAction:
    """Test Action creation and matching."""

    def test_create_with_defaults(self):
        action = Action.create("SAVE")

        assert action.type == "SAVE"
        assert action.payload is None
        assert action.error is False
        assert action.meta == {}

    def test_create_with_meta(self):
        action = Action.create("SAVE", {"title": "draft"}, source="editor")

        assert action.payload == {"title": "draft"}
        assert action.meta == {"source": "editor"}

    def test_coerce_mapping(self):
        action = Action.coerce({"type": "SAVE_SUCCESS", "payload": "Awesome!"})

        assert isinstance(action, Action)
        assert action.payload == "Awesome!"

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError, match="expected an Action"):
            Action.coerce("SAVE")

    def test_matches_string_predicate_and_wildcard(self):
        action = Action.create("SAVE_SUCCESS")

        assert matches("SAVE_SUCCESS", action) is True
        assert matches("SAVE", action) is False
        assert matches("*", action) is True
        assert matches(lambda a: a.type.endswith("_SUCCESS"), action) is True

    def test_payload_of(self):
        assert payload_of(Action.create("X", 42)) == 42


class TestSubscribe:
    """Test subscription management."""

    def test_subscriber_count(self, bus: Bus):
        assert bus.subscriber_count == 0

        unsubscribe = bus.subscribe("SAVE", MagicMock())
        assert bus.subscriber_count == 1

        unsubscribe()
        assert bus.subscriber_count == 0

    def test_unsubscribe_twice_is_noop(self, bus: Bus):
        unsubscribe = bus.subscribe("SAVE", MagicMock())

        unsubscribe()
        unsubscribe()

        assert bus.subscriber_count == 0

    def test_unsubscribe_with_token(self, bus: Bus):
        callback = MagicMock()
        token = bus.subscribe("SAVE", callback)

        bus.unsubscribe(token)
        bus.dispatch({"type": "SAVE"})

        callback.assert_not_called()

    def test_invalid_matcher_raises(self, bus: Bus):
        with pytest.raises(TypeError, match="Matcher must be"):
            bus.subscribe(42, MagicMock())  # type: ignore[arg-type]

    def test_invalid_callback_raises(self, bus: Bus):
        with pytest.raises(TypeError, match="Callback must be callable"):
            bus.subscribe("SAVE", "not callable")  # type: ignore[arg-type]
        assert bus.subscriber_count == 0

    def test_reset(self, bus: Bus):
        callback = MagicMock()
        bus.subscribe("SAVE", callback)

        bus.reset()
        bus.dispatch({"type": "SAVE"})

        assert bus.subscriber_count == 0
        callback.assert_not_called()


class TestDispatch:
    """Test action delivery."""

    def test_delivers_matching_only(self, bus: Bus):
        save = MagicMock()
        other = MagicMock()
        bus.subscribe("SAVE", save)
        bus.subscribe("OTHER", other)

        bus.dispatch({"type": "SAVE", "payload": 1})

        save.assert_called_once()
        assert save.call_args[0][0].payload == 1
        other.assert_not_called()

    def test_delivers_in_registration_order(self, bus: Bus):
        calls: list[str] = []
        bus.subscribe("SAVE", lambda a: calls.append("first"))
        bus.subscribe(lambda a: a.type == "SAVE", lambda a: calls.append("second"))
        bus.subscribe_all(lambda a: calls.append("third"))

        bus.dispatch(Action.create("SAVE"))

        assert calls == ["first", "second", "third"]

    def test_returns_coerced_action(self, bus: Bus):
        action = bus.dispatch({"type": "SAVE"})

        assert isinstance(action, Action)
        assert action.type == "SAVE"

    def test_removed_mid_dispatch_does_not_fire(self, bus: Bus):
        second = MagicMock()
        unsubscribe_second = None

        def first(action: Action) -> None:
            unsubscribe_second()

        bus.subscribe("SAVE", first)
        unsubscribe_second = bus.subscribe("SAVE", second)

        bus.dispatch({"type": "SAVE"})

        second.assert_not_called()

    def test_added_mid_dispatch_waits_for_next(self, bus: Bus):
        late = MagicMock()
        bus.subscribe("SAVE", lambda a: bus.subscribe("SAVE", late))

        bus.dispatch({"type": "SAVE"})
        late.assert_not_called()

        bus.dispatch({"type": "SAVE"})
        late.assert_called_once()

    def test_reentrant_dispatch(self, bus: Bus):
        seen: list[str] = []
        bus.subscribe("SAVE", lambda a: bus.dispatch({"type": "SAVE_SUCCESS"}))
        bus.subscribe_all(lambda a: seen.append(a.type))

        bus.dispatch({"type": "SAVE"})

        assert seen == ["SAVE_SUCCESS", "SAVE"]

    def test_subscriber_error_is_logged_and_contained(self, bus: Bus, caplog):
        after = MagicMock()

        def broken(action: Action) -> None:
            raise RuntimeError("boom")

        bus.subscribe("SAVE", broken)
        bus.subscribe("SAVE", after)

        with caplog.at_level(logging.ERROR, logger="make_async_function.bus"):
            bus.dispatch({"type": "SAVE"})

        after.assert_called_once()
        assert "Error in subscriber for SAVE" in caplog.text

    def test_predicate_error_is_contained(self, bus: Bus, caplog):
        after = MagicMock()

        def broken(action: Action) -> bool:
            raise ValueError("bad predicate")

        bus.subscribe(broken, MagicMock())
        bus.subscribe("SAVE", after)

        with caplog.at_level(logging.ERROR, logger="make_async_function.bus"):
            bus.dispatch({"type": "SAVE"})

        after.assert_called_once()
        assert "Error matching action SAVE" in caplog.text
