"""Tests for the picker boundary."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from cdh.config import PickerConfig
from cdh.picker import pick


def test_pick_emptyReturnsNone():
    assert pick([]) is None


def test_pick_nonInteractiveReturnsFirst():
    with patch("cdh.picker._interactive", return_value=False):
        assert pick(["/a", "/b"]) == "/a"


def _interactivePick(items, config=None, answer="/b"):
    question = MagicMock()
    question.ask.return_value = answer
    with (
        patch("cdh.picker._interactive", return_value=True),
        patch("cdh.picker.create_output", return_value=MagicMock()),
        patch("cdh.picker.questionary.select", return_value=question) as select,
    ):
        result = pick(items, config)
    return result, select


def test_pick_interactiveReturnsAnswer():
    result, select = _interactivePick(["/a", "/b"])
    assert result == "/b"
    kwargs = select.call_args.kwargs
    assert select.call_args.kwargs["choices"] == ["/a", "/b"]
    assert kwargs["use_shortcuts"] is True
    assert kwargs["use_jk_keys"] is False


def test_pick_interactiveCancelled():
    result, _ = _interactivePick(["/a"], answer=None)
    assert result is None


def test_pick_longListFallsBackToJk():
    items = [f"/d{i}" for i in range(50)]
    _, select = _interactivePick(items)
    kwargs = select.call_args.kwargs
    assert kwargs["use_shortcuts"] is False
    assert kwargs["use_jk_keys"] is True


def test_pick_shortcutsDisabledByConfig():
    _, select = _interactivePick(["/a"], PickerConfig(shortcuts=False))
    kwargs = select.call_args.kwargs
    assert kwargs["use_shortcuts"] is False
    assert kwargs["use_jk_keys"] is True
