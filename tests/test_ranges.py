"""Tests for linear text ranges."""

from __future__ import annotations

import pytest

from noteflow.core.ranges import TextRange


def test_bounds_are_ordered_and_clamped_at_zero() -> None:
    assert TextRange(7, 3).to_tuple() == (3, 7)
    assert TextRange(-3, 2).to_tuple() == (0, 2)


def test_caret_is_collapsed() -> None:
    assert TextRange.caret(4).is_caret
    assert not TextRange(1, 2).is_caret


def test_non_integer_bounds_are_rejected() -> None:
    with pytest.raises(ValueError):
        TextRange("a", 2)
