"""Unit tests for the watermark store.

Tests cover:
- Numeric comparison of decimal ids
- Forward-only advance
- Independent watermarks per adapter
"""

import pytest

from modules.war_alerts.watermark import WatermarkStore, compare_event_ids


@pytest.mark.unit
class TestCompareEventIds:
    """Tests for compare_event_ids."""

    def test_decimal_ids_compare_numerically(self):
        assert compare_event_ids("99", "100") < 0
        assert compare_event_ids("100", "99") > 0

    def test_equal_ids(self):
        assert compare_event_ids("105", "105") == 0

    def test_non_numeric_ids_compare_as_strings(self):
        assert compare_event_ids("abc", "abd") < 0
        assert compare_event_ids("b", "a") > 0


@pytest.mark.unit
class TestWatermarkStore:
    """Tests for WatermarkStore."""

    def test_get_unknown_adapter_returns_none(self):
        assert WatermarkStore().get("polling") is None

    def test_first_advance_writes(self):
        store = WatermarkStore()

        assert store.advance("polling", "100") is True
        assert store.get("polling") == "100"

    def test_advance_moves_forward(self):
        store = WatermarkStore()
        store.advance("polling", "100")

        assert store.advance("polling", "105") is True
        assert store.get("polling") == "105"

    def test_advance_never_moves_backwards(self):
        store = WatermarkStore()
        store.advance("polling", "105")

        assert store.advance("polling", "100") is False
        assert store.advance("polling", "105") is False
        assert store.get("polling") == "105"

    def test_advance_past_digit_boundary(self):
        store = WatermarkStore()
        store.advance("polling", "999")

        assert store.advance("polling", "1000") is True
        assert store.get("polling") == "1000"

    def test_watermarks_are_per_adapter(self):
        store = WatermarkStore()
        store.advance("polling", "100")
        store.advance("other", "5")

        assert store.get("polling") == "100"
        assert store.get("other") == "5"

    def test_reset_forgets_watermark(self):
        store = WatermarkStore()
        store.advance("polling", "100")

        store.reset("polling")

        assert store.get("polling") is None
        assert store.advance("polling", "1") is True
