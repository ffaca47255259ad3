"""Tests for attribute value conversion."""

import json

import pytest

from spanlog.logging_helpers.values import convert_attributes, to_json_value


class TestToJsonValue:
    """Test cases for to_json_value."""

    def test_primitives_pass_through(self):
        assert to_json_value(True) is True
        assert to_json_value(False) is False
        assert to_json_value(42) == 42
        assert to_json_value(1.5) == 1.5
        assert to_json_value("ok") == "ok"

    def test_bool_stays_bool(self):
        value = to_json_value(True)

        assert isinstance(value, bool)

    def test_arrays_degrade_to_empty_string(self):
        assert to_json_value(("a", "b")) == ""
        assert to_json_value([1, 2, 3]) == ""
        assert to_json_value(()) == ""

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_become_null(self, value):
        assert to_json_value(value) is None

    def test_converted_values_are_strict_json(self):
        converted = convert_attributes({"ratio": float("nan"), "latency": float("inf"), "ok": 0.5})

        assert json.dumps(converted, allow_nan=False) == '{"ratio": null, "latency": null, "ok": 0.5}'


class TestConvertAttributes:
    """Test cases for convert_attributes."""

    def test_ignored_keys_are_dropped(self):
        converted = convert_attributes(
            {"status": "ok", "level": "INFO", "tags": ("a",)},
            ignore=("level",),
        )

        assert converted == {"status": "ok", "tags": ""}

    def test_order_is_preserved(self):
        converted = convert_attributes({"b": 1, "a": 2, "c": 3})

        assert list(converted) == ["b", "a", "c"]
