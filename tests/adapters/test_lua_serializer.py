"""Tests for writing documents back as table-literal source."""

from __future__ import annotations

import pytest

from realweather.adapters.lua_serializer import (
    dump_global,
    format_number,
    quote_string,
    serialize_table,
)
from realweather.adapters.lua_state import LuaState
from realweather.errors import SerializationError

# A trigger command with embedded newlines, as saved by the mission editor
MISSION_FIXTURE = (
    "mission = {\n"
    '\t["params"] = {\n'
    '\t\t["command"] = "local gr = ...\\\n'
    "gr:destroy()\\\n"
    "trigger.action.outTextForCoalition(2,'Enemy cargo plane has landed',15)\"\n"
    "\t}\n"
    "}"
)


def _reparse(name: str, table: dict):
    state = LuaState()
    state.do_string(dump_global(name, table))
    return state.get_global(name)


class TestSerializeTable:
    def test_fixture_is_reproduced_exactly(self):
        state = LuaState()
        state.do_string(MISSION_FIXTURE)
        assert dump_global("mission", state.get_global("mission")) == MISSION_FIXTURE

    def test_empty_table(self):
        assert serialize_table({}) == "{ }"
        assert serialize_table({"a": {}}) == '{\n\t["a"] = { }\n}'

    def test_layout(self):
        text = serialize_table({"qnh": 760, 1: True, "inner": {"x": "y"}})
        assert text == (
            "{\n"
            '\t["qnh"] = 760,\n'
            "\t[1] = true,\n"
            '\t["inner"] = {\n'
            '\t\t["x"] = "y"\n'
            "\t}\n"
            "}"
        )

    def test_order_is_not_sorted(self):
        text = serialize_table({"b": 1, "a": 2})
        assert text.index('["b"]') < text.index('["a"]')

    def test_unsupported_key_raises(self):
        with pytest.raises(SerializationError, match="key"):
            serialize_table({True: 1})
        with pytest.raises(SerializationError, match="key"):
            serialize_table({(1, 2): 1})

    def test_unsupported_value_raises(self):
        with pytest.raises(SerializationError, match="value"):
            serialize_table({"a": [1, 2]})

    def test_nil_value(self):
        assert serialize_table({"a": None}) == '{\n\t["a"] = nil\n}'


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, "5"),
            (5.0, "5"),
            (-3.0, "-3"),
            (0.1, "0.1"),
            (2.572, "2.572"),
            (1e-07, "1e-07"),
            (1e20, "1e+20"),
            (12345678901234567890, "12345678901234567890"),
        ],
    )
    def test_shortest_form(self, value, expected):
        assert format_number(value) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_raises(self, value):
        with pytest.raises(SerializationError):
            format_number(value)


class TestQuoteString:
    def test_quote_and_backslash(self):
        assert quote_string('a"b\\c') == '"a\\"b\\\\c"'

    def test_newline_continuation(self):
        assert quote_string("line1\nline2") == '"line1\\\nline2"'

    def test_control_characters(self):
        assert quote_string("\x01\r\t") == '"\\001\\r\t"'

    def test_raw_bytes(self):
        assert quote_string("\udc80") == '"\\128"'


class TestRoundTrip:
    def test_strings(self):
        table = {
            "multi": "line1\nline2",
            "quotes": 'say "hi"',
            "slashes": "C:\\Saved Games\\DCS",
            "control": "\x00\x01\x7f",
            "digits_after_escape": "\x011",
            "unicode": "Привет ✈",
            "raw": "\udcff\udcfe",
            "tab": "a\tb",
        }
        assert _reparse("t", table) == table

    def test_numbers_and_booleans(self):
        table = {"i": 760, "f": 0.1, "neg": -2.5, "small": 1e-07, "big": 1e20, "t": True, "f2": False}
        assert _reparse("t", table) == table

    def test_nested_and_positional(self):
        table = {
            "trig": {"funcStartup": {1: "if mission.trig.conditions[1]() then\nend"}},
            "manual": {1: {"thickness": 100, "time": 0, "visibility": 900}},
            "empty": {},
            7: "seven",
        }
        result = _reparse("t", table)
        assert result == table
        assert list(result) == list(table)
