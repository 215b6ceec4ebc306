import math

import pytest

from eafcalc.core.transforms import (
    apply_dict_overrides,
    coerce_number,
    coerce_table,
    parse_assignment,
    resolve_names,
)


@pytest.mark.parametrize("raw,expected", [
    ("12.5", 12.5),
    (" 1,200 ", 1200.0),
    ("", 0.0),
    ("abc", 0.0),
    (None, 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (True, 0.0),
    (7, 7.0),
])
def test_coerce_number(raw, expected):
    out = coerce_number(raw)
    assert out == expected and math.isfinite(out)


def test_coerce_table_drops_blanks():
    assert coerce_table({"a": "", "b": "x", "c": "2"}) == {"b": 0.0, "c": 2.0}


def test_resolve_names_prefers_canonical():
    aliases = {"lime": "石灰", "power": "电力"}
    out = resolve_names({"Lime": 1, "power": 2, "电力": 3}, aliases)
    assert out == {"石灰": 1, "电力": 3}


def test_parse_assignment():
    assert parse_assignment("electricity=380") == ("electricity", 380.0)
    assert parse_assignment("lime = oops") == ("lime", 0.0)
    with pytest.raises(ValueError):
        parse_assignment("lime")
    with pytest.raises(ValueError):
        parse_assignment("=3")


def test_apply_dict_overrides_copies():
    d = {"k": 1}
    merged = apply_dict_overrides(d, {"k": 2, "z": 9})
    assert merged == {"k": 2, "z": 9}
    assert d == {"k": 1}
