from types import SimpleNamespace

import pytest

from errors import ValidationError
from helpers import parse_bool, parse_ingredients, ref_id, same_ref


@pytest.mark.parametrize(
    "ref,expected",
    (
        ("abc", "abc"),
        (42, "42"),
        ({"id": "abc"}, "abc"),
        ({"_id": "abc"}, "abc"),
        (SimpleNamespace(id="abc"), "abc"),
        (None, None),
        ({}, None),
    ),
)
def test_ref_id_normalizes_shapes(ref, expected):
    assert ref_id(ref) == expected


def test_same_ref_mixes_raw_and_populated():
    assert same_ref("u1", {"id": "u1"})
    assert same_ref(SimpleNamespace(id="u1"), "u1")
    assert not same_ref("u1", "u2")
    assert not same_ref(None, None)


def test_parse_ingredients_from_comma_string():
    assert parse_ingredients(" flour, egg ,, milk ") == ["flour", "egg", "milk"]


def test_parse_ingredients_from_json_string_and_list():
    assert parse_ingredients('["flour", "egg"]') == ["flour", "egg"]
    assert parse_ingredients(["flour ", " egg"]) == ["flour", "egg"]


def test_parse_ingredients_rejects_other_types():
    with pytest.raises(ValidationError):
        parse_ingredients(12)


@pytest.mark.parametrize("value,expected", ((True, True), ("true", True), ("false", False), (0, False)))
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected
