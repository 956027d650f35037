"""Tests for the v.* stand-ins."""

import logging

import pytest

from convex_shapes.kernel.descriptor import (
    AnyDescriptor,
    ArrayDescriptor,
    BooleanDescriptor,
    BytesDescriptor,
    Float64Descriptor,
    IdDescriptor,
    Integer64Descriptor,
    LiteralDescriptor,
    NullDescriptor,
    ObjectDescriptor,
    OptionalDescriptor,
    RecordDescriptor,
    StringDescriptor,
    UnionDescriptor,
)
from convex_shapes.stubs import WILDCARD, v
from convex_shapes.stubs.values import build_namespace


def test_leaves():
    assert v.string() == StringDescriptor()
    assert v.boolean() == BooleanDescriptor()
    assert v.bytes() == BytesDescriptor()
    assert v.null() == NullDescriptor()
    assert v.null_() == NullDescriptor()
    assert v.any() == AnyDescriptor()
    assert v.id("games") == IdDescriptor(table_name="games")
    assert v.literal("Win") == LiteralDescriptor(value="Win")


def test_numeric_names():
    assert v.number() == Float64Descriptor()
    assert v.float64() == Float64Descriptor()
    assert v.int64() == Integer64Descriptor()
    assert v.number().to_json_dict() == {"type": "float64"}
    assert v.int64().to_json_dict() == {"type": "integer64"}


def test_bad_leaf_payloads_fall_back_to_any(caplog):
    with caplog.at_level(logging.WARNING, logger="convex_shapes"):
        assert v.literal(None) == AnyDescriptor()
        assert v.literal({"a": 1}) == AnyDescriptor()
        assert v.id(42) == AnyDescriptor()
    assert "v.literal() with non-scalar value" in caplog.text
    assert "v.id() with non-string table name" in caplog.text


def test_object_positional_and_keyword_forms_agree():
    positional = v.object({"theme": v.string(), "notifications": v.boolean()})
    keyword = v.object(theme=v.string(), notifications=v.boolean())
    assert positional == keyword
    assert list(keyword.properties) == ["theme", "notifications"]


def test_object_keywords_follow_positional_fields():
    obj = v.object({"b": v.string()}, a=v.string())
    assert list(obj.properties) == ["b", "a"]


def test_empty_object():
    assert v.object() == ObjectDescriptor(properties={})
    assert v.object({}).to_json_dict() == {"type": "object", "properties": {}}


def test_containers_accept_bare_field_maps():
    arr = v.array({"name": v.string()})
    assert arr == ArrayDescriptor(elements=ObjectDescriptor(properties={"name": StringDescriptor()}))

    rec = v.record(v.string(), {"count": v.number()})
    assert rec == RecordDescriptor(
        key_type=StringDescriptor(),
        value_type=ObjectDescriptor(properties={"count": Float64Descriptor()}),
    )


def test_union_keeps_variant_order():
    union = v.union(v.literal("b"), v.literal("a"), v.null())
    assert union == UnionDescriptor(variants=[
        LiteralDescriptor(value="b"),
        LiteralDescriptor(value="a"),
        NullDescriptor(),
    ])


def test_optional_is_idempotent():
    once = v.optional(v.string())
    assert once == OptionalDescriptor(inner=StringDescriptor())
    assert v.optional(once) == once


def test_optional_of_real_optional_wraps_once():
    real = {"kind": "string", "isOptional": "optional", "isConvexValidator": True}
    assert v.optional(real) == OptionalDescriptor(inner=StringDescriptor())


def test_namespace_exposes_v_and_type_names():
    namespace = build_namespace()
    assert namespace["v"] is v
    assert namespace["__all__"] == ["v"]
    fallback = namespace["__getattr__"]
    assert fallback("Infer") is WILDCARD
    with pytest.raises(AttributeError):
        fallback("missing")
