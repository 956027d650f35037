"""Stand-in for ``convex.values``: every ``v.*`` call returns a canonical descriptor."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from convex_shapes.kernel.descriptor import (
    AnyDescriptor,
    ArrayDescriptor,
    BaseDescriptor,
    BooleanDescriptor,
    BytesDescriptor,
    Float64Descriptor,
    IdDescriptor,
    Integer64Descriptor,
    LiteralDescriptor,
    NullDescriptor,
    ObjectDescriptor,
    RecordDescriptor,
    StringDescriptor,
    UnionDescriptor,
)
from convex_shapes.kernel.normalize import make_optional, normalize, normalize_fields

logger = logging.getLogger(__name__)


class Values:
    """The ``v`` namespace.

    Leaves return descriptors immediately. Containers normalize their
    children, so bare field maps or real validators may be nested inside.
    """

    # Primitives
    @staticmethod
    def string() -> StringDescriptor:
        return StringDescriptor()

    @staticmethod
    def number() -> Float64Descriptor:
        return Float64Descriptor()

    @staticmethod
    def float64() -> Float64Descriptor:
        return Float64Descriptor()

    @staticmethod
    def int64() -> Integer64Descriptor:
        return Integer64Descriptor()

    @staticmethod
    def boolean() -> BooleanDescriptor:
        return BooleanDescriptor()

    @staticmethod
    def bytes() -> BytesDescriptor:
        return BytesDescriptor()

    @staticmethod
    def null() -> NullDescriptor:
        return NullDescriptor()

    null_ = null

    @staticmethod
    def any() -> AnyDescriptor:
        return AnyDescriptor()

    @staticmethod
    def id(table_name: str) -> BaseDescriptor:
        """Falls back to ``any`` (with a warning) when the table name is not a string."""
        if not isinstance(table_name, str):
            logger.warning("v.id() with non-string table name %r; using 'any'", table_name)
            return AnyDescriptor()
        return IdDescriptor(table_name=table_name)

    @staticmethod
    def literal(value: Union[str, int, float, bool]) -> BaseDescriptor:
        """Falls back to ``any`` (with a warning) for non-scalar values."""
        try:
            return LiteralDescriptor(value=value)
        except ValidationError:
            logger.warning("v.literal() with non-scalar value %r; using 'any'", value)
            return AnyDescriptor()

    # Containers
    @staticmethod
    def optional(inner: Any) -> BaseDescriptor:
        return make_optional(normalize(inner))

    @staticmethod
    def array(element: Any) -> ArrayDescriptor:
        return ArrayDescriptor(elements=normalize(element))

    @staticmethod
    def object(fields: Optional[Mapping] = None, /, **kwargs: Any) -> ObjectDescriptor:
        """``v.object({"a": ...})`` or ``v.object(a=...)``; positional fields come first."""
        merged: Dict[str, Any] = dict(fields or {})
        merged.update(kwargs)
        return normalize_fields(merged)

    @staticmethod
    def record(key: Any, value: Any) -> RecordDescriptor:
        return RecordDescriptor(key_type=normalize(key), value_type=normalize(value))

    @staticmethod
    def union(*members: Any) -> UnionDescriptor:
        return UnionDescriptor(variants=[normalize(m) for m in members])


v = Values()


def build_namespace() -> Dict[str, Any]:
    """Module globals served for ``convex.values``."""
    from convex_shapes.stubs.generated import type_name_fallback

    return {
        "v": v,
        "Values": Values,
        "__all__": ["v"],
        "__getattr__": type_name_fallback("convex.values"),
    }
