"""Descriptor normalization: any legal validator representation -> canonical descriptor.

A validator can reach the extractor in one of three shapes:

- CANONICAL: a descriptor model produced by the instrumented ``v.*`` stand-ins,
  or a plain mapping already in wire shape (``{"type": "object", "properties": ...}``).
- REAL_VALIDATOR: a validator from a real schema library, recognized by its
  ``isConvexValidator`` marker. It names its kind in ``kind`` and carries
  optionality as a side flag (``isOptional``) instead of a wrapper node.
- FIELD_MAP: a bare ``{field: validator}`` mapping, as accepted by
  ``define_table`` and the ``args`` of a registrar.

Anything else is UNKNOWN and becomes ``any``. Normalization never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from convex_shapes.kernel.descriptor import (
    LEAF_MODELS,
    AnyDescriptor,
    ArrayDescriptor,
    BaseDescriptor,
    DescriptorKind,
    IdDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    OptionalDescriptor,
    RecordDescriptor,
    UnionDescriptor,
)

logger = logging.getLogger(__name__)

REAL_VALIDATOR_MARKER = "isConvexValidator"

# Spellings used by older stand-ins and by real validators, mapped onto the
# canonical numeric names.
_KIND_ALIASES: Dict[str, str] = {
    "number": DescriptorKind.FLOAT64.value,
    "int64": DescriptorKind.INTEGER64.value,
}


class InputShape(str, Enum):
    """The closed set of runtime shapes ``normalize`` distinguishes."""
    CANONICAL = "canonical"
    REAL_VALIDATOR = "real_validator"
    FIELD_MAP = "field_map"
    UNKNOWN = "unknown"


def _real_attr(value: Any, snake: str, camel: Optional[str] = None) -> Any:
    """Read a real-validator property from its mapping (camelCase) or object (either case) form."""
    camel = camel or snake
    if isinstance(value, Mapping):
        if camel in value:
            return value[camel]
        return value.get(snake)
    found = getattr(value, snake, None)
    if found is None and camel != snake:
        found = getattr(value, camel, None)
    return found


def _is_real_validator(value: Any) -> bool:
    if isinstance(value, Mapping):
        return value.get(REAL_VALIDATOR_MARKER) is True
    # Identity checks: stand-ins such as the wildcard answer every attribute.
    return (
        getattr(value, "is_convex_validator", None) is True
        or getattr(value, REAL_VALIDATOR_MARKER, None) is True
    )


def classify(value: Any) -> InputShape:
    """Decide which representation ``value`` is in."""
    if isinstance(value, BaseDescriptor):
        return InputShape.CANONICAL
    if _is_real_validator(value):
        return InputShape.REAL_VALIDATOR
    if isinstance(value, Mapping):
        if isinstance(value.get("type"), str):
            return InputShape.CANONICAL
        return InputShape.FIELD_MAP
    return InputShape.UNKNOWN


def normalize(value: Any) -> BaseDescriptor:
    """Return the canonical descriptor for any legal validator representation.

    Already-canonical descriptor models are returned unchanged, which makes
    the function idempotent. Field order and union-variant order are kept.
    """
    shape = classify(value)
    if shape is InputShape.CANONICAL:
        if isinstance(value, BaseDescriptor):
            return value
        return _from_canonical_mapping(value)
    if shape is InputShape.REAL_VALIDATOR:
        return _from_real_validator(value)
    if shape is InputShape.FIELD_MAP:
        return normalize_fields(value)
    logger.warning("Unrecognized validator shape %s; using 'any'", type(value).__name__)
    return AnyDescriptor()


def normalize_fields(fields: Optional[Mapping]) -> ObjectDescriptor:
    """Wrap a ``{name: validator}`` mapping as an object descriptor."""
    properties: Dict[str, BaseDescriptor] = {}
    for name, field in (fields or {}).items():
        properties[str(name)] = normalize(field)
    return ObjectDescriptor(properties=properties)


def make_optional(inner: BaseDescriptor) -> OptionalDescriptor:
    """Wrap ``inner`` once; an existing optional is returned as is."""
    if isinstance(inner, OptionalDescriptor):
        return inner
    return OptionalDescriptor(inner=inner)


def _normalize_members(members: Any) -> List[BaseDescriptor]:
    if members is None:
        return []
    if isinstance(members, (str, bytes, Mapping)):
        logger.warning("Union members must be a sequence, got %s", type(members).__name__)
        return []
    return [normalize(m) for m in members]


def _build(kind: str, source: Any, *, real: bool) -> BaseDescriptor:
    """Construct a descriptor of ``kind`` reading payload from ``source``.

    Payload field names differ between the two tagged representations:
    real validators use fields/element/members/key/value, the wire shape uses
    properties/elements/variants/keyType/valueType.
    """
    kind = _KIND_ALIASES.get(kind, kind)

    if kind in LEAF_MODELS:
        return LEAF_MODELS[kind]()

    if kind == DescriptorKind.ID.value:
        table_name = _real_attr(source, "table_name", "tableName")
        if not isinstance(table_name, str):
            logger.warning("id validator without a table name; using 'any'")
            return AnyDescriptor()
        return IdDescriptor(table_name=table_name)

    if kind == DescriptorKind.LITERAL.value:
        try:
            return LiteralDescriptor(value=_real_attr(source, "value"))
        except ValidationError:
            logger.warning("literal validator with non-scalar value; using 'any'")
            return AnyDescriptor()

    if kind == DescriptorKind.OBJECT.value:
        fields = _real_attr(source, "fields") if real else _real_attr(source, "properties")
        if fields is not None and not isinstance(fields, Mapping):
            logger.warning("object validator fields must be a mapping, got %s", type(fields).__name__)
            fields = None
        return normalize_fields(fields)

    if kind == DescriptorKind.ARRAY.value:
        element = _real_attr(source, "element") if real else _real_attr(source, "elements")
        return ArrayDescriptor(elements=normalize(element))

    if kind == DescriptorKind.UNION.value:
        members = _real_attr(source, "members") if real else _real_attr(source, "variants")
        return UnionDescriptor(variants=_normalize_members(members))

    if kind == DescriptorKind.RECORD.value:
        if real:
            key, value = _real_attr(source, "key"), _real_attr(source, "value")
        else:
            key, value = _real_attr(source, "key_type", "keyType"), _real_attr(source, "value_type", "valueType")
        return RecordDescriptor(key_type=normalize(key), value_type=normalize(value))

    if kind == DescriptorKind.OPTIONAL.value and not real:
        return make_optional(normalize(_real_attr(source, "inner")))

    logger.warning("Unknown validator kind %r; using 'any'", kind)
    return AnyDescriptor()


def _from_canonical_mapping(value: Mapping) -> BaseDescriptor:
    return _build(value["type"], value, real=False)


def _from_real_validator(value: Any) -> BaseDescriptor:
    kind = _real_attr(value, "kind")
    if not isinstance(kind, str):
        logger.warning("Real validator without a kind; using 'any'")
        inner: BaseDescriptor = AnyDescriptor()
    else:
        inner = _build(kind, value, real=True)

    optional_flag = _real_attr(value, "is_optional", "isOptional")
    if optional_flag == "optional" or optional_flag is True:
        return make_optional(inner)
    return inner

