"""Canonical descriptor models: one frozen model per validator kind."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
)


class DescriptorKind(str, Enum):
    """Wire discriminants of the canonical model."""
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER64 = "integer64"
    FLOAT64 = "float64"
    NULL = "null"
    BYTES = "bytes"
    ANY = "any"
    ID = "id"
    LITERAL = "literal"
    OPTIONAL = "optional"
    ARRAY = "array"
    OBJECT = "object"
    RECORD = "record"
    UNION = "union"


LiteralValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class BaseDescriptor(BaseModel):
    """Common config: immutable, no unknown fields, snake_case or alias input."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump in the wire shape (camelCase payload fields)."""
        return self.model_dump(mode="json", by_alias=True)


class StringDescriptor(BaseDescriptor):
    type: Literal["string"] = "string"


class BooleanDescriptor(BaseDescriptor):
    type: Literal["boolean"] = "boolean"


class Integer64Descriptor(BaseDescriptor):
    type: Literal["integer64"] = "integer64"


class Float64Descriptor(BaseDescriptor):
    type: Literal["float64"] = "float64"


class NullDescriptor(BaseDescriptor):
    type: Literal["null"] = "null"


class BytesDescriptor(BaseDescriptor):
    type: Literal["bytes"] = "bytes"


class AnyDescriptor(BaseDescriptor):
    type: Literal["any"] = "any"


class IdDescriptor(BaseDescriptor):
    type: Literal["id"] = "id"
    table_name: str = Field(..., alias="tableName")


class LiteralDescriptor(BaseDescriptor):
    type: Literal["literal"] = "literal"
    value: LiteralValue


class OptionalDescriptor(BaseDescriptor):
    type: Literal["optional"] = "optional"
    inner: Descriptor


class ArrayDescriptor(BaseDescriptor):
    type: Literal["array"] = "array"
    elements: Descriptor


class ObjectDescriptor(BaseDescriptor):
    """Fields keep declaration order (dict insertion order)."""
    type: Literal["object"] = "object"
    properties: Dict[str, Descriptor] = Field(default_factory=dict)


class RecordDescriptor(BaseDescriptor):
    type: Literal["record"] = "record"
    key_type: Descriptor = Field(..., alias="keyType")
    value_type: Descriptor = Field(..., alias="valueType")


class UnionDescriptor(BaseDescriptor):
    """Variants keep declaration order; position matters downstream."""
    type: Literal["union"] = "union"
    variants: List[Descriptor] = Field(default_factory=list)


Descriptor = Annotated[
    Union[
        StringDescriptor,
        BooleanDescriptor,
        Integer64Descriptor,
        Float64Descriptor,
        NullDescriptor,
        BytesDescriptor,
        AnyDescriptor,
        IdDescriptor,
        LiteralDescriptor,
        OptionalDescriptor,
        ArrayDescriptor,
        ObjectDescriptor,
        RecordDescriptor,
        UnionDescriptor,
    ],
    Field(discriminator="type"),
]

for _model in (OptionalDescriptor, ArrayDescriptor, ObjectDescriptor, RecordDescriptor, UnionDescriptor):
    _model.model_rebuild()

DESCRIPTOR_ADAPTER: TypeAdapter = TypeAdapter(Descriptor)

LEAF_MODELS: Dict[str, type] = {
    DescriptorKind.STRING.value: StringDescriptor,
    DescriptorKind.BOOLEAN.value: BooleanDescriptor,
    DescriptorKind.INTEGER64.value: Integer64Descriptor,
    DescriptorKind.FLOAT64.value: Float64Descriptor,
    DescriptorKind.NULL.value: NullDescriptor,
    DescriptorKind.BYTES.value: BytesDescriptor,
    DescriptorKind.ANY.value: AnyDescriptor,
}


def parse_descriptor(data: Any) -> BaseDescriptor:
    """Parse a descriptor from plain JSON data (raises pydantic.ValidationError)."""
    return DESCRIPTOR_ADAPTER.validate_python(data)


def is_tagged_union(descriptor: BaseDescriptor) -> bool:
    """True for a non-empty union whose variants are all objects with a literal ``type`` field.

    This is the discriminated-union shape the code generator turns into a sum
    type keyed on ``type``.
    """
    if not isinstance(descriptor, UnionDescriptor) or not descriptor.variants:
        return False
    for variant in descriptor.variants:
        if not isinstance(variant, ObjectDescriptor):
            return False
        if not isinstance(variant.properties.get("type"), LiteralDescriptor):
            return False
    return True


def union_tags(descriptor: BaseDescriptor) -> List[LiteralValue]:
    """Tag values of a tagged union, in variant order (empty for anything else)."""
    if not is_tagged_union(descriptor):
        return []
    return [variant.properties["type"].value for variant in descriptor.variants]
