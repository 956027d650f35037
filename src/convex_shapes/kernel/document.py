"""Extraction document models: the committed contract with the code generator."""

from __future__ import annotations

import json
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from convex_shapes.codes import FunctionKind
from convex_shapes.kernel.descriptor import Descriptor


class Column(BaseModel):
    """One table field."""
    name: str
    data_type: Descriptor

    model_config = ConfigDict(frozen=True, extra="forbid")


class FunctionParam(BaseModel):
    """One declared argument of a registered function."""
    name: str
    data_type: Descriptor

    model_config = ConfigDict(frozen=True, extra="forbid")


class TableDescriptor(BaseModel):
    """A table from define_schema; columns in declaration order."""
    name: str
    columns: List[Column] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


class FunctionRecord(BaseModel):
    """A registered function export.

    ``return_type`` is None when the function declared no ``returns``
    validator; that is different from a declared ``v.null()`` return.
    """
    name: str
    type: FunctionKind
    params: List[FunctionParam] = Field(default_factory=list)
    return_type: Optional[Descriptor] = None
    file_name: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class SchemaSection(BaseModel):
    tables: List[TableDescriptor] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


class ExtractionDocument(BaseModel):
    """Root output of one extraction run."""
    schema_: SchemaSection = Field(default_factory=SchemaSection, alias="schema")
    functions: List[FunctionRecord] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @property
    def tables(self) -> List[TableDescriptor]:
        return self.schema_.tables

    def get_table(self, name: str) -> TableDescriptor | None:
        """Get table by name."""
        for t in self.schema_.tables:
            if t.name == name:
                return t
        return None

    def get_function(self, name: str, file_name: Optional[str] = None) -> FunctionRecord | None:
        """Get function record by binding name (optionally scoped to one file)."""
        for f in self.functions:
            if f.name == name and (file_name is None or f.file_name == file_name):
                return f
        return None

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Compact wire document. Keys are NOT sorted: properties and variants carry declaration order."""
        return json.dumps(self.to_json_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str | bytes) -> "ExtractionDocument":
        return cls.model_validate_json(text)
