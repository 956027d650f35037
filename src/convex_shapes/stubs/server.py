"""Stand-in for ``convex.server`` (and ``_generated.server``).

Captures schema and function definitions instead of registering them:

- define_table/define_schema record tables into a SchemaCollector owned by
  the extraction run.
- query/mutation/action (and variants) return RegisteredFunction values that
  carry the declared ``args``/``returns`` validators. Handlers are never called.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from convex_shapes.codes import FunctionKind
from convex_shapes.errors import SchemaDefinitionError
from convex_shapes.kernel.descriptor import (
    Float64Descriptor,
    NullDescriptor,
    ObjectDescriptor,
    StringDescriptor,
    UnionDescriptor,
)
from convex_shapes.kernel.document import Column, TableDescriptor
from convex_shapes.kernel.normalize import normalize
from convex_shapes.stubs.generated import WILDCARD, type_name_fallback

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schema collection
# ---------------------------------------------------------------------------

class SchemaCollector:
    """Accumulates tables for one extraction run.

    Written only while the schema module loads; the driver closes it before
    any function module runs.
    """

    def __init__(self) -> None:
        self._tables: List[TableDescriptor] = []
        self._closed = False

    @property
    def tables(self) -> List[TableDescriptor]:
        return list(self._tables)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, table: TableDescriptor) -> None:
        if self._closed:
            raise SchemaDefinitionError(
                f"define_schema called after the schema module finished loading (table '{table.name}')"
            )
        if any(t.name == table.name for t in self._tables):
            raise SchemaDefinitionError(f"Duplicate table name: '{table.name}'")
        self._tables.append(table)

    def close(self) -> None:
        self._closed = True


class TableBuilder:
    """Result of define_table; index declarations are not part of the shape."""

    def __init__(self, validator: Any):
        self.validator = validator

    def index(self, *args: Any, **kwargs: Any) -> "TableBuilder":
        return self

    def search_index(self, *args: Any, **kwargs: Any) -> "TableBuilder":
        return self

    def vector_index(self, *args: Any, **kwargs: Any) -> "TableBuilder":
        return self


def define_table(validator: Any) -> TableBuilder:
    return TableBuilder(validator)


def table_from_builder(name: str, builder: TableBuilder) -> TableDescriptor:
    """Normalize a builder's captured validator into a table descriptor.

    The validator may be a bare field map, a ``v.object(...)`` descriptor or a
    real object validator; anything that does not normalize to an object
    yields a table without columns.
    """
    normalized = normalize(builder.validator)
    if not isinstance(normalized, ObjectDescriptor):
        logger.warning("Table '%s' validator is %s, not an object; no columns extracted", name, normalized.type)
        return TableDescriptor(name=name)
    columns = [Column(name=field, data_type=dt) for field, dt in normalized.properties.items()]
    return TableDescriptor(name=name, columns=columns)


def make_define_schema(collector: SchemaCollector) -> Callable[..., List[TableDescriptor]]:
    """Bind define_schema to the run's collector."""

    def define_schema(tables: Mapping, options: Any = None, /, **kwargs: Any) -> List[TableDescriptor]:
        if not isinstance(tables, Mapping):
            raise SchemaDefinitionError(
                f"define_schema expects a mapping of table name -> define_table(...), got {type(tables).__name__}"
            )
        for name, builder in tables.items():
            if not isinstance(builder, TableBuilder):
                raise SchemaDefinitionError(
                    f"Table '{name}' must be built with define_table(...), got {type(builder).__name__}"
                )
            collector.add(table_from_builder(str(name), builder))
        return collector.tables

    return define_schema


# ---------------------------------------------------------------------------
# Function registration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RegisteredFunction:
    """A tagged registrar result: kind plus the raw (unnormalized) validators."""
    kind: FunctionKind
    args: Any = None
    returns: Any = None
    handler: Optional[Callable[..., Any]] = None

    def __repr__(self) -> str:
        return f"RegisteredFunction(kind={self.kind.value!r})"


_CONFIG_KEYS = ("args", "returns", "handler")


def make_registrar(kind: FunctionKind) -> Callable[..., Any]:
    """Build a registrar for ``kind``.

    Accepted forms::

        query({"args": {...}, "returns": v.null(), "handler": fn})
        query({"args": {...}})   # registered without a handler
        query(args={...}, returns=v.null(), handler=fn)

        @query
        def fn(ctx): ...

        @query(args={...})
        def fn(ctx, args): ...
    """

    def register(config: Any = None, /, **options: Any) -> Any:
        if callable(config) and not isinstance(config, Mapping):
            options = {**options, "handler": config}
            config = None
        if config is not None and not isinstance(config, Mapping):
            raise TypeError(f"{kind.value}() expects a config mapping or a handler, got {type(config).__name__}")

        merged: Dict[str, Any] = dict(config or {})
        merged.update(options)
        unknown = sorted(k for k in merged if k not in _CONFIG_KEYS)
        if unknown:
            logger.debug("%s(): ignoring config keys %s", kind.value, unknown)

        # Only the keyword form without a handler is a decorator factory;
        # a config mapping registers even when it names no handler.
        if config is None and "handler" not in merged:
            def decorator(handler: Callable[..., Any]) -> RegisteredFunction:
                return RegisteredFunction(kind, merged.get("args"), merged.get("returns"), handler)
            return decorator

        return RegisteredFunction(kind, merged.get("args"), merged.get("returns"), merged.get("handler"))

    register.__name__ = kind.value
    return register


query = make_registrar(FunctionKind.QUERY)
mutation = make_registrar(FunctionKind.MUTATION)
action = make_registrar(FunctionKind.ACTION)
internal_query = make_registrar(FunctionKind.INTERNAL_QUERY)
internal_mutation = make_registrar(FunctionKind.INTERNAL_MUTATION)
internal_action = make_registrar(FunctionKind.INTERNAL_ACTION)
http_action = make_registrar(FunctionKind.HTTP_ACTION)


# paginate() arguments, commonly imported by function modules.
pagination_opts_validator = ObjectDescriptor(
    properties={
        "numItems": Float64Descriptor(),
        "cursor": UnionDescriptor(variants=[StringDescriptor(), NullDescriptor()]),
    }
)


def build_namespace(collector: SchemaCollector) -> Dict[str, Any]:
    """Module globals served for ``convex.server`` and ``_generated.server``."""
    namespace: Dict[str, Any] = {
        "define_schema": make_define_schema(collector),
        "define_table": define_table,
        "query": query,
        "mutation": mutation,
        "action": action,
        "internal_query": internal_query,
        "internal_mutation": internal_mutation,
        "internal_action": internal_action,
        "http_action": http_action,
        "pagination_opts_validator": pagination_opts_validator,
        "any_api": WILDCARD,
        "components_generic": lambda: {},
    }
    # Generated server modules re-export the *_generic variants under plain names.
    for name in ("query", "mutation", "action", "internal_query", "internal_mutation", "internal_action", "http_action"):
        namespace[f"{name}_generic"] = namespace[name]
    namespace["__all__"] = sorted(namespace)
    namespace["__getattr__"] = type_name_fallback("convex.server")
    return namespace
