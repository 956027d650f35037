"""Instrumented stand-ins served to target modules in place of the schema library."""

from .generated import WILDCARD, Wildcard
from .server import RegisteredFunction, SchemaCollector, TableBuilder, pagination_opts_validator
from .values import Values, v

__all__ = [
    "WILDCARD",
    "Wildcard",
    "RegisteredFunction",
    "SchemaCollector",
    "TableBuilder",
    "pagination_opts_validator",
    "Values",
    "v",
]
