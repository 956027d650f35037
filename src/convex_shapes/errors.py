"""
Exception types raised while extracting shapes from schema and function modules.

- ExtractionError is the base for failures that abort a run.
- ModuleLoadError wraps anything that prevents a target module from loading.
- SchemaDefinitionError flags misuse of the schema registrar by target code.
- InterceptionConfigError flags malformed helper-stub rewrite rules.

Notes:
    Unrecognized validator shapes are not errors: the normalizer falls back
    to the ``any`` descriptor and logs a warning.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

__all__ = [
    "ExtractionError",
    "ModuleLoadError",
    "SchemaDefinitionError",
    "InterceptionConfigError",
]


class ExtractionError(RuntimeError):
    """A run could not produce a document."""


class ModuleLoadError(ExtractionError):
    """A schema or function module failed to load."""

    def __init__(self, path: Union[str, Path], reason: str, *, role: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        self.role = role
        label = f"{role} module" if role else "module"
        super().__init__(f"Failed to load {label} '{self.path}': {reason}")


class SchemaDefinitionError(ValueError):
    """define_schema/define_table were used in a way that cannot be extracted."""


class InterceptionConfigError(ValueError):
    """Helper-stub rewrite rules are malformed."""
