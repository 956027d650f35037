"""convex_shapes: extract table and function shapes from Convex schema modules."""

import logging
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("convex-shapes")
except PackageNotFoundError:
    __version__ = "dev"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API exports
from convex_shapes.api import extract, write_document
from convex_shapes.codes import FunctionKind
from convex_shapes.errors import ExtractionError, ModuleLoadError, SchemaDefinitionError, InterceptionConfigError
from convex_shapes.kernel.document import ExtractionDocument, FunctionRecord, TableDescriptor
from convex_shapes.kernel.normalize import normalize

__all__ = [
    "__version__",
    "extract",
    "write_document",
    "normalize",
    "FunctionKind",
    "ExtractionDocument",
    "FunctionRecord",
    "TableDescriptor",
    "ExtractionError",
    "ModuleLoadError",
    "SchemaDefinitionError",
    "InterceptionConfigError",
]
