"""Public API for convex_shapes.

High-level functions that run one extraction and return the complete
document. The CLI is a thin wrapper around ``extract`` and ``write_document``.
"""

import contextlib
import importlib.util
import logging
import os
import sys
import types
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, TextIO, Tuple, Union

# Internal imports (not exposed to users)
from convex_shapes._internal.config import HelperStubConfig, load_helper_stubs
from convex_shapes._internal.interception import Interceptor
from convex_shapes.errors import ModuleLoadError
from convex_shapes.kernel.descriptor import ObjectDescriptor
from convex_shapes.kernel.document import ExtractionDocument, FunctionParam, FunctionRecord, SchemaSection
from convex_shapes.kernel.normalize import normalize
from convex_shapes.stubs.server import RegisteredFunction, SchemaCollector

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike, Path]


def _normalize_path(path: PathLike) -> Path:
    """Normalize path input to an absolute Path object."""
    return (Path(path) if not isinstance(path, Path) else path).resolve()


def load_target_module(path: PathLike, interceptor: Interceptor, role: str) -> types.ModuleType:
    """Execute one target file inside the installed interception.

    The file is loaded as a submodule of its mounted directory package, so
    relative imports work and a module imported earlier (for example the
    schema module imported by a function module) is not executed again.
    Output the module prints goes to stderr; stdout is reserved for the document.

    Raises:
        ModuleLoadError: file missing, unresolvable import, or an exception
            raised by the module body (sys.exit() included).
    """
    path = _normalize_path(path)
    if not path.is_file():
        raise ModuleLoadError(path, "file not found", role=role)

    name = interceptor.module_name_for(path)
    existing = sys.modules.get(name)
    if existing is not None:
        logger.info("Reusing already loaded %s module %s", role, path)
        return existing

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(path, "not a loadable Python source file", role=role)

    logger.info("Loading %s module %s", role, path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        with contextlib.redirect_stdout(sys.stderr):
            spec.loader.exec_module(module)
    except (Exception, SystemExit) as e:
        sys.modules.pop(name, None)
        raise ModuleLoadError(path, f"{type(e).__name__}: {e}", role=role) from e
    return module


def exported_bindings(module: types.ModuleType) -> Iterator[Tuple[str, Any]]:
    """Public bindings of a module: ``__all__`` if defined, else non-underscore names in definition order."""
    names = getattr(module, "__all__", None)
    if names is not None:
        for name in names:
            if hasattr(module, name):
                yield name, getattr(module, name)
        return
    for name, value in list(vars(module).items()):
        if not name.startswith("_"):
            yield name, value


def function_record(name: str, registered: RegisteredFunction, file_name: str) -> FunctionRecord:
    """Normalize a registrar result into a function record.

    Missing ``args`` means no parameters; missing ``returns`` means no return
    type (None), not a ``null`` descriptor.
    """
    params: List[FunctionParam] = []
    if registered.args is not None:
        normalized = normalize(registered.args)
        if isinstance(normalized, ObjectDescriptor):
            params = [FunctionParam(name=k, data_type=dt) for k, dt in normalized.properties.items()]
        else:
            logger.warning(
                "Function '%s' in %s: args validator is %s, not an object; no params extracted",
                name, file_name, normalized.type,
            )

    return_type = normalize(registered.returns) if registered.returns is not None else None
    return FunctionRecord(
        name=name,
        type=registered.kind,
        params=params,
        return_type=return_type,
        file_name=file_name,
    )


def extract_functions(module: types.ModuleType, file_name: str) -> List[FunctionRecord]:
    """Function records for every registered export of ``module``; other exports are skipped."""
    records = []
    for name, value in exported_bindings(module):
        if isinstance(value, RegisteredFunction):
            records.append(function_record(name, value, file_name))
    return records


def _resolve_helper_stubs(helper_stubs: Union[HelperStubConfig, Mapping, None]) -> HelperStubConfig:
    if helper_stubs is None:
        return load_helper_stubs()
    if isinstance(helper_stubs, HelperStubConfig):
        return helper_stubs
    return HelperStubConfig(stubs=dict(helper_stubs))


def extract(
    schema_path: PathLike,
    function_paths: Iterable[PathLike] = (),
    helper_stubs: Union[HelperStubConfig, Mapping, None] = None,
) -> ExtractionDocument:
    """Run one extraction.

    Args:
        schema_path: Module calling ``define_schema``; loaded for its side effect only.
        function_paths: Function modules, loaded in order after the schema.
        helper_stubs: Extra ``pattern -> path`` rewrite rules. None reads them
            from the TYPEGEN_HELPER_STUBS environment variable.

    Returns:
        The complete document. Nothing partial is ever returned: any load
        failure raises ModuleLoadError.
    """
    stubs = _resolve_helper_stubs(helper_stubs)
    collector = SchemaCollector()
    functions: List[FunctionRecord] = []

    with Interceptor.for_run(collector, stubs.stubs) as interceptor:
        load_target_module(schema_path, interceptor, role="schema")
        collector.close()
        logger.info("Collected %d tables", len(collector.tables))

        for function_path in function_paths:
            module = load_target_module(function_path, interceptor, role="function")
            records = extract_functions(module, file_name=_normalize_path(function_path).stem)
            logger.info("Collected %d functions from %s", len(records), function_path)
            functions.extend(records)

    return ExtractionDocument(schema=SchemaSection(tables=collector.tables), functions=functions)


def write_document(document: ExtractionDocument, stream: Optional[TextIO] = None) -> None:
    """Write the document as one JSON line (stdout by default)."""
    out = stream if stream is not None else sys.stdout
    out.write(document.to_json() + "\n")
    out.flush()
