"""Import interception: serve stand-ins in place of the schema library.

Installs a finder at the front of ``sys.meta_path``. Each rewrite rule maps a
regular expression over fully qualified module names to either a built-in
stand-in (a namespace factory) or a replacement source file. Rules are
checked in order, built-ins first; the first match wins.

Target directories are mounted as synthetic packages so that relative imports
between target files work, and top-level imports of a sibling file resolve
to the already-loaded module instead of executing it a second time.
"""

from __future__ import annotations

import importlib
import importlib.abc
import importlib.machinery
import importlib.util
import logging
import re
import sys
import types
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from convex_shapes.errors import InterceptionConfigError
from convex_shapes.stubs import generated, server, values
from convex_shapes.stubs.server import SchemaCollector

logger = logging.getLogger(__name__)

LIBRARY_PACKAGE = "convex"

NamespaceFactory = Callable[[], Dict[str, Any]]


@dataclass(frozen=True)
class RewriteRule:
    """One ``pattern -> replacement`` rule.

    Exactly one of ``factory`` (built-in stand-in) or ``path`` (replacement
    source file) is set. ``package`` stand-ins accept submodule imports.
    """
    pattern: "re.Pattern[str]"
    factory: Optional[NamespaceFactory] = None
    path: Optional[Path] = None
    package: bool = False
    label: str = ""

    def matches(self, fullname: str) -> bool:
        return self.pattern.search(fullname) is not None


def _empty_namespace() -> Dict[str, Any]:
    return {}


def builtin_rules(collector: SchemaCollector) -> List[RewriteRule]:
    """Rules for the library surfaces and the generated scaffolding, bound to ``collector``."""
    lib = re.escape(LIBRARY_PACKAGE)

    def server_factory() -> Dict[str, Any]:
        return server.build_namespace(collector)

    return [
        RewriteRule(re.compile(rf"^{lib}$"), _empty_namespace, package=True, label="library package"),
        RewriteRule(re.compile(rf"^{lib}\.values$"), values.build_namespace, label="values"),
        RewriteRule(re.compile(rf"^{lib}\.server$"), server_factory, label="server"),
        RewriteRule(re.compile(r"(^|\.)_generated$"), _empty_namespace, package=True, label="generated package"),
        RewriteRule(re.compile(r"(^|\.)_generated\.api$"), generated.build_api_namespace, label="generated api"),
        RewriteRule(re.compile(r"(^|\.)_generated\.server$"), server_factory, label="generated server"),
        RewriteRule(
            re.compile(r"(^|\.)_generated\.data_?[mM]odel$"),
            generated.build_data_model_namespace,
            label="generated data model",
        ),
    ]


def helper_rules(stubs: Dict[str, Union[str, Path]]) -> List[RewriteRule]:
    """Rules for caller-supplied replacement files, in the given order."""
    rules = []
    for pattern, path in stubs.items():
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise InterceptionConfigError(f"Invalid helper-stub pattern {pattern!r}: {e}") from e
        rules.append(RewriteRule(compiled, path=Path(path).resolve(), label=f"helper stub {pattern}"))
    return rules


class _StubLoader(importlib.abc.Loader):
    """Executes a stand-in by filling the module with a factory's namespace."""

    def __init__(self, factory: NamespaceFactory):
        self._factory = factory

    def create_module(self, spec):
        return None

    def exec_module(self, module: types.ModuleType) -> None:
        module.__dict__.update(self._factory())


class _AliasLoader(importlib.abc.Loader):
    """Makes a top-level name refer to an already-importable module object."""

    def __init__(self, target: str):
        self._target = target
        self._original_spec = None

    def create_module(self, spec):
        module = importlib.import_module(self._target)
        self._original_spec = module.__spec__
        return module

    def exec_module(self, module: types.ModuleType) -> None:
        # The import system stamped the alias spec onto the shared module.
        module.__spec__ = self._original_spec


def _package_name(directory: Path) -> str:
    name = re.sub(r"\W", "_", directory.name) or "targets"
    if name[0].isdigit():
        name = f"_{name}"
    return name


class Interceptor(importlib.abc.MetaPathFinder):
    """Meta path finder applying rewrite rules; use as a context manager.

    Installation affects imports made after ``install()`` only. ``uninstall()``
    removes the finder and drops every module it served or mounted from
    ``sys.modules``.
    """

    def __init__(self, rules: Sequence[RewriteRule]):
        self.rules: List[RewriteRule] = list(rules)
        self._mounts: Dict[str, Path] = {}
        self._served: set[str] = set()
        self._installed = False
        self._saved_dont_write_bytecode = sys.dont_write_bytecode

    @classmethod
    def for_run(
        cls,
        collector: SchemaCollector,
        helper_stubs: Optional[Dict[str, Union[str, Path]]] = None,
    ) -> "Interceptor":
        """Built-in rules first, then helper stubs."""
        return cls(builtin_rules(collector) + helper_rules(helper_stubs or {}))

    # -- lifecycle ---------------------------------------------------------

    def install(self) -> "Interceptor":
        if self._installed:
            return self
        sys.meta_path.insert(0, self)
        self._saved_dont_write_bytecode = sys.dont_write_bytecode
        # Target trees stay untouched: no __pycache__ directories.
        sys.dont_write_bytecode = True
        importlib.invalidate_caches()
        self._installed = True
        logger.debug("Interception installed with %d rules", len(self.rules))
        return self

    def uninstall(self) -> None:
        if not self._installed:
            return
        try:
            sys.meta_path.remove(self)
        except ValueError:
            pass
        sys.dont_write_bytecode = self._saved_dont_write_bytecode
        for name in list(sys.modules):
            if name in self._served or self._is_mounted_name(name):
                del sys.modules[name]
        self._served.clear()
        self._mounts.clear()
        self._installed = False
        logger.debug("Interception removed")

    def __enter__(self) -> "Interceptor":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.uninstall()

    # -- target packages ---------------------------------------------------

    def _is_mounted_name(self, name: str) -> bool:
        return any(name == pkg or name.startswith(pkg + ".") for pkg in self._mounts)

    def mount(self, directory: Union[str, Path]) -> str:
        """Expose ``directory`` as a package; returns the package name."""
        directory = Path(directory).resolve()
        for pkg, mounted in self._mounts.items():
            if mounted == directory:
                return pkg

        base = _package_name(directory)
        name = base
        suffix = 0
        while self._name_taken(name):
            suffix += 1
            name = f"_{base}_targets{suffix if suffix > 1 else ''}"

        spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
        spec.submodule_search_locations = [str(directory)]
        package = importlib.util.module_from_spec(spec)
        sys.modules[name] = package
        self._mounts[name] = directory
        importlib.invalidate_caches()
        logger.debug("Mounted %s as package %r", directory, name)
        return name

    def _name_taken(self, name: str) -> bool:
        """Never shadow an imported, built-in or importable top-level module."""
        if name in sys.modules or name in self._mounts or name in sys.builtin_module_names:
            return True
        return importlib.machinery.PathFinder.find_spec(name) is not None

    def module_name_for(self, path: Union[str, Path]) -> str:
        """Fully qualified name a target file is loaded under."""
        path = Path(path).resolve()
        return f"{self.mount(path.parent)}.{path.stem}"

    # -- finder ------------------------------------------------------------

    def match(self, fullname: str) -> Optional[RewriteRule]:
        for rule in self.rules:
            if rule.matches(fullname):
                return rule
        return None

    def find_spec(self, fullname, path=None, target=None):
        rule = self.match(fullname)
        if rule is not None:
            self._served.add(fullname)
            logger.debug("Rewriting import %r (%s)", fullname, rule.label)
            if rule.path is not None:
                return importlib.util.spec_from_file_location(fullname, rule.path)
            return importlib.util.spec_from_loader(fullname, _StubLoader(rule.factory), is_package=rule.package)

        if "." not in fullname:
            sibling = self._find_sibling(fullname)
            if sibling is not None:
                self._served.add(fullname)
                return importlib.util.spec_from_loader(fullname, _AliasLoader(sibling))
        return None

    def _find_sibling(self, name: str) -> Optional[str]:
        for pkg, directory in self._mounts.items():
            if (directory / f"{name}.py").is_file() or (directory / name / "__init__.py").is_file():
                return f"{pkg}.{name}"
        return None
