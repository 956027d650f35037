"""Stand-ins for generated scaffolding (``_generated/api``, ``_generated/data_model``).

Target modules reference generated handles such as ``api.games.win_game`` or
``internal.players.create`` at import time, before any code generation has
run. The wildcard satisfies those references.
"""

from __future__ import annotations

from typing import Any, Callable, Dict


class Wildcard:
    """Every attribute access, item access and call yields the same wildcard."""

    __slots__ = ()

    def __getattr__(self, name: str) -> "Wildcard":
        # Dunder probes (copy, pickle, inspect.unwrap) must keep failing.
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        return self

    def __getitem__(self, key: Any) -> "Wildcard":
        return self

    def __call__(self, *args: Any, **kwargs: Any) -> "Wildcard":
        return self

    def __repr__(self) -> str:
        return "<wildcard>"


WILDCARD = Wildcard()


def type_name_fallback(module_name: str) -> Callable[[str], Any]:
    """Module ``__getattr__`` resolving capitalized names (types, contexts) to the wildcard."""

    def __getattr__(name: str) -> Any:
        if name[:1].isupper():
            return WILDCARD
        raise AttributeError(f"module {module_name!r} has no attribute {name!r}")

    return __getattr__


def _any_name(name: str) -> Any:
    if name.startswith("__") and name.endswith("__"):
        raise AttributeError(name)
    return WILDCARD


def build_api_namespace() -> Dict[str, Any]:
    """Module globals served for ``_generated.api``."""
    return {
        "api": WILDCARD,
        "internal": WILDCARD,
        "components": WILDCARD,
        "__all__": ["api", "internal", "components"],
        "__getattr__": _any_name,
    }


def build_data_model_namespace() -> Dict[str, Any]:
    """Module globals served for ``_generated.data_model``: every name is a wildcard."""
    return {"__all__": [], "__getattr__": _any_name}
