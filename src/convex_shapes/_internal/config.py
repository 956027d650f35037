"""Helper-stub configuration: extra import rewrite rules supplied by the caller."""

import json
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from convex_shapes.errors import InterceptionConfigError

HELPER_STUBS_ENV = "TYPEGEN_HELPER_STUBS"


class HelperStubConfig(BaseModel):
    """Ordered ``pattern -> replacement module path`` rules.

    Patterns are regular expressions searched against the fully qualified
    module name being imported.
    """
    stubs: Dict[str, Path] = {}

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator('stubs')
    @classmethod
    def validate_patterns(cls, v: Dict[str, Path]) -> Dict[str, Path]:
        """Every key must compile as a regular expression."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid helper-stub pattern {pattern!r}: {e}")
        return v

    def merged(self, other: "HelperStubConfig") -> "HelperStubConfig":
        """Rules of ``self`` first, then ``other`` (a repeated pattern takes the later path)."""
        stubs = dict(self.stubs)
        stubs.update(other.stubs)
        return HelperStubConfig(stubs=stubs)


def _build(stubs: Mapping, source: str) -> HelperStubConfig:
    try:
        return HelperStubConfig(stubs=dict(stubs))
    except ValidationError as e:
        raise InterceptionConfigError(f"Invalid helper stubs from {source}: {e}") from e


def load_helper_stubs(environ: Optional[Mapping[str, str]] = None) -> HelperStubConfig:
    """Read rules from the TYPEGEN_HELPER_STUBS environment variable (a JSON object).

    Unset or empty means no extra rules.
    """
    env = os.environ if environ is None else environ
    raw = env.get(HELPER_STUBS_ENV, "").strip()
    if not raw:
        return HelperStubConfig()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InterceptionConfigError(f"{HELPER_STUBS_ENV} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InterceptionConfigError(
            f"{HELPER_STUBS_ENV} must be a JSON object of pattern -> path, got {type(data).__name__}"
        )
    return _build(data, HELPER_STUBS_ENV)


def parse_stub_options(options: Iterable[str]) -> HelperStubConfig:
    """Parse ``PATTERN=PATH`` command line values (split on the last '=')."""
    stubs: Dict[str, str] = {}
    for option in options:
        pattern, sep, path = option.rpartition("=")
        if not sep or not pattern or not path:
            raise InterceptionConfigError(f"Helper stub must look like PATTERN=PATH, got {option!r}")
        stubs[pattern] = path
    return _build(stubs, "command line")
