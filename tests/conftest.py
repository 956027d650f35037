"""Pytest configuration for tests.

No sys.path hacks - tests import the installed convex_shapes package.
Target modules under fixtures/ are only ever executed through the extractor.
"""

import sys

import pytest
from pathlib import Path

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolated_run(monkeypatch):
    """No helper stubs leak in from the environment; no finder leaks out of a test."""
    monkeypatch.delenv("TYPEGEN_HELPER_STUBS", raising=False)
    meta_path_before = list(sys.meta_path)
    yield
    assert sys.meta_path == meta_path_before, "an Interceptor was left installed"


@pytest.fixture
def basic_dir() -> Path:
    return FIXTURES / "basic"


@pytest.fixture
def write_module(tmp_path):
    """Write a target module under tmp_path/<package>/<name>.py and return its path."""
    def _write(name: str, source: str, package: str = "convex_app") -> Path:
        directory = tmp_path / package
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.py"
        path.write_text(source, encoding="utf-8")
        return path
    return _write
