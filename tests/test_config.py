"""Tests for helper-stub configuration (environment variable and command line)."""

from pathlib import Path

import pytest

from convex_shapes._internal.config import (
    HELPER_STUBS_ENV,
    HelperStubConfig,
    load_helper_stubs,
    parse_stub_options,
)
from convex_shapes.errors import InterceptionConfigError


def test_unset_or_empty_means_no_rules():
    assert load_helper_stubs(environ={}).stubs == {}
    assert load_helper_stubs(environ={HELPER_STUBS_ENV: "  "}).stubs == {}


def test_reads_json_object_in_order():
    raw = '{"lib/auth$": "stubs/auth.py", "^analytics$": "stubs/analytics.py"}'
    config = load_helper_stubs(environ={HELPER_STUBS_ENV: raw})
    assert list(config.stubs) == ["lib/auth$", "^analytics$"]
    assert config.stubs["lib/auth$"] == Path("stubs/auth.py")


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv(HELPER_STUBS_ENV, '{"^sdk$": "sdk_stub.py"}')
    assert load_helper_stubs().stubs == {"^sdk$": Path("sdk_stub.py")}


def test_invalid_json_raises():
    with pytest.raises(InterceptionConfigError, match="not valid JSON"):
        load_helper_stubs(environ={HELPER_STUBS_ENV: "{nope"})


def test_non_object_json_raises():
    with pytest.raises(InterceptionConfigError, match="JSON object"):
        load_helper_stubs(environ={HELPER_STUBS_ENV: '["a", "b"]'})


def test_invalid_pattern_raises():
    with pytest.raises(InterceptionConfigError, match="Invalid helper stubs"):
        load_helper_stubs(environ={HELPER_STUBS_ENV: '{"(unclosed": "stub.py"}'})


def test_parse_stub_options_splits_on_last_equals():
    config = parse_stub_options(["^sdk$=stubs/sdk.py", "a=b=c.py"])
    assert config.stubs == {"^sdk$": Path("stubs/sdk.py"), "a=b": Path("c.py")}


@pytest.mark.parametrize("option", ["no-separator", "=path.py", "pattern="])
def test_parse_stub_options_rejects_malformed(option):
    with pytest.raises(InterceptionConfigError, match="PATTERN=PATH"):
        parse_stub_options([option])


def test_merged_keeps_environment_rules_first():
    env = HelperStubConfig(stubs={"^a$": "a.py", "^b$": "b.py"})
    cli = HelperStubConfig(stubs={"^c$": "c.py", "^a$": "a2.py"})
    merged = env.merged(cli)
    assert list(merged.stubs) == ["^a$", "^b$", "^c$"]
    assert merged.stubs["^a$"] == Path("a2.py")


def test_config_is_frozen():
    config = HelperStubConfig()
    with pytest.raises(Exception):
        config.stubs = {}
