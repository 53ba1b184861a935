"""
Environment Getter Tests

Key Scenarios:
- Unset variables return the default
- Unparsable values fall back to the default without raising
- Set values are parsed into the requested type

Usage:
    pytest tests/config/test_env.py
"""

from datetime import timedelta

import pytest

from OpsKit.Config import (
    get_env_bool,
    get_env_duration,
    get_env_float,
    get_env_int,
    get_env_str,
    non_none_or_default,
)

KEY = "OPSKIT_TEST_VALUE"


@pytest.fixture(autouse=True)
def _clear_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(KEY, raising=False)


# --- Test Cases ---


def test_unset_variables_return_defaults() -> None:
    assert get_env_str(KEY, "fallback") == "fallback"
    assert get_env_int(KEY, 3) == 3
    assert get_env_float(KEY, 1.5) == 1.5
    assert get_env_bool(KEY, True) is True
    assert get_env_duration(KEY, timedelta(seconds=5)) == timedelta(seconds=5)


def test_empty_string_counts_as_set(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(KEY, "")
    assert get_env_str(KEY, "fallback") == ""
    assert get_env_int(KEY, 3) == 3


def test_set_values_are_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(KEY, " 42 ")
    assert get_env_int(KEY, 0) == 42
    assert get_env_float(KEY, 0.0) == 42.0

    monkeypatch.setenv(KEY, "TRUE")
    assert get_env_bool(KEY, False) is True

    monkeypatch.setenv(KEY, "1m30s")
    assert get_env_duration(KEY, timedelta(0)) == timedelta(seconds=90)


@pytest.mark.parametrize("raw", ["abc", "4.2", "yes"])
def test_unparsable_values_return_defaults(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv(KEY, raw)
    assert get_env_int(KEY, 7) == 7
    assert get_env_bool(KEY, False) is False
    assert get_env_duration(KEY, timedelta(seconds=1)) == timedelta(seconds=1)


def test_non_none_or_default() -> None:
    assert non_none_or_default(None, "d") == "d"
    assert non_none_or_default("", "d") == ""
    assert non_none_or_default(0, 9) == 0


def test_out_of_range_duration_returns_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(KEY, "99999999999999h")
    assert get_env_duration(KEY, timedelta(seconds=1)) == timedelta(seconds=1)
