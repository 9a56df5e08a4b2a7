"""Tests for environment snapshot and override helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from dbprofile.config import (
    OVERRIDE_VARIABLES,
    InvalidSettingError,
    ProfileOverrides,
    active_environment,
    first_value,
    load_environment,
    parse_port,
    variable_presence,
)
from dbprofile.models import Diagnostic, NamingConvention, PoolSettings


def test_load_environment_layers_process_over_dotenv(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DB_HOST=file-host\nDB_NAME=file-db\nBARE_KEY\n")

    snapshot = load_environment(env_file, environ={"DB_HOST": "process-host"})

    assert snapshot["DB_HOST"] == "process-host"
    assert snapshot["DB_NAME"] == "file-db"
    assert "BARE_KEY" not in snapshot


def test_load_environment_ignores_missing_file(tmp_path: Path) -> None:
    snapshot = load_environment(tmp_path / "absent.env", environ={"APP_ENV": "test"})

    assert snapshot == {"APP_ENV": "test"}


def test_load_environment_without_file_reads_process(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DBPROFILE_TEST_MARKER", "1")

    snapshot = load_environment(None)

    assert snapshot["DBPROFILE_TEST_MARKER"] == "1"


def test_load_environment_leaves_os_environ_alone(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DBPROFILE_FILE_ONLY", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("DBPROFILE_FILE_ONLY=yes\n")

    snapshot = load_environment(env_file)

    assert snapshot["DBPROFILE_FILE_ONLY"] == "yes"
    assert "DBPROFILE_FILE_ONLY" not in os.environ


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ({}, "development"),
        ({"APP_ENV": "production"}, "production"),
        ({"APP_ENV": "  "}, "development"),
        ({"APP_ENV": "staging"}, "staging"),
        ({"NODE_ENV": "test"}, "test"),
        ({"APP_ENV": "production", "NODE_ENV": "test"}, "production"),
        ({"APP_ENV": "", "NODE_ENV": " production "}, "production"),
    ],
)
def test_active_environment(env: dict[str, str], expected: str) -> None:
    assert active_environment(env) == expected


def test_first_value_skips_empty_entries() -> None:
    env = {"MYSQLHOST": "", "DB_HOST": "fallback"}

    assert first_value(env, ("MYSQLHOST", "DB_HOST")) == "fallback"
    assert first_value(env, ("MISSING",)) is None


def test_variable_presence_reports_flags_only() -> None:
    presence = variable_presence({"MYSQLPASSWORD": "secret", "DB_HOST": ""})

    assert presence["MYSQLPASSWORD"] is True
    assert presence["DB_HOST"] is False
    assert set(presence.values()) <= {True, False}


def test_overrides_default_values() -> None:
    overrides = ProfileOverrides.from_environment({})

    assert overrides.timezone == "+07:00"
    assert overrides.logging_enabled("development") is True
    assert overrides.logging_enabled("test") is False
    assert overrides.pool_settings() == PoolSettings()
    assert overrides.naming_convention() == NamingConvention()


def test_overrides_treat_empty_strings_as_unset() -> None:
    overrides = ProfileOverrides.from_environment({"DB_POOL_MAX": "", "DB_TIMEZONE": ""})

    assert overrides.pool_max == 5
    assert overrides.timezone == "+07:00"


def test_override_variable_names() -> None:
    assert set(OVERRIDE_VARIABLES) == {
        "DB_TIMEZONE",
        "DB_LOGGING",
        "DB_POOL_MAX",
        "DB_POOL_MIN",
        "DB_POOL_ACQUIRE_MS",
        "DB_POOL_IDLE_MS",
        "DB_FREEZE_TABLE_NAME",
    }


def test_overrides_are_frozen() -> None:
    overrides = ProfileOverrides.from_environment({})

    with pytest.raises(ValidationError):
        overrides.pool_max = 10  # type: ignore[misc]


def test_parse_port_bounds() -> None:
    assert parse_port("5432", source="DB_PORT") == 5432
    with pytest.raises(InvalidSettingError, match="DB_PORT"):
        parse_port("0", source="DB_PORT")
    with pytest.raises(InvalidSettingError, match="number"):
        parse_port("x", source="DB_PORT")


@pytest.mark.parametrize("raw", ["3_306", " 3306 ", "+3306", "３３０６", "٣٣٠٦"])
def test_parse_port_accepts_only_ascii_digits(raw: str) -> None:
    with pytest.raises(InvalidSettingError, match="number"):
        parse_port(raw, source="DB_PORT")


def test_overrides_reject_non_ascii_digits() -> None:
    with pytest.raises(InvalidSettingError, match="DB_TIMEZONE"):
        ProfileOverrides.from_environment({"DB_TIMEZONE": "+٠٧:٠٠"})
    with pytest.raises(InvalidSettingError, match="DB_POOL_IDLE_MS"):
        ProfileOverrides.from_environment({"DB_POOL_IDLE_MS": "1_000"})


def test_lenient_overrides_drop_invalid_values() -> None:
    diagnostics: list[Diagnostic] = []

    overrides = ProfileOverrides.from_environment(
        {"DB_TIMEZONE": "UTC", "DB_POOL_MIN": "9", "DB_POOL_ACQUIRE_MS": "1000"},
        strict=False,
        diagnostics=diagnostics,
    )

    assert overrides.timezone == "+07:00"
    assert overrides.pool_settings() == PoolSettings(acquire_timeout_ms=1000)
    assert [d.level for d in diagnostics] == [logging.WARNING, logging.WARNING]
    assert diagnostics[0].message.startswith("Ignoring DB_TIMEZONE:")
    assert diagnostics[1].message.startswith("Ignoring DB_POOL_MIN:")
