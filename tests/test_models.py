"""Tests for profile invariants."""

from __future__ import annotations

import dataclasses

import pytest

from dbprofile.models import ConnectionProfile, normalize_dialect


def test_sqlite_profile_requires_storage() -> None:
    with pytest.raises(ValueError, match="storage path"):
        ConnectionProfile(environment="test", dialect="sqlite")


def test_sqlite_profile_rejects_host_fields() -> None:
    with pytest.raises(ValueError, match="host or credential"):
        ConnectionProfile(environment="test", dialect="sqlite", storage_path=":memory:", host="h")


def test_network_profile_requires_host_database_and_username() -> None:
    with pytest.raises(ValueError, match="host, database and username"):
        ConnectionProfile(environment="test", dialect="mysql", host="h", database="d")


def test_network_profile_rejects_storage_path() -> None:
    with pytest.raises(ValueError, match="storage path"):
        ConnectionProfile(
            environment="test",
            dialect="mysql",
            host="h",
            database="d",
            username="u",
            storage_path="./dev.sqlite",
        )


@pytest.mark.parametrize("dialect", ["mysql", "postgres"])
def test_known_network_dialects_require_port(dialect: str) -> None:
    with pytest.raises(ValueError, match="need a port"):
        ConnectionProfile(environment="test", dialect=dialect, host="h", database="d", username="u")


def test_other_dialects_may_leave_port_to_driver() -> None:
    profile = ConnectionProfile(environment="test", dialect="mssql", host="h", database="d", username="u")

    assert profile.port is None


def test_profile_is_read_only() -> None:
    profile = ConnectionProfile(environment="test", dialect="sqlite", storage_path=":memory:")

    with pytest.raises(dataclasses.FrozenInstanceError):
        profile.timezone = "+00:00"  # type: ignore[misc]


def test_profile_repr_hides_password() -> None:
    profile = ConnectionProfile(
        environment="production",
        dialect="postgres",
        host="h",
        port=5432,
        database="d",
        username="u",
        password="hunter2",
    )

    assert "hunter2" not in repr(profile)
    assert profile.is_embedded is False


def test_normalize_dialect_aliases() -> None:
    assert normalize_dialect("postgresql") == "postgres"
    assert normalize_dialect("postgres") == "postgres"
    assert normalize_dialect("mysql") == "mysql"
    assert normalize_dialect("mariadb") == "mariadb"
