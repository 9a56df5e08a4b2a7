"""Environment-variable settings feeding profile resolution."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import Diagnostic, NamingConvention, PoolSettings

EnvironmentSnapshot = Mapping[str, str]

ENVIRONMENTS: tuple[str, ...] = ("development", "test", "production")
DEFAULT_ENVIRONMENT = "development"
PRODUCTION = "production"
TEST = "test"

DEV_STORAGE_PATH = "./dev.sqlite"

APP_ENV = "APP_ENV"
NODE_ENV = "NODE_ENV"
ENVIRONMENT_VARIABLES = (APP_ENV, NODE_ENV)
DATABASE_URL = "DATABASE_URL"
DB_DIALECT = "DB_DIALECT"

# Platform-specific name first, generic name second.
USER_VARIABLES = ("MYSQLUSER", "DB_USER")
PASSWORD_VARIABLES = ("MYSQLPASSWORD", "DB_PASSWORD")
DATABASE_VARIABLES = ("MYSQLDATABASE", "DB_NAME")
HOST_VARIABLES = ("MYSQLHOST", "DB_HOST")
PORT_VARIABLES = ("MYSQLPORT", "DB_PORT")

PRESENCE_VARIABLES: tuple[str, ...] = (
    "MYSQLHOST",
    "MYSQLDATABASE",
    "MYSQLUSER",
    "MYSQLPASSWORD",
    "DB_HOST",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    DATABASE_URL,
)


class ConfigurationError(RuntimeError):
    """Raised when the environment cannot produce a usable database profile."""


class InvalidSettingError(ConfigurationError):
    """Raised when a recognised variable holds a value of the wrong shape."""


_ASCII_DIGITS = re.compile(r"[0-9]+")


def first_value(env: EnvironmentSnapshot, names: tuple[str, ...]) -> str | None:
    """Return the first non-empty value among ``names``."""

    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def variable_presence(env: EnvironmentSnapshot) -> dict[str, bool]:
    """Report which connection variables are set without exposing values."""

    return {name: bool(env.get(name)) for name in PRESENCE_VARIABLES}


class ProfileOverrides(BaseModel):
    """Optional tuning variables shared by every resolution tier."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    timezone: str = Field(default="+07:00", alias="DB_TIMEZONE", pattern=r"^[+-][0-9]{2}:[0-9]{2}$")
    logging_flag: bool | None = Field(default=None, alias="DB_LOGGING")
    pool_max: int = Field(default=5, alias="DB_POOL_MAX", gt=0)
    pool_min: int = Field(default=0, alias="DB_POOL_MIN", ge=0)
    pool_acquire_ms: int = Field(default=30000, alias="DB_POOL_ACQUIRE_MS", gt=0)
    pool_idle_ms: int = Field(default=10000, alias="DB_POOL_IDLE_MS", ge=0)
    freeze_table_name: bool = Field(default=False, alias="DB_FREEZE_TABLE_NAME")

    @field_validator("pool_max", "pool_min", "pool_acquire_ms", "pool_idle_ms", mode="before")
    @classmethod
    def _require_plain_digits(cls, value: object) -> object:
        if isinstance(value, str) and not _ASCII_DIGITS.fullmatch(value):
            raise ValueError("must be a whole number written with 0-9")
        return value

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> ProfileOverrides:
        if self.pool_min > self.pool_max:
            raise ValueError("DB_POOL_MIN cannot exceed DB_POOL_MAX")
        return self

    @classmethod
    def from_environment(
        cls,
        env: EnvironmentSnapshot,
        *,
        strict: bool = True,
        diagnostics: list[Diagnostic] | None = None,
    ) -> ProfileOverrides:
        """Build overrides from a snapshot; empty values count as unset.

        With ``strict`` an invalid value raises :class:`InvalidSettingError`.
        Otherwise the offending variables are dropped so their defaults apply,
        and a WARNING is appended to ``diagnostics`` for each of them.
        """

        data: dict[str, str] = {}
        for name in OVERRIDE_VARIABLES:
            value = env.get(name)
            if value:
                data[name] = value
        while True:
            try:
                return cls.model_validate(data)
            except ValidationError as exc:
                if strict:
                    raise InvalidSettingError(_describe(exc)) from exc
                rejected = _rejected_variables(exc, data)
                if not rejected:
                    raise InvalidSettingError(_describe(exc)) from exc
            for name, reason in rejected.items():
                del data[name]
                if diagnostics is not None:
                    diagnostics.append(
                        Diagnostic(logging.WARNING, f"Ignoring {name}: {reason}; using the default.")
                    )

    def logging_enabled(self, environment: str) -> bool:
        if self.logging_flag is not None:
            return self.logging_flag
        return environment == DEFAULT_ENVIRONMENT

    def pool_settings(self) -> PoolSettings:
        return PoolSettings(
            max=self.pool_max,
            min=self.pool_min,
            acquire_timeout_ms=self.pool_acquire_ms,
            idle_timeout_ms=self.pool_idle_ms,
        )

    def naming_convention(self) -> NamingConvention:
        return NamingConvention(freeze_table_name=self.freeze_table_name)


OVERRIDE_VARIABLES: tuple[str, ...] = tuple(
    field.alias for field in ProfileOverrides.model_fields.values() if field.alias
)


def _describe(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"]
        problems.append(f"{location}: {message}" if location else message)
    return "Invalid database settings: " + "; ".join(problems)


_POOL_VARIABLES = ("DB_POOL_MAX", "DB_POOL_MIN")


def _rejected_variables(exc: ValidationError, data: Mapping[str, str]) -> dict[str, str]:
    rejected: dict[str, str] = {}
    for error in exc.errors():
        if error["loc"]:
            names: tuple[str, ...] = (str(error["loc"][0]),)
        else:
            # Cross-field checks carry no location; only the pool bounds have one.
            names = _POOL_VARIABLES
        for name in names:
            if name in data:
                rejected.setdefault(name, error["msg"])
    return rejected


def parse_port(raw: str, *, source: str) -> int:
    """Convert a port variable to an integer in the TCP range."""

    if not _ASCII_DIGITS.fullmatch(raw):
        raise InvalidSettingError(f"{source} must be a number, got {raw!r}.")
    port = int(raw)
    if not 0 < port <= 65535:
        raise InvalidSettingError(f"{source} must be between 1 and 65535, got {port}.")
    return port


def load_environment(
    env_file: str | Path | None = ".env",
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Snapshot the process environment layered over an optional dotenv file.

    Process variables win over file entries. Neither source is mutated.
    """

    snapshot: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        for key, value in dotenv_values(Path(env_file)).items():
            if value is not None:
                snapshot[key] = value
    snapshot.update(os.environ if environ is None else environ)
    return snapshot


def active_environment(env: EnvironmentSnapshot) -> str:
    """Name of the environment the process runs as.

    ``APP_ENV`` wins; ``NODE_ENV`` is honoured for deployments that already
    export it for a JavaScript service sharing the same environment.
    """

    for name in ENVIRONMENT_VARIABLES:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return DEFAULT_ENVIRONMENT


__all__ = [
    "APP_ENV",
    "ConfigurationError",
    "DATABASE_URL",
    "DATABASE_VARIABLES",
    "DB_DIALECT",
    "DEFAULT_ENVIRONMENT",
    "DEV_STORAGE_PATH",
    "ENVIRONMENTS",
    "ENVIRONMENT_VARIABLES",
    "EnvironmentSnapshot",
    "HOST_VARIABLES",
    "InvalidSettingError",
    "NODE_ENV",
    "OVERRIDE_VARIABLES",
    "PASSWORD_VARIABLES",
    "PORT_VARIABLES",
    "PRESENCE_VARIABLES",
    "PRODUCTION",
    "ProfileOverrides",
    "TEST",
    "USER_VARIABLES",
    "active_environment",
    "first_value",
    "load_environment",
    "parse_port",
    "variable_presence",
]
