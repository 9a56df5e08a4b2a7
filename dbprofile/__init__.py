"""Database connection profiles resolved from environment variables."""

from __future__ import annotations

from .config import ConfigurationError, InvalidSettingError, load_environment
from .models import (
    ConnectionProfile,
    Diagnostic,
    Dialect,
    NamingConvention,
    ParsedConnectionString,
    PoolSettings,
    Resolution,
    ResolutionReport,
    Tier,
    TlsOptions,
)
from .resolver import (
    MissingDatabaseConfigurationError,
    ProfileMap,
    active_profile,
    load_profiles,
    resolve,
    resolve_profile,
)
from .urls import parse_connection_string

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ConnectionProfile",
    "Diagnostic",
    "Dialect",
    "InvalidSettingError",
    "MissingDatabaseConfigurationError",
    "NamingConvention",
    "ParsedConnectionString",
    "PoolSettings",
    "ProfileMap",
    "Resolution",
    "ResolutionReport",
    "Tier",
    "TlsOptions",
    "__version__",
    "active_profile",
    "load_environment",
    "load_profiles",
    "parse_connection_string",
    "resolve",
    "resolve_profile",
]
