"""Main panel showing the resolved profile of the active environment."""

from __future__ import annotations

import logging
from typing import Callable

from textual.widgets import Static

from dbprofile.models import ConnectionProfile
from dbprofile.session import InspectorSession, InspectorState

_LABEL_WIDTH = 12


class ProfilePanel(Static):
    """Read-only view over the latest inspector state."""

    DEFAULT_CSS = """
    ProfilePanel {
        height: 1fr;
        padding: 1 2;
        overflow-y: auto;
    }
    ProfilePanel.failed {
        color: $error;
    }
    """

    def __init__(self, session: InspectorSession) -> None:
        super().__init__("", id="profile-panel", markup=False)
        self._session = session
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._session.subscribe(self._handle_session_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_session_update(self, state: InspectorState) -> None:
        self.set_class(state.failed, "failed")
        self.update(render_profile(state))


def render_profile(state: InspectorState) -> str:
    """Plain-text rendering of a state; passwords are never shown."""

    lines = [_row("Environment", state.environment)]
    if state.resolution is None:
        lines.append("")
        lines.append(state.error or "Resolution failed.")
        return "\n".join(lines)

    profile = state.resolution.profile
    report = state.resolution.report
    lines.append(_row("Source", report.tier.value.replace("_", " ")))
    lines.extend(_profile_rows(profile))
    if report.diagnostics:
        lines.append("")
        lines.append("Diagnostics")
        for diagnostic in report.diagnostics:
            lines.append(f"  {logging.getLevelName(diagnostic.level):<8} {diagnostic.message}")
    return "\n".join(lines)


def _profile_rows(profile: ConnectionProfile) -> list[str]:
    rows = [_row("Dialect", profile.dialect)]
    if profile.is_embedded:
        rows.append(_row("Storage", profile.storage_path or ""))
    else:
        rows.append(_row("Host", profile.host or ""))
        rows.append(_row("Port", str(profile.port) if profile.port is not None else "driver default"))
        rows.append(_row("Database", profile.database or ""))
        rows.append(_row("Username", profile.username or ""))
        rows.append(_row("Password", "set" if profile.password else "not set"))
    rows.append(_row("Timezone", profile.timezone))
    rows.append(_row("Logging", "on" if profile.logging_enabled else "off"))
    pool = profile.pool
    rows.append(
        _row(
            "Pool",
            f"max={pool.max} min={pool.min} acquire={pool.acquire_timeout_ms}ms idle={pool.idle_timeout_ms}ms",
        )
    )
    if profile.tls is None:
        rows.append(_row("TLS", "off"))
    else:
        verify = "verify peer" if profile.tls.reject_unauthorized else "no peer verification"
        rows.append(_row("TLS", f"{'required' if profile.tls.require else 'enabled'}, {verify}"))
    naming = profile.naming
    rows.append(
        _row(
            "Naming",
            f"timestamps={naming.timestamps} underscored={naming.underscored} "
            f"freeze_table_name={naming.freeze_table_name}",
        )
    )
    return rows


def _row(label: str, value: str) -> str:
    return f"{label:<{_LABEL_WIDTH}}{value}"


__all__ = ["ProfilePanel", "render_profile"]
