"""Status bar widget that mirrors the inspector session."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from dbprofile.session import InspectorSession, InspectorState


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, session: InspectorSession) -> None:
        super().__init__("", id="status-bar", markup=False)
        self._session = session
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._session.subscribe(self._handle_session_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_session_update(self, state: InspectorState) -> None:
        self.update(render_status(state))


def render_status(state: InspectorState) -> str:
    """One-line summary of the session state."""

    refreshed = state.refreshed_at.astimezone().strftime("%H:%M:%S")
    parts = [f"Environment: {state.environment}"]
    if state.resolution is None:
        reason = (state.error or "unknown error").splitlines()[0][:80]
        parts.append(f"Error: {reason}")
    else:
        report = state.resolution.report
        parts.append(f"Source: {report.tier.value.replace('_', ' ')}")
        parts.append(f"Dialect: {report.dialect}")
        parts.append(f"Password: {'set' if report.password_set else 'not set'}")
    parts.append(f"Refreshed: {refreshed}")
    return " | ".join(parts)


__all__ = ["StatusBar", "render_status"]
