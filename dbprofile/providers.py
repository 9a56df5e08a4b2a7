"""Command palette providers for the inspector."""

from __future__ import annotations

from typing import Iterator, NamedTuple

from textual.command import DiscoveryHit, Hit, Hits, Provider
from textual.types import IgnoreReturnCallbackType

from .models import Tier
from .session import InspectorSession, InspectorState


class PaletteEntry(NamedTuple):
    label: str
    help: str
    command: IgnoreReturnCallbackType


def source_label(state: InspectorState) -> str:
    """Short description of where an environment's profile comes from."""

    if state.resolution is None:
        return "missing configuration"
    report = state.resolution.report
    if report.tier is Tier.FALLBACK:
        return f"fallback {report.dialect}"
    return f"{report.tier.value.replace('_', ' ')} {report.dialect}"


class SessionProvider(Provider):
    """Base provider that lists entries derived from the app's inspector session."""

    @property
    def session(self) -> InspectorSession | None:
        session = getattr(self.app, "session", None)
        return session if isinstance(session, InspectorSession) else None

    def entries(self, session: InspectorSession) -> Iterator[PaletteEntry]:
        raise NotImplementedError

    async def search(self, query: str) -> Hits:
        session = self.session
        if session is None:
            return
        matcher = self.matcher(query)
        for entry in self.entries(session):
            score = matcher.match(entry.label)
            if score > 0:
                yield Hit(
                    score=score,
                    match_display=matcher.highlight(entry.label),
                    command=entry.command,
                    help=entry.help,
                )

    async def discover(self) -> Hits:
        session = self.session
        if session is None:
            return
        for entry in self.entries(session):
            yield DiscoveryHit(display=entry.label, command=entry.command, help=entry.help)


class EnvironmentSwitchProvider(SessionProvider):
    """Switch the inspector to another environment."""

    def entries(self, session: InspectorSession) -> Iterator[PaletteEntry]:
        for name in session.environments:
            marker = " (active)" if name == session.environment else ""
            yield PaletteEntry(
                label=f"Switch to environment: {name}",
                help=f"{name} · {source_label(session.preview(name))}{marker}",
                command=self._switch_to(name),
            )

    def _switch_to(self, name: str) -> IgnoreReturnCallbackType:
        async def _run() -> None:
            self.app.switch_environment(name)  # type: ignore[attr-defined]

        return _run


class ReloadProvider(SessionProvider):
    """Re-read the environment and resolve the active environment again."""

    def entries(self, session: InspectorSession) -> Iterator[PaletteEntry]:
        async def _run() -> None:
            session.reload()

        yield PaletteEntry(
            label="Reload environment variables",
            help=f"Resolve {session.environment} again from a fresh snapshot (Ctrl+R).",
            command=_run,
        )


__all__ = ["EnvironmentSwitchProvider", "PaletteEntry", "ReloadProvider", "SessionProvider", "source_label"]
