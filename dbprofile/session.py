"""Inspector session tracking the active environment and its resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

from .config import ENVIRONMENTS, ConfigurationError, active_environment, load_environment
from .models import ConnectionProfile, Resolution
from .resolver import resolve

SnapshotLoader = Callable[[], Mapping[str, str]]
SessionListener = Callable[["InspectorState"], None]


@dataclass(frozen=True, slots=True)
class InspectorState:
    """Latest resolution (or failure) for the active environment."""

    environment: str
    resolution: Resolution | None
    error: str | None
    refreshed_at: datetime

    @property
    def profile(self) -> ConnectionProfile | None:
        if self.resolution is None:
            return None
        return self.resolution.profile

    @property
    def failed(self) -> bool:
        return self.error is not None


class InspectorSession:
    """Resolves one environment at a time and notifies listeners on change."""

    def __init__(
        self,
        loader: SnapshotLoader | None = None,
        *,
        environment: str | None = None,
        environments: tuple[str, ...] = ENVIRONMENTS,
    ) -> None:
        self._loader = loader or load_environment
        self._environments = environments
        self._listeners: set[SessionListener] = set()
        snapshot = self._loader()
        name = environment or active_environment(snapshot)
        if name not in self._environments:
            self._environments = (*self._environments, name)
        self._snapshot = snapshot
        self._state = self._resolve(name, snapshot)

    @property
    def environments(self) -> tuple[str, ...]:
        return self._environments

    @property
    def state(self) -> InspectorState:
        return self._state

    @property
    def environment(self) -> str:
        return self._state.environment

    def switch(self, environment: str) -> InspectorState:
        """Resolve ``environment`` from a fresh snapshot and make it active."""

        self._check_environment(environment)
        self._snapshot = self._loader()
        self._state = self._resolve(environment, self._snapshot)
        self._notify()
        return self._state

    def preview(self, environment: str) -> InspectorState:
        """Resolve ``environment`` from the last snapshot without activating it."""

        if environment == self._state.environment:
            return self._state
        self._check_environment(environment)
        return self._resolve(environment, self._snapshot)

    def reload(self) -> InspectorState:
        """Re-read the environment and resolve the active environment again."""

        return self.switch(self._state.environment)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to state updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _check_environment(self, name: str) -> None:
        if name not in self._environments:
            raise ValueError(f"Environment '{name}' not found.")

    @staticmethod
    def _resolve(environment: str, snapshot: Mapping[str, str]) -> InspectorState:
        try:
            resolution = resolve(environment, snapshot)
        except ConfigurationError as exc:
            return InspectorState(
                environment=environment,
                resolution=None,
                error=str(exc),
                refreshed_at=datetime.now(tz=timezone.utc),
            )
        return InspectorState(
            environment=environment,
            resolution=resolution,
            error=None,
            refreshed_at=datetime.now(tz=timezone.utc),
        )

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self._state)


__all__ = ["InspectorSession", "InspectorState", "SessionListener", "SnapshotLoader"]
