"""Textual inspector and command-line entry point for dbprofile."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.logging import TextualHandler
from textual.widgets import Footer, Header

from .config import ConfigurationError, active_environment, load_environment
from .models import Tier
from .providers import EnvironmentSwitchProvider, ReloadProvider
from .resolver import MissingDatabaseConfigurationError, resolve
from .session import InspectorSession, InspectorState
from .widgets import ProfilePanel, StatusBar

LOG = logging.getLogger(__name__)


def _create_session(environment: str | None, env_file: str | None) -> InspectorSession:
    return InspectorSession(lambda: load_environment(env_file), environment=environment)


class InspectorApp(App[None]):
    """Shows the database profile resolved for the active environment."""

    COMMANDS = App.COMMANDS | {EnvironmentSwitchProvider, ReloadProvider}
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-column {
        layout: vertical;
        height: 1fr;
        border-left: solid $surface-darken-1;
        border-right: solid $surface-darken-1;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+r", "reload", "Reload Environment"),
        ("ctrl+p", "command_palette", "Command Palette"),
    ]

    def __init__(self, session: InspectorSession | None = None) -> None:
        super().__init__()
        self._session = session or _create_session(None, ".env")
        self._last_state: InspectorState | None = None
        self._pending_notifications: list[tuple[str, str]] = []
        self._session.subscribe(self._handle_session_state)

    def compose(self) -> ComposeResult:
        """Compose the root layout."""

        yield Header(show_clock=True)
        yield Container(ProfilePanel(self._session), id="main-column")
        yield StatusBar(self._session)
        yield Footer()

    async def on_mount(self) -> None:
        pending, self._pending_notifications = self._pending_notifications, []
        for message, severity in pending:
            self.notify(message, severity=severity)  # type: ignore[arg-type]

    def action_reload(self) -> None:
        self._session.reload()

    @property
    def session(self) -> InspectorSession:
        """Expose the inspector session for providers and tests."""

        return self._session

    def switch_environment(self, name: str) -> None:
        """Resolve and display the requested environment."""

        try:
            self._session.switch(name)
        except ValueError as exc:
            self._post([(str(exc), "error")])

    def _handle_session_state(self, state: InspectorState) -> None:
        if state.resolution is not None:
            state.resolution.report.emit(LOG)
        else:
            LOG.error("%s", state.error)
        notices = _notices_for(state, self._last_state)
        self._last_state = state
        self._post(notices)

    def _post(self, notices: list[tuple[str, str]]) -> None:
        # Toasts need a running app; anything earlier waits for on_mount.
        if not self.is_running:
            self._pending_notifications.extend(notices)
            return
        for message, severity in notices:
            self.notify(message, severity=severity)  # type: ignore[arg-type]


def _notices_for(state: InspectorState, previous: InspectorState | None) -> list[tuple[str, str]]:
    if state.failed:
        reason = (state.error or "Resolution failed.").splitlines()[0][:120]
        return [(f"{state.environment}: {reason}", "error")]
    notices: list[tuple[str, str]] = []
    same_environment = previous is not None and previous.environment == state.environment
    if previous is not None and not same_environment:
        notices.append((f"Switched to environment: {state.environment}", "information"))
    report = state.resolution.report  # type: ignore[union-attr]
    was_fallback = (
        same_environment
        and previous.resolution is not None  # type: ignore[union-attr]
        and previous.resolution.report.tier is Tier.FALLBACK  # type: ignore[union-attr]
    )
    if report.tier is Tier.FALLBACK and not was_fallback:
        notices.append(
            (
                f"{state.environment}: no database configured, using sqlite at {state.profile.storage_path}.",  # type: ignore[union-attr]
                "warning",
            )
        )
    return notices


def check(environment: str | None, env_file: str | None) -> int:
    """Resolve without the UI; returns a process exit status."""

    snapshot = load_environment(env_file)
    name = environment or active_environment(snapshot)
    try:
        resolution = resolve(name, snapshot)
    except MissingDatabaseConfigurationError as exc:
        for diagnostic in exc.diagnostics:
            LOG.log(diagnostic.level, diagnostic.message)
        LOG.error("%s", exc)
        return 1
    except ConfigurationError as exc:
        LOG.error("%s", exc)
        return 1
    resolution.report.emit(LOG)
    for key, value in resolution.profile.summary().items():
        print(f"{key}: {value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbprofile",
        description="Inspect the database profile resolved from environment variables.",
    )
    parser.add_argument(
        "-e",
        "--environment",
        help="Environment to resolve (defaults to APP_ENV, then development).",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="dotenv file layered under the process environment (default: .env).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Resolve without the UI and exit non-zero when configuration is missing.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the inspector, or the headless check with ``--check``."""

    args = build_parser().parse_args(argv)
    if args.check:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
        return check(args.environment, args.env_file)
    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()])
    InspectorApp(_create_session(args.environment, args.env_file)).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
