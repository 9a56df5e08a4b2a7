"""Widget library for the Textual UI."""

from __future__ import annotations

from .profile_panel import ProfilePanel
from .status_bar import StatusBar

__all__ = ["ProfilePanel", "StatusBar"]
