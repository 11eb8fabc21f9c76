"""Dependency container wiring for the application."""

from dataclasses import dataclass

from pe_calculator.config import Settings
from pe_calculator.services.formatting import Formatter
from pe_calculator.services.store import EntryStore


@dataclass
class AppContainer:
    """Holds the session store and its collaborators."""

    settings: Settings
    store: EntryStore
    formatter: Formatter


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container with one empty store."""
    resolved_settings = settings or Settings()
    return AppContainer(
        settings=resolved_settings,
        store=EntryStore(debug=resolved_settings.debug),
        formatter=Formatter(decimals=resolved_settings.display_decimals),
    )
