"""Shared test fixtures."""

import pytest

from pe_calculator.config import Settings
from pe_calculator.containers import AppContainer, build_container
from pe_calculator.services.formatting import Formatter
from pe_calculator.services.store import EntryStore


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", debug=True, display_decimals=2)


@pytest.fixture
def store() -> EntryStore:
    return EntryStore()


@pytest.fixture
def formatter() -> Formatter:
    return Formatter()


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)
