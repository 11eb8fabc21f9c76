"""ASGI entrypoint for the calculator API."""

from pe_calculator.api.app import create_app
from pe_calculator.containers import build_container

app = create_app(build_container())
