"""ASGI entrypoint for the VegWise API."""

from vegwise.api.app import create_app
from vegwise.containers import build_container

app = create_app(build_container())
