"""ASGI entrypoint for the Calories AI API."""

from calories_ai.api.app import create_app
from calories_ai.containers import build_container

app = create_app(build_container())
