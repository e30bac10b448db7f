"""Tests for container wiring."""

import asyncio

from calories_ai.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.analysis_service.model == settings.openai_model
    assert container.analysis_service.timeout_seconds == 540.0
    assert container.meal_log_service.repository.table == "meals"
    asyncio.run(container.close_resources())
