"""Shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from habitsheet.core.registry import COMMAND_REGISTRY


@pytest.fixture(autouse=True)
def _restore_command_handlers() -> Iterator[None]:
    """Slash-command handlers are module state; put the originals back after each test."""
    saved = {name: entry["handler"] for name, entry in COMMAND_REGISTRY.items()}
    yield
    for name, handler in saved.items():
        COMMAND_REGISTRY[name]["handler"] = handler
