"""
Test Configuration
==================

Pytest configuration with shared fixtures: testing settings, sites, elements,
registries, and a fake action client.
"""

import asyncio
import os
import tempfile
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Settings are read on first import, so point them at a scratch directory first
os.environ.setdefault("CONTENTKIT_ENVIRONMENT", "testing")
os.environ.setdefault("CONTENTKIT_STORAGE_PATH", tempfile.mkdtemp(prefix="contentkit_test_"))
os.environ.setdefault("CONTENTKIT_TASK_ALWAYS_EAGER", "true")

from contentkit.config import settings as settings_module  # noqa: E402
from contentkit.config.settings import Settings  # noqa: E402
from contentkit.core.cp.action_queue import ActionRequestError  # noqa: E402
from contentkit.core.elements import Element, Site  # noqa: E402
from contentkit.core.events import Component  # noqa: E402
from contentkit.core.fields.registry import FieldRegistry  # noqa: E402
from contentkit.models.schemas import ActionResponse  # noqa: E402


class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    task_always_eager: bool = True


@pytest.fixture
def override_settings(monkeypatch: pytest.MonkeyPatch):
    """Swap the global settings for a TestSettings built from keyword overrides."""

    def _override(**overrides: Any) -> Settings:
        test_settings = TestSettings(**overrides)
        monkeypatch.setattr(settings_module, "settings", test_settings)
        return test_settings

    return _override


@pytest.fixture(autouse=True)
def reset_class_handlers():
    """Class-level event handlers are global; clear them between tests."""
    yield
    Component.off_all_classes()


@pytest.fixture
def site() -> Site:
    return Site(id=1, handle="default", language="en-US", group_id=7)


@pytest.fixture
def element(site: Site) -> Element:
    return Element(site=site, id=100, title="Hello")


@pytest.fixture
def registry() -> FieldRegistry:
    return FieldRegistry()


class FakeActionClient:
    """Records posted actions and replies from a canned response table."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, failures: Optional[List[str]] = None):
        self.responses = responses or {}
        self.failures = set(failures or [])
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def post(self, action: str, data: Dict[str, Any]) -> ActionResponse:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.calls.append((action, data))
            await asyncio.sleep(0)
            if action in self.failures:
                raise ActionRequestError(f"Action {action} failed: 500 - boom", status_code=500)
            return ActionResponse(data=self.responses.get(action, {"success": True}))
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_client() -> FakeActionClient:
    return FakeActionClient()
