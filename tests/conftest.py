"""Pytest configuration and shared fixtures."""

from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

from eyes_session.models.config import EyesConfig
from eyes_session.models.geometry import RectangleSize, Region
from eyes_session.models.session import RunningSession
from eyes_session.models.test_result import MatchResult, ServerResults, TestResults
from eyes_session.session.connector import ServerConnector
from eyes_session.session.eyes_base import EyesBase
from eyes_session.session.match_task import Screenshot


class FakeEyes(EyesBase):
    """EyesBase with in-memory hooks and no real waiting."""

    def __init__(self, connector, config=None, screenshot_bounds: Optional[Region] = None):
        super().__init__(connector, config)
        self.screenshot_bounds = screenshot_bounds or Region(left=0, top=0, width=800, height=600)
        self.viewport = RectangleSize(width=1024, height=768)
        self.viewport_requests: list[RectangleSize] = []
        self.waits: list[int] = []

    @property
    def base_agent_id(self) -> str:
        return "fake-sdk/1.0"

    async def get_screenshot(self, region=None) -> Screenshot:
        bounds = region if region is not None else self.screenshot_bounds
        return Screenshot(image=b"\x89PNG\r\n\x1a\nfake", bounds=bounds)

    async def get_title(self) -> str:
        return "Fake Page"

    async def get_viewport_size(self) -> RectangleSize:
        return self.viewport

    async def set_viewport_size(self, size: RectangleSize) -> None:
        self.viewport_requests.append(size)

    async def get_inferred_environment(self) -> str:
        return "useragent:FakeAgent/1.0"

    async def _wait_timeout(self, ms: int) -> None:
        self.waits.append(ms)


# ============================================================================
# Collaborator Fixtures
# ============================================================================


def make_connector(
    is_new_session: bool = False,
    as_expected: bool = True,
    server_results: Optional[ServerResults] = None,
    api_key: Optional[str] = "test-api-key",
) -> Mock:
    """Create a ServerConnector double with async endpoints."""
    connector = Mock(spec=ServerConnector)
    connector.api_key = api_key
    connector.remove_session = False
    connector.start_session = AsyncMock(return_value=RunningSession(
        session_id="sess-001",
        legacy_session_id="legacy-001",
        is_new_session=is_new_session,
        session_url="https://eyes.example.com/app/sessions/sess-001",
    ))
    connector.match_window = AsyncMock(return_value=MatchResult(as_expected=as_expected))
    connector.end_session = AsyncMock(return_value=server_results or ServerResults(
        steps=1, matches=1, strict_matches=1,
    ))
    connector.replace_window = AsyncMock(return_value=None)
    return connector


@pytest.fixture
def connector() -> Mock:
    return make_connector()


@pytest.fixture
def eyes_config() -> EyesConfig:
    """Config with an api key and no retry polling."""
    return EyesConfig(api_key="test-api-key", default_match_timeout_ms=0)


@pytest.fixture
def eyes(connector, eyes_config) -> FakeEyes:
    return FakeEyes(connector, eyes_config)


# ============================================================================
# Result Fixtures
# ============================================================================


@pytest.fixture
def running_session() -> RunningSession:
    return RunningSession(
        session_id="sess-001",
        is_new_session=False,
        session_url="https://eyes.example.com/app/sessions/sess-001",
    )


@pytest.fixture
def passed_results() -> TestResults:
    return TestResults(
        test_name="Login",
        app_name="Shop",
        steps=2,
        matches=2,
        strict_matches=2,
        session_id="sess-001",
        url="https://eyes.example.com/app/sessions/sess-001",
        is_passed=True,
    )


@pytest.fixture
def failed_results() -> TestResults:
    return TestResults(
        test_name="Login",
        app_name="Shop",
        steps=2,
        matches=1,
        mismatches=1,
        session_id="sess-001",
        url="https://eyes.example.com/app/sessions/sess-001",
        is_passed=False,
    )
