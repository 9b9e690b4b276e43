"""Contract for the client that talks to the remote comparison service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from eyes_session.models.config import DEFAULT_SERVER_URL
from eyes_session.models.session import RunningSession, SessionStartInfo
from eyes_session.models.test_result import (
    MatchResult,
    MatchWindowData,
    ReplaceWindowData,
    ServerResults,
)


class ServerConnector(ABC):
    """Transport to the comparison service.

    Implementations own serialization and HTTP; they should raise
    ``TransportError`` for failed calls so callers can tell service failures
    apart from misuse.
    """

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        api_key: Optional[str] = None,
        remove_session: bool = False,
    ):
        self.server_url = server_url
        self.api_key = api_key
        self.remove_session = remove_session

    @abstractmethod
    async def start_session(self, start_info: SessionStartInfo) -> RunningSession:
        """Create a new remote session or reuse a matching one."""

    @abstractmethod
    async def end_session(
        self, running_session: RunningSession, is_aborted: bool, save: bool,
    ) -> ServerResults:
        """End a remote session and return its counters."""

    @abstractmethod
    async def match_window(
        self, running_session: RunningSession, match_data: MatchWindowData,
    ) -> MatchResult:
        """Compare one captured window against the baseline."""

    @abstractmethod
    async def replace_window(
        self,
        running_session: Optional[RunningSession],
        step_index: int,
        replace_data: ReplaceWindowData,
        screenshot: bytes,
    ) -> None:
        """Replace the actual image of an existing step."""
