"""Match-window retry protocol: compares the current window until it matches or times out."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from eyes_session.models.geometry import Region
from eyes_session.models.session import RunningSession
from eyes_session.models.test_result import AppOutput, MatchResult, MatchWindowData
from eyes_session.session.connector import ServerConnector

logger = logging.getLogger(__name__)

MATCH_INTERVAL_MS = 500


@dataclass
class Screenshot:
    image: bytes
    bounds: Region


@dataclass
class AppData:
    app_output: AppOutput
    screenshot: Screenshot


AppDataProvider = Callable[[Optional[Region], Optional[Screenshot]], Awaitable[AppData]]
WaitFn = Callable[[int], Awaitable[None]]


async def wait_ms(ms: int) -> None:
    await asyncio.sleep(ms / 1000)


class MatchWindowTask:
    """Runs one checkpoint's comparison cycle against a running session.

    Always performs at least one comparison and returns as soon as a match is
    found or the timeout elapses. Interim attempts are sent with
    ``ignore_mismatch`` so only the final attempt can record a mismatch.
    """

    def __init__(
        self,
        connector: ServerConnector,
        running_session: RunningSession,
        default_timeout_ms: int,
        app_data_provider: AppDataProvider,
        wait: WaitFn = wait_ms,
        match_interval_ms: int = MATCH_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.connector = connector
        self.running_session = running_session
        self.default_timeout_ms = default_timeout_ms
        self.app_data_provider = app_data_provider
        self.wait = wait
        self.match_interval_ms = match_interval_ms
        self.clock = clock
        self._last_screenshot: Screenshot | None = None
        self.attempts = 0

    @property
    def last_screenshot_bounds(self) -> Region | None:
        if self._last_screenshot is None:
            return None
        return self._last_screenshot.bounds

    async def match_window(
        self,
        user_inputs: list,
        region: Optional[Region],
        tag: str,
        run_once_after_timeout: bool,
        ignore_mismatch: bool,
        retry_timeout_ms: Optional[int] = None,
    ) -> MatchResult:
        timeout = retry_timeout_ms
        if timeout is None or timeout < 0:
            timeout = self.default_timeout_ms

        if timeout == 0 or run_once_after_timeout:
            if timeout > 0:
                logger.debug("Waiting %dms before a single match attempt", timeout)
                await self.wait(timeout)
            return await self._try_match(user_inputs, region, tag, ignore_mismatch)

        start = self.clock()
        result = await self._try_match(user_inputs, region, tag, True)
        while not result.as_expected:
            elapsed_ms = (self.clock() - start) * 1000
            if elapsed_ms + self.match_interval_ms >= timeout:
                break
            await self.wait(self.match_interval_ms)
            result = await self._try_match(user_inputs, region, tag, True)

        if not result.as_expected:
            logger.debug("No match within %dms, running final attempt", timeout)
            result = await self._try_match(user_inputs, region, tag, ignore_mismatch)

        logger.debug("match_window finished after %d attempts in %.0fms",
                     self.attempts, (self.clock() - start) * 1000)
        return result

    async def _try_match(
        self, user_inputs: list, region: Optional[Region], tag: str, ignore_mismatch: bool,
    ) -> MatchResult:
        self.attempts += 1
        app_data = await self.app_data_provider(region, self._last_screenshot)
        self._last_screenshot = app_data.screenshot
        data = MatchWindowData(
            user_inputs=list(user_inputs),
            app_output=app_data.app_output,
            tag=tag,
            ignore_mismatch=ignore_mismatch,
        )
        logger.debug("Match attempt #%d for tag %r", self.attempts, tag)
        return await self.connector.match_window(self.running_session, data)
