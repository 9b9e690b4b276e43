"""Session controller: drives one visual test from open() to close()."""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

from eyes_session.models.config import EyesConfig
from eyes_session.models.geometry import Location, RectangleSize, Region
from eyes_session.models.match_settings import FailureReport, ImageMatchSettings, MatchLevel
from eyes_session.models.session import (
    AppEnvironment,
    BatchInfo,
    RunningSession,
    SessionStartInfo,
    TestSession,
)
from eyes_session.models.test_result import (
    AppOutput,
    MatchResult,
    ReplaceWindowData,
    TestResults,
)
from eyes_session.models.triggers import MouseAction, MouseTrigger, TextTrigger

from .connector import ServerConnector
from .errors import ConfigurationError, StateError, build_test_error
from .match_task import AppData, MatchWindowTask, Screenshot, wait_ms
from .results import build_test_results
from .triggers import TriggerRecorder

logger = logging.getLogger(__name__)


class EyesBase(ABC):
    """Core of a visual checkpoint SDK.

    Subclasses supply the screenshot/title/viewport hooks for their platform;
    everything else (session lifecycle, the match protocol, result
    classification and trigger recording) lives here. Every public operation
    is a no-op while ``is_disabled`` is set, so callers can use the full API
    unconditionally.
    """

    def __init__(self, connector: ServerConnector, config: EyesConfig | None = None):
        self.config = config or EyesConfig()
        self.connector = connector
        if self.config.api_key and not connector.api_key:
            connector.api_key = self.config.api_key
        connector.remove_session = connector.remove_session or self.config.remove_session

        self.session = TestSession()
        self.triggers = TriggerRecorder(self.session.pending_inputs, self._last_screenshot_bounds)

        self._batch: BatchInfo | None = None
        if self.config.batch:
            self.set_batch(self.config.batch.name, self.config.batch.id, self.config.batch.started_at)

    # ------------------------------------------------------------------
    # SDK hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_screenshot(self, region: Optional[Region] = None) -> Screenshot:
        """Capture the window (or ``region`` of it) and report the captured bounds."""

    @abstractmethod
    async def get_title(self) -> str:
        ...

    @abstractmethod
    async def get_viewport_size(self) -> RectangleSize:
        ...

    @abstractmethod
    async def set_viewport_size(self, size: RectangleSize) -> None:
        ...

    @abstractmethod
    async def get_inferred_environment(self) -> str:
        """Return an environment hint for the service, e.g. ``useragent:<ua>``."""

    @property
    @abstractmethod
    def base_agent_id(self) -> str:
        ...

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def is_disabled(self) -> bool:
        return self.config.is_disabled

    @is_disabled.setter
    def is_disabled(self, value: bool) -> None:
        self.config.is_disabled = value

    @property
    def api_key(self) -> str | None:
        return self.connector.api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        self.connector.api_key = value

    @property
    def full_agent_id(self) -> str:
        if not self.config.agent_id:
            return self.base_agent_id
        return f"{self.config.agent_id} [{self.base_agent_id}]"

    @property
    def failure_report(self) -> FailureReport:
        return self.config.failure_report

    @failure_report.setter
    def failure_report(self, mode) -> None:
        try:
            self.config.failure_report = FailureReport(mode)
        except ValueError:
            self.config.failure_report = FailureReport.ON_CLOSE

    @property
    def default_match_settings(self) -> ImageMatchSettings:
        return self.config.default_match_settings

    @default_match_settings.setter
    def default_match_settings(self, settings: ImageMatchSettings) -> None:
        self.config.default_match_settings = settings

    @property
    def match_level(self) -> MatchLevel:
        return self.config.default_match_settings.match_level

    @match_level.setter
    def match_level(self, level: MatchLevel) -> None:
        self.config.default_match_settings.match_level = MatchLevel(level)

    @property
    def batch(self) -> BatchInfo | None:
        return self._batch

    def set_batch(self, name: str | None, batch_id: str | None = None, started_at: str | None = None) -> None:
        """Group this test with others under a named batch."""
        batch = BatchInfo(name=name)
        if batch_id:
            batch.id = batch_id
        if started_at:
            batch.started_at = started_at
        self._batch = batch

    @property
    def is_open(self) -> bool:
        return self.session.is_open

    @property
    def app_name(self) -> str | None:
        return self.session.app_name

    @property
    def test_name(self) -> str | None:
        return self.session.test_name

    @property
    def running_session(self) -> RunningSession | None:
        return self.session.running_session

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def open(
        self, app_name: str, test_name: str, viewport_size: RectangleSize | None = None,
    ) -> None:
        """Start a new test. The remote session is created lazily by the first check."""
        if self.is_disabled:
            logger.info("open ignored - disabled")
            return

        if not self.connector.api_key:
            msg = "API key is missing! Set EyesConfig.api_key or the APPLITOOLS_API_KEY variable"
            logger.error(msg)
            raise ConfigurationError(msg)

        if self.session.is_open:
            msg = "A test is already running"
            logger.error(msg)
            await self.abort_if_not_closed()
            raise StateError(msg)

        if viewport_size is None and self.config.viewport:
            viewport_size = RectangleSize(width=self.config.viewport.width,
                                          height=self.config.viewport.height)

        self.session.pending_inputs.clear()
        self.session.viewport_size = viewport_size
        self.session.app_name = app_name
        self.session.test_name = test_name
        self.session.is_open = True
        logger.info("Opened test '%s' of '%s'", test_name, app_name)

    async def start_session(self) -> None:
        if self.session.running_session is not None:
            return

        if self.session.viewport_size is None:
            self.session.viewport_size = await self.get_viewport_size()
        else:
            await self.set_viewport_size(self.session.viewport_size)

        batch = self._batch or BatchInfo()
        logger.debug("Batch: %s", batch)

        inferred = await self.get_inferred_environment()
        environment = AppEnvironment(
            os=self.config.host_os,
            hosting_app=self.config.hosting_app,
            display_size=self.session.viewport_size,
            inferred=inferred,
        )
        self.session.session_start_info = SessionStartInfo(
            agent_id=self.full_agent_id,
            app_id_or_name=self.session.app_name,
            scenario_id_or_name=self.session.test_name,
            batch_info=batch,
            env_name=self.config.baseline_name,
            environment=environment,
            default_match_settings=self.config.default_match_settings.model_copy(deep=True),
            branch_name=self.config.branch_name or None,
            parent_branch_name=self.config.parent_branch_name or None,
        )

        logger.debug("Starting server session...")
        running_session = await self.connector.start_session(self.session.session_start_info)
        self.session.running_session = running_session
        # A new test has no baseline, so polling for a match is pointless
        self.session.retry_once_on_timeout = running_session.is_new_session
        logger.info("Server session %s started (new=%s)",
                    running_session.session_id, running_session.is_new_session)

    async def check_window(
        self,
        tag: str = "",
        ignore_mismatch: bool = False,
        retry_timeout_ms: int | None = None,
        region: Region | None = None,
    ) -> MatchResult | None:
        """Compare the current window against the baseline for checkpoint ``tag``."""
        if self.is_disabled:
            logger.debug("check_window ignored - disabled")
            return None

        if not self.session.is_open:
            msg = "check_window called with Eyes not open"
            logger.error(msg)
            raise StateError(msg)

        if retry_timeout_ms is None or retry_timeout_ms < 0:
            retry_timeout_ms = self.config.default_match_timeout_ms

        try:
            await self.start_session()
            running_session = self.session.running_session
            task = MatchWindowTask(
                self.connector,
                running_session,
                self.config.default_match_timeout_ms,
                self._get_app_data,
                self._wait_timeout,
            )
            self.session.match_task = task

            logger.debug("check_window: matching tag %r (timeout=%dms)", tag, retry_timeout_ms)
            result = await task.match_window(
                self.session.pending_inputs,
                region,
                tag,
                self.session.retry_once_on_timeout,
                ignore_mismatch,
                retry_timeout_ms,
            )
        finally:
            if not ignore_mismatch:
                self.session.pending_inputs.clear()

        logger.debug("check_window: match result %s", result)
        if not result.as_expected:
            self.session.retry_once_on_timeout = True
            if not running_session.is_new_session:
                logger.info("Mismatch! %s", tag)

            if self.config.failure_report == FailureReport.IMMEDIATE:
                error = build_test_error(
                    result,
                    self.session.session_start_info.scenario_id_or_name,
                    self.session.session_start_info.app_id_or_name,
                    url=running_session.session_url,
                )
                logger.error("%s", error)
                raise error

        return result

    async def close(self, throw_ex: bool = True) -> TestResults | None:
        """End the test and return its results.

        With ``throw_ex`` a test that did not pass raises the matching
        ``TestResultsError`` instead of returning.
        """
        if self.is_disabled:
            logger.info("close ignored - disabled")
            return None

        if not self.session.is_open:
            msg = "close called with Eyes not open"
            logger.error(msg)
            raise StateError(msg)

        self.session.is_open = False
        self.session.match_task = None

        running_session = self.session.running_session
        if running_session is None:
            logger.info("Close: server session was not started")
            return build_test_results(
                self.session.test_name, self.session.app_name, None, None, False, False,
            )

        if running_session.is_new_session:
            save = self.config.save_new_tests
        else:
            save = self.config.save_failed_tests

        try:
            results = await self._end_session(running_session, is_aborted=False, save=save)
        except Exception as e:
            logger.error("End session failed: %s", e)
            raise
        finally:
            self.session.running_session = None

        if not results.is_passed:
            error = build_test_error(results, self.session.test_name, self.session.app_name)
            logger.warning("%s", error)
            if throw_ex:
                raise error
        else:
            logger.info("[EYES: TEST PASSED]: See details at %s", results.url)
        return results

    async def abort_if_not_closed(self) -> TestResults | None:
        """Abort the current test, if any. Never raises."""
        if self.is_disabled:
            logger.debug("abort_if_not_closed ignored - disabled")
            return None

        if not self.session.is_open:
            return None

        self.session.is_open = False
        self.session.match_task = None

        running_session = self.session.running_session
        self.session.running_session = None
        if running_session is None:
            return build_test_results(
                self.session.test_name, self.session.app_name, None, None, False, True,
            )

        try:
            results = await self._end_session(running_session, is_aborted=True, save=False)
        except Exception as e:
            logger.warning("Failed to abort server session %s: %s", running_session.session_id, e)
            return None

        logger.info("Aborted test '%s' of '%s'", results.test_name, results.app_name)
        return results

    async def replace_window(
        self,
        step_index: int,
        screenshot: bytes,
        tag: str = "",
        title: str = "",
        user_inputs: list | None = None,
    ) -> None:
        """Replace the actual image of step ``step_index`` in the running session."""
        if self.is_disabled:
            logger.debug("replace_window ignored - disabled")
            return

        if not self.session.is_open:
            msg = "replace_window called with Eyes not open"
            logger.error(msg)
            raise StateError(msg)

        data = ReplaceWindowData(
            user_inputs=user_inputs or [],
            tag=tag,
            app_output=AppOutput(title=title, screenshot64=base64.b64encode(screenshot).decode()),
        )
        logger.debug("replace_window: replacing step %d", step_index)
        await self.connector.replace_window(self.session.running_session, step_index, data, screenshot)
        logger.debug("replace_window done")

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def add_keyboard_trigger(self, control: Region, text: str) -> TextTrigger | None:
        if self.is_disabled:
            return None
        return self.triggers.add_keyboard_trigger(control, text)

    def add_mouse_trigger(self, action: MouseAction, control: Region, cursor: Location) -> MouseTrigger | None:
        if self.is_disabled:
            return None
        return self.triggers.add_mouse_trigger(action, control, cursor)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _last_screenshot_bounds(self) -> Region | None:
        if self.session.match_task is None:
            return None
        return self.session.match_task.last_screenshot_bounds

    async def _end_session(self, running_session: RunningSession, is_aborted: bool, save: bool) -> TestResults:
        logger.debug("Ending server session %s (aborted=%s, save=%s)...",
                     running_session.session_id, is_aborted, save)
        server_results = await self.connector.end_session(running_session, is_aborted, save)
        results = build_test_results(
            self.session.test_name, self.session.app_name, running_session,
            server_results, save, is_aborted,
        )
        logger.info("Results: %s", results.model_dump_json())
        return results

    async def _get_app_data(self, region: Region | None, last_screenshot: Screenshot | None) -> AppData:
        logger.debug("Getting screenshot...")
        screenshot = await self.get_screenshot(region)
        title = await self.get_title()
        app_output = AppOutput(title=title, screenshot64=base64.b64encode(screenshot.image).decode())
        return AppData(app_output=app_output, screenshot=screenshot)

    async def _wait_timeout(self, ms: int) -> None:
        await wait_ms(ms)
