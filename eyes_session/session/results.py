"""Classification of end-of-session server data into test results."""

from __future__ import annotations

import logging
from typing import Optional

from eyes_session.models.session import RunningSession
from eyes_session.models.test_result import ServerResults, TestResults

logger = logging.getLogger(__name__)


def build_test_results(
    test_name: Optional[str],
    app_name: Optional[str],
    running_session: Optional[RunningSession],
    server_results: Optional[ServerResults],
    is_saved: bool,
    is_aborted: bool,
) -> TestResults:
    """Build the final TestResults for a session.

    A test that never started a remote session gets all-zero counters and
    passes unless it was aborted. Otherwise it passes only when it was not
    aborted, is not new, and the server reported no mismatches or missing steps.
    """
    if running_session is None:
        logger.info("No running session. Creating empty test results.")
        return TestResults(
            test_name=test_name,
            app_name=app_name,
            is_new=False,
            session_id=None,
            legacy_session_id=None,
            url="",
            is_passed=not is_aborted,
            is_aborted=is_aborted,
            is_saved=False,
        )

    counters = server_results or ServerResults()
    is_new = running_session.is_new_session
    is_passed = (
        not is_aborted
        and not is_new
        and counters.mismatches == 0
        and counters.missing == 0
    )
    return TestResults(
        **counters.model_dump(),
        test_name=test_name,
        app_name=app_name,
        is_new=is_new,
        session_id=str(running_session.session_id),
        legacy_session_id=running_session.legacy_session_id or None,
        url=running_session.session_url,
        is_passed=is_passed,
        is_aborted=is_aborted,
        is_saved=is_saved,
    )
