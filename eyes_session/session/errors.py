"""Error taxonomy for visual test sessions and the result-to-error mapping."""

from __future__ import annotations

import json
from typing import Optional, Union

from eyes_session.models.test_result import MatchResult, TestResults


class EyesError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigurationError(EyesError):
    """Required configuration (e.g. the api key) is missing."""


class StateError(EyesError):
    """An operation was called in the wrong session state."""


class TransportError(EyesError):
    """A call to the comparison service failed."""


class TestResultsError(EyesError):
    """The comparison service judged the test as not passed."""
    __test__ = False
    header = "[EYES: TEST FAILED]"

    def __init__(self, message: str, results: Union[TestResults, MatchResult]):
        super().__init__(message)
        self.results = results


ComparisonFailure = TestResultsError


class TestFailedError(TestResultsError):
    header = "[EYES: TEST FAILED]"


class ImmediateMismatchError(TestFailedError):
    header = "[EYES: TEST FAILED (Immediate failure report on mismatch)]"


class TestAbortedError(TestResultsError):
    header = "[EYES: TEST ABORTED]"


class NewTestError(TestResultsError):
    header = "[EYES: NEW TEST ENDED]"


def _format_message(header: str, test_name, app_name, instructions: str, url: str) -> str:
    return f"{header} '{test_name}' of '{app_name}'. {instructions} {url}."


def build_test_error(
    results: Union[TestResults, MatchResult],
    test_name: Optional[str],
    app_name: Optional[str],
    url: Optional[str] = None,
) -> Optional[TestResultsError]:
    """Map a result record to the error a caller should see, or None when it passed.

    ``as_expected`` is only present on checkpoint results, so an explicit
    ``False`` there marks the immediate-failure path of check_window and takes
    precedence over aborted/new classification.
    """
    as_expected = getattr(results, "as_expected", None)
    if url is None:
        url = getattr(results, "url", "") or ""
    instructions = "See details at"

    if as_expected is False:
        message = _format_message(ImmediateMismatchError.header, test_name, app_name, instructions, url)
        return ImmediateMismatchError(message, results)

    if getattr(results, "is_aborted", False):
        error_cls = TestAbortedError
    elif getattr(results, "is_new", False):
        error_cls = NewTestError
        instructions = "It is recommended to review the new baseline at"
    elif as_expected is None and not results.is_passed:
        error_cls = TestFailedError
    else:
        return None

    message = _format_message(error_cls.header, test_name, app_name, instructions, url)
    payload = json.dumps(results.to_payload())
    return error_cls(f"{message}\nResults: {payload}", results)
