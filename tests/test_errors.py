"""Tests for the result-to-error mapping."""

from types import SimpleNamespace

from eyes_session.models.test_result import MatchResult, TestResults
from eyes_session.session.errors import (
    ComparisonFailure,
    EyesError,
    ImmediateMismatchError,
    NewTestError,
    TestAbortedError,
    TestFailedError,
    build_test_error,
)


class TestBuildTestError:
    """Precedence: immediate mismatch > aborted > new > failed > none."""

    def test_passed_returns_none(self, passed_results):
        assert build_test_error(passed_results, "Login", "Shop") is None

    def test_failed(self, failed_results):
        error = build_test_error(failed_results, "Login", "Shop")
        assert isinstance(error, TestFailedError)
        assert str(error).startswith("[EYES: TEST FAILED] 'Login' of 'Shop'. See details at https://eyes.example.com")
        assert "Results: " in str(error)
        assert error.results is failed_results

    def test_aborted(self, failed_results):
        failed_results.is_aborted = True
        error = build_test_error(failed_results, "Login", "Shop")
        assert isinstance(error, TestAbortedError)
        assert "[EYES: TEST ABORTED]" in str(error)

    def test_new(self):
        results = TestResults(test_name="Login", app_name="Shop", is_new=True, url="https://u")
        error = build_test_error(results, "Login", "Shop")
        assert isinstance(error, NewTestError)
        assert "It is recommended to review the new baseline at https://u." in str(error)

    def test_aborted_beats_new(self):
        results = TestResults(is_new=True, is_aborted=True)
        assert isinstance(build_test_error(results, "T", "A"), TestAbortedError)

    def test_immediate_mismatch(self):
        result = MatchResult(as_expected=False)
        error = build_test_error(result, "Login", "Shop", url="https://u")
        assert isinstance(error, ImmediateMismatchError)
        assert str(error) == (
            "[EYES: TEST FAILED (Immediate failure report on mismatch)] 'Login' of 'Shop'. "
            "See details at https://u."
        )
        assert error.results is result

    def test_immediate_mismatch_beats_aborted(self):
        # Results carrying both signals still report the mismatch
        results = SimpleNamespace(as_expected=False, is_aborted=True, is_new=True, url="https://u")
        assert isinstance(build_test_error(results, "T", "A"), ImmediateMismatchError)

    def test_matching_checkpoint_returns_none(self):
        assert build_test_error(MatchResult(as_expected=True), "T", "A") is None

    def test_error_hierarchy(self, failed_results):
        error = build_test_error(failed_results, "Login", "Shop")
        assert isinstance(error, ComparisonFailure)
        assert isinstance(error, EyesError)
