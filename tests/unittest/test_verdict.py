# AGPL-3.0 License

"""
Unit tests for the verdict over a set of checks.
"""

import pytest

from check_gate.checks.check import Check
from check_gate.checks.verdict import Verdict, determine_verdict, evaluate


def make_check(id, status="completed", conclusion="success"):
    return Check(id=id, name=f"check-{id}", app_id=1, status=status, conclusion=conclusion)


class TestDetermineVerdict:
    """Tests for determine_verdict."""

    def test_all_success_passes(self):
        checks = [make_check(1), make_check(2)]

        assert determine_verdict(checks, False, False) == Verdict.PASSING
        assert evaluate(checks, False, False) is True

    def test_empty_set_passes(self):
        assert determine_verdict([], False, False) == Verdict.PASSING

    @pytest.mark.parametrize("status", ["queued", "in_progress", "waiting", "requested", "pending"])
    def test_unresolved_status_is_pending(self, status):
        checks = [make_check(1), make_check(2, status=status, conclusion=None)]

        assert determine_verdict(checks, True, True) == Verdict.PENDING
        assert evaluate(checks, True, True) is False

    def test_pending_wins_over_failure(self):
        checks = [make_check(1, conclusion="failure"), make_check(2, status="queued", conclusion=None)]

        assert determine_verdict(checks, True, True) == Verdict.PENDING

    def test_stale_conclusion_on_running_check_ignored(self):
        checks = [make_check(1, status="in_progress", conclusion="success")]

        assert determine_verdict(checks, True, True) == Verdict.PENDING

    @pytest.mark.parametrize("conclusion", ["failure", "timed_out", "cancelled", "action_required", "stale"])
    def test_failure_conclusions(self, conclusion):
        checks = [make_check(1), make_check(2, conclusion=conclusion)]

        assert determine_verdict(checks, True, True) == Verdict.FAILING
        assert evaluate(checks, True, True) is False

    def test_skipped_depends_on_flag(self):
        checks = [make_check(1), make_check(2, conclusion="skipped")]

        assert evaluate(checks, treat_skipped_as_passed=True, treat_neutral_as_passed=False) is True
        assert evaluate(checks, treat_skipped_as_passed=False, treat_neutral_as_passed=True) is False

    def test_neutral_depends_on_flag(self):
        checks = [make_check(1), make_check(2, conclusion="neutral")]

        assert evaluate(checks, treat_skipped_as_passed=False, treat_neutral_as_passed=True) is True
        assert evaluate(checks, treat_skipped_as_passed=True, treat_neutral_as_passed=False) is False

    def test_order_independent(self):
        checks = [make_check(1), make_check(2, conclusion="failure"), make_check(3, conclusion="skipped")]

        assert determine_verdict(checks, True, True) == determine_verdict(list(reversed(checks)), True, True)


def test_only_passing_verdict_passed():
    assert Verdict.PASSING.passed
    assert not Verdict.PENDING.passed
    assert not Verdict.FAILING.passed
