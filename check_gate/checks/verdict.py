# AGPL-3.0 License

"""
Aggregate verdict over a set of checks.
"""

from enum import Enum
from typing import Iterable, Sequence

from check_gate.checks.check import Check, CheckConclusion

FAILURE_CONCLUSIONS = frozenset({
    CheckConclusion.FAILURE.value,
    CheckConclusion.TIMED_OUT.value,
    CheckConclusion.CANCELLED.value,
    CheckConclusion.ACTION_REQUIRED.value,
    CheckConclusion.STALE.value,
})


class Verdict(Enum):
    """
    Aggregate state of a set of checks.
    """

    PASSING = "passing"
    """Every check completed with an accepted conclusion"""

    PENDING = "pending"
    """At least one check has not completed yet"""

    FAILING = "failing"
    """Every check completed and at least one concluded with a failure"""

    @property
    def passed(self) -> bool:
        return self is Verdict.PASSING


def failure_conclusions(treat_skipped_as_passed: bool, treat_neutral_as_passed: bool) -> frozenset[str]:
    """Conclusions that count as a failure under the given policy."""
    conclusions = set(FAILURE_CONCLUSIONS)
    if not treat_skipped_as_passed:
        conclusions.add(CheckConclusion.SKIPPED.value)
    if not treat_neutral_as_passed:
        conclusions.add(CheckConclusion.NEUTRAL.value)
    return frozenset(conclusions)


def is_unresolved(check: Check) -> bool:
    # queued, in_progress, waiting, requested and pending are all non-terminal;
    # a stale conclusion on such a check is ignored
    return not check.is_completed


def failing_checks(
    checks: Iterable[Check],
    treat_skipped_as_passed: bool,
    treat_neutral_as_passed: bool,
) -> list[Check]:
    """Completed checks whose conclusion counts as a failure."""
    failures = failure_conclusions(treat_skipped_as_passed, treat_neutral_as_passed)
    return [
        check for check in checks
        if check.is_completed and check.conclusion in failures
    ]


def determine_verdict(
    checks: Sequence[Check],
    treat_skipped_as_passed: bool,
    treat_neutral_as_passed: bool,
) -> Verdict:
    """
    Decide whether a set of checks is passing, pending or failing.

    Any unresolved check makes the set pending, whatever the other
    conclusions are. Otherwise a single failing conclusion fails the set.
    """
    if any(is_unresolved(check) for check in checks):
        return Verdict.PENDING
    if failing_checks(checks, treat_skipped_as_passed, treat_neutral_as_passed):
        return Verdict.FAILING
    return Verdict.PASSING


def evaluate(
    checks: Sequence[Check],
    treat_skipped_as_passed: bool,
    treat_neutral_as_passed: bool,
) -> bool:
    """Boolean form of determine_verdict: True only when every check passes."""
    return determine_verdict(checks, treat_skipped_as_passed, treat_neutral_as_passed).passed
