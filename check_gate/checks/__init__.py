# AGPL-3.0 License

"""
Commit checks gate engine.

Filters the checks recorded against a commit, decides whether they pass
and polls until they settle or the retry budget runs out.
"""

from check_gate.checks.check import Check, CheckConclusion, CheckSelector, CheckStatus
from check_gate.checks.check_filter import FilteredResult, filter_checks
from check_gate.checks.errors import CheckGateError, ConfigurationError, FetchError, ResolutionError
from check_gate.checks.poll_controller import PollConfig, PollController, PollOutcome, PollState
from check_gate.checks.self_check import SelfCheckMatcher, SelfCheckResolver, WorkflowSelfCheckResolver
from check_gate.checks.verdict import Verdict, determine_verdict, evaluate

__all__ = [
    "Check",
    "CheckConclusion",
    "CheckSelector",
    "CheckStatus",
    "FilteredResult",
    "filter_checks",
    "CheckGateError",
    "ConfigurationError",
    "FetchError",
    "ResolutionError",
    "PollConfig",
    "PollController",
    "PollOutcome",
    "PollState",
    "SelfCheckMatcher",
    "SelfCheckResolver",
    "WorkflowSelfCheckResolver",
    "Verdict",
    "determine_verdict",
    "evaluate",
]
