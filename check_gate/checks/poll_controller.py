# AGPL-3.0 License

"""
Bounded polling of a commit's checks until they settle.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from check_gate.checks.check import Check, CheckSelector
from check_gate.checks.check_filter import ensure_exclusive_rules, filter_checks
from check_gate.checks.errors import ConfigurationError, FetchError
from check_gate.checks.self_check import SelfCheckPredicate, exclude_self, never_self
from check_gate.checks.verdict import Verdict, determine_verdict
from check_gate.log import get_logger

if TYPE_CHECKING:
    from check_gate.git_providers.check_repository import CheckRepositoryClient

SleepFunction = Callable[[float], Awaitable[None]]


class PollState(str, Enum):
    ITERATING = "iterating"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class PollConfig:
    """
    Everything a single gate run needs to know.

    Attributes:
        owner: Repository owner
        repo: Repository name
        ref: Commit SHA (or ref) whose checks are evaluated
        include: Selectors of checks to keep
        exclude: Selectors of checks to drop
        poll: Whether to keep polling until the checks pass
        retries: Maximum number of fetches when polling, first one included
        polling_interval: Minutes to wait between fetches
        delay: Seconds to wait before the first fetch
    """
    owner: str
    repo: str
    ref: str
    include: tuple[CheckSelector, ...] = ()
    exclude: tuple[CheckSelector, ...] = ()
    treat_skipped_as_passed: bool = True
    treat_neutral_as_passed: bool = True
    fail_on_missing_checks: bool = False
    poll: bool = False
    retries: int = 3
    polling_interval: float = 1
    delay: float = 0

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If the configuration cannot be run
        """
        ensure_exclusive_rules(self.include, self.exclude)
        if not self.owner or not self.repo:
            raise ConfigurationError("Repository owner and name are required")
        if not self.ref:
            raise ConfigurationError("A commit reference is required")
        if isinstance(self.retries, bool) or not isinstance(self.retries, int) or self.retries < 1:
            raise ConfigurationError(f"retries must be a positive integer, got {self.retries!r}")
        if self.polling_interval < 0:
            raise ConfigurationError(f"polling_interval must not be negative, got {self.polling_interval!r}")
        if self.delay < 0:
            raise ConfigurationError(f"delay must not be negative, got {self.delay!r}")

    @property
    def max_iterations(self) -> int:
        return self.retries if self.poll else 1


@dataclass
class PollOutcome:
    """
    Result of one poll iteration, and of the whole run once it stops.

    Attributes:
        verdict: Three-state verdict of the filtered checks
        missing_checks: Include selectors without a matching check
        filtered_checks: Checks that were evaluated (own check excluded)
        iterations: Number of fetches performed so far
        state: SUCCEEDED or EXHAUSTED once the run stopped
    """
    verdict: Verdict
    missing_checks: list[CheckSelector] = field(default_factory=list)
    filtered_checks: list[Check] = field(default_factory=list)
    iterations: int = 0
    state: PollState = PollState.ITERATING

    @property
    def all_checks_pass(self) -> bool:
        return self.verdict.passed


class PollController:
    """
    Repeats fetch, filter and evaluate until the checks pass or the retry
    budget runs out.
    """

    def __init__(
        self,
        config: PollConfig,
        client: "CheckRepositoryClient",
        is_self_check: Optional[SelfCheckPredicate] = None,
        sleep: SleepFunction = asyncio.sleep,
    ):
        """
        Args:
            config: Run configuration
            client: Source of the commit's checks
            is_self_check: Predicate recognising the gate's own check run
            sleep: Coroutine function used for every wait, in seconds
        """
        self.config = config
        self.client = client
        self.is_self_check = is_self_check or never_self
        self.sleep = sleep
        self.logger = get_logger()

    def fetch_checks(self) -> list[Check]:
        """
        Raises:
            FetchError: If the checks could not be retrieved
        """
        config = self.config
        try:
            return list(self.client.fetch_checks(config.owner, config.repo, config.ref))
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Error getting all checks: {e}") from e

    def iterate(self, iteration: int) -> PollOutcome:
        """Run a single fetch, filter and evaluate cycle."""
        config = self.config
        raw_checks = self.fetch_checks()
        filtered = filter_checks(raw_checks, config.include, config.exclude)
        checks = exclude_self(filtered.filtered_checks, self.is_self_check)
        verdict = determine_verdict(checks, config.treat_skipped_as_passed, config.treat_neutral_as_passed)

        self.logger.info(
            f"Iteration {iteration}: {len(checks)} of {len(raw_checks)} checks evaluated, verdict {verdict.value}",
            extra={
                "iteration": iteration,
                "verdict": verdict.value,
                "missing_checks": [str(s) for s in filtered.missing_checks],
            }
        )

        return PollOutcome(
            verdict=verdict,
            missing_checks=filtered.missing_checks,
            filtered_checks=checks,
            iterations=iteration,
        )

    async def run(self) -> PollOutcome:
        """
        Poll until the checks pass or the retry budget is used up.

        Returns:
            The outcome of the last iteration

        Raises:
            ConfigurationError: If the configuration is invalid (before any fetch)
            FetchError: If fetching the checks fails in any iteration
        """
        config = self.config
        config.validate()

        if config.delay > 0:
            self.logger.info(f"Waiting {config.delay} seconds before the first fetch")
            await self.sleep(config.delay)

        iteration = 0
        while True:
            iteration += 1
            outcome = self.iterate(iteration)

            if outcome.all_checks_pass:
                outcome.state = PollState.SUCCEEDED
                break
            if iteration >= config.max_iterations:
                outcome.state = PollState.EXHAUSTED
                break

            self.logger.info(
                f"Checks are {outcome.verdict.value}, retrying in {config.polling_interval} minute(s) "
                f"({iteration}/{config.retries})"
            )
            await self.sleep(config.polling_interval * 60)

        self.logger.info(f"Polling finished after {iteration} iteration(s): {outcome.state.value}")
        return outcome
