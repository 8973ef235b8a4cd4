# AGPL-3.0 License

"""
Checks gate tool - waits for the checks of a commit and reports the verdict.
"""

from typing import Any, Optional

from dynaconf import Dynaconf

from check_gate.checks.check import ANY_APP_MARKERS, CheckSelector
from check_gate.checks.errors import ConfigurationError
from check_gate.checks.poll_controller import PollConfig, PollController, PollOutcome
from check_gate.checks.self_check import (
    GITHUB_ACTIONS_APP_ID,
    SelfCheckMatcher,
    SelfCheckResolver,
    WorkflowSelfCheckResolver,
)
from check_gate.config_loader import get_settings
from check_gate.git_providers.check_repository import CheckRepositoryClient
from check_gate.git_providers.github_checks import GithubCheckClient
from check_gate.log import get_logger


def parse_selectors(value: Any, setting_name: str) -> tuple[CheckSelector, ...]:
    """
    Convert a checks_include / checks_exclude setting into selectors.

    Raises:
        ConfigurationError: If the setting is not a list of selectors
    """
    if value is None or value == "":
        return ()
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{setting_name} must be a list, got {type(value).__name__}")
    # Dynaconf hands back its own Box type for tables
    return tuple(
        CheckSelector.from_value(dict(item) if hasattr(item, "items") else item)
        for item in value
    )


def _as_number(value: Any, setting_name: str, cast=float):
    if isinstance(value, bool):
        raise ConfigurationError(f"{setting_name} must be a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{setting_name} must be a number, got {value!r}")


def parse_app_id(value: Any, setting_name: str) -> Optional[int]:
    """
    Convert an app id setting, where "*" or -1 means any app.

    Raises:
        ConfigurationError: If the value is not an app id
    """
    if value in ANY_APP_MARKERS:
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"{setting_name} must be an app id or \"*\", got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{setting_name} must be an app id or \"*\", got {value!r}")


def build_poll_config(settings: Dynaconf) -> PollConfig:
    """
    Build the run configuration from settings.

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    github = settings.get("github", {})
    checks = settings.get("checks", {})

    config = PollConfig(
        owner=github.get("owner", ""),
        repo=github.get("repo", ""),
        ref=github.get("ref", ""),
        include=parse_selectors(checks.get("checks_include"), "checks_include"),
        exclude=parse_selectors(checks.get("checks_exclude"), "checks_exclude"),
        treat_skipped_as_passed=bool(checks.get("treat_skipped_as_passed", True)),
        treat_neutral_as_passed=bool(checks.get("treat_neutral_as_passed", True)),
        fail_on_missing_checks=bool(checks.get("fail_on_missing_checks", False)),
        poll=bool(checks.get("poll", False)),
        retries=_as_number(checks.get("retries", 3), "retries", int),
        polling_interval=_as_number(checks.get("polling_interval", 1), "polling_interval"),
        delay=_as_number(checks.get("delay", 0), "delay"),
    )
    config.validate()
    return config


class ChecksGate:
    """
    Checks gate tool - runs the poll controller and maps its outcome to an exit code.
    """

    def __init__(
        self,
        settings: Optional[Dynaconf] = None,
        client: Optional[CheckRepositoryClient] = None,
        resolver: Optional[SelfCheckResolver] = None,
        sleep=None,
    ):
        """
        Initialize the checks gate.

        Args:
            settings: Settings to read (defaults to the global settings)
            client: Check source (defaults to the GitHub client)
            resolver: Own check name resolver (defaults to the workflow resolver)
            sleep: Optional replacement for asyncio.sleep
        """
        self.settings = settings if settings is not None else get_settings()
        self.logger = get_logger()
        self.config = build_poll_config(self.settings)

        if client is None:
            github = self.settings.get("github", {})
            client = GithubCheckClient(token=github.get("token", ""), base_url=github.get("base_url", ""))
        self.client = client

        app_id = parse_app_id(
            self.settings.get("checks", {}).get("self_check_app_id", GITHUB_ACTIONS_APP_ID), "self_check_app_id"
        )
        self.is_self_check = SelfCheckMatcher(resolver or WorkflowSelfCheckResolver(), app_id=app_id)
        self.sleep = sleep

    def _controller(self) -> PollController:
        if self.sleep is None:
            return PollController(self.config, self.client, self.is_self_check)
        return PollController(self.config, self.client, self.is_self_check, sleep=self.sleep)

    async def run(self) -> int:
        """
        Evaluate the checks and report the result.

        Returns:
            Process exit code: 0 when the gate passes, 1 otherwise
        """
        config = self.config
        self.logger.info(f"Evaluating checks of {config.owner}/{config.repo}@{config.ref}")

        outcome = await self._controller().run()
        self._report(outcome)
        return self.exit_code(outcome)

    def exit_code(self, outcome: PollOutcome) -> int:
        if not outcome.all_checks_pass:
            return 1
        if outcome.missing_checks and self.config.fail_on_missing_checks:
            return 1
        return 0

    def _report(self, outcome: PollOutcome) -> None:
        for check in outcome.filtered_checks:
            self.logger.info(
                f"{check.name}: {check.status} / {check.conclusion or '-'} (app {check.app_name or check.app_id})"
            )

        if not outcome.all_checks_pass:
            self.logger.error(
                f"Some checks have failed or timed out ({outcome.verdict.value} after "
                f"{outcome.iterations} iteration(s))"
            )
        else:
            self.logger.info(f"All {len(outcome.filtered_checks)} checks passed")

        if outcome.missing_checks:
            missing = ", ".join(str(selector) for selector in outcome.missing_checks)
            self.logger.warning(f"Some checks were not found: {missing}")
            if self.config.fail_on_missing_checks:
                self.logger.error("Failing due to missing checks")
