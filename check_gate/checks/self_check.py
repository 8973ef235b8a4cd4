# AGPL-3.0 License

"""
Identification of the check run that belongs to the running gate itself.

The gate runs as a check on the same commit it evaluates. That check can
never be completed while the gate is evaluating, so it is left out of the
verdict.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

import yaml

from check_gate.checks.check import Check
from check_gate.checks.errors import ResolutionError
from check_gate.log import get_logger

# App id of the "GitHub Actions" integration
GITHUB_ACTIONS_APP_ID = 15368

SelfCheckPredicate = Callable[[Check], bool]


class SelfCheckResolver(ABC):
    """
    Determines the name under which the current run is recorded as a check.
    """

    @abstractmethod
    def resolve_self_check_name(self) -> str:
        """
        Returns:
            Check name of the current run

        Raises:
            ResolutionError: If the name cannot be determined
        """
        pass


class StaticSelfCheckResolver(SelfCheckResolver):
    """Resolver for a check name known up front."""

    def __init__(self, name: str):
        self.name = name

    def resolve_self_check_name(self) -> str:
        if not self.name:
            raise ResolutionError("No self check name configured")
        return self.name


class WorkflowSelfCheckResolver(SelfCheckResolver):
    """
    Resolves the check name of the current GitHub Actions job.

    GitHub names a job's check run after the job's "name" key in the
    workflow file, or after the job id when the key is absent.
    """

    def __init__(self, environ: Optional[dict] = None):
        """
        Args:
            environ: Environment mapping to read (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.logger = get_logger()

    def workflow_path(self) -> Path:
        """Local path of the running workflow file, from GITHUB_WORKFLOW_REF."""
        workflow_ref = self.environ.get("GITHUB_WORKFLOW_REF")
        if not workflow_ref:
            raise ResolutionError("GITHUB_WORKFLOW_REF is not set")

        # <owner>/<repo>/<path>@<ref>
        location = workflow_ref.split("@", 1)[0]
        parts = location.split("/", 2)
        if len(parts) < 3 or not parts[2]:
            raise ResolutionError(f"Unexpected GITHUB_WORKFLOW_REF format: {workflow_ref}")

        workspace = Path(self.environ.get("GITHUB_WORKSPACE", "."))
        return workspace / parts[2]

    def resolve_self_check_name(self) -> str:
        job_id = self.environ.get("GITHUB_JOB")
        if not job_id:
            raise ResolutionError("GITHUB_JOB is not set")

        path = self.workflow_path()
        try:
            with open(path, "r") as f:
                workflow = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ResolutionError(f"Could not read workflow file {path}: {e}") from e

        jobs = workflow.get("jobs") if isinstance(workflow, dict) else None
        if not isinstance(jobs, dict) or job_id not in jobs:
            raise ResolutionError(f"Job '{job_id}' not found in workflow file {path}")

        job = jobs[job_id] or {}
        name = job.get("name") if isinstance(job, dict) else None
        # Expressions in job names are evaluated by the runner and cannot be matched here
        if isinstance(name, str) and name and "${{" not in name:
            return name
        return job_id


class SelfCheckMatcher:
    """
    Predicate recognising the gate's own check run.

    The name is resolved once, on first use, and reused for every poll
    iteration of the run. A failed resolution is cached as well and turns
    the matcher into one that matches nothing.
    """

    def __init__(self, resolver: SelfCheckResolver, app_id: Optional[int] = GITHUB_ACTIONS_APP_ID):
        """
        Args:
            resolver: Source of the self check name
            app_id: App that creates the self check (None = any app)
        """
        self.resolver = resolver
        self.app_id = app_id
        self.logger = get_logger()
        self._resolved = False
        self._name: Optional[str] = None

    @property
    def name(self) -> Optional[str]:
        if not self._resolved:
            self._resolved = True
            try:
                self._name = self.resolver.resolve_self_check_name()
                self.logger.debug(f"Resolved own check name: {self._name}")
            except ResolutionError as e:
                self.logger.warning(f"Could not determine own check, it will be evaluated like any other: {e}")
                self._name = None
        return self._name

    def __call__(self, check: Check) -> bool:
        name = self.name
        if name is None or check.name != name:
            return False
        return self.app_id is None or check.app_id == self.app_id


def never_self(check: Check) -> bool:
    return False


def exclude_self(checks: list[Check], is_self_check: SelfCheckPredicate) -> list[Check]:
    """
    Drop the gate's own check run.

    Only the first matching check is treated as the own check, any other
    run sharing its name and app is kept.
    """
    own = next((check for check in checks if is_self_check(check)), None)
    if own is None:
        return list(checks)
    return [check for check in checks if check.id != own.id]
