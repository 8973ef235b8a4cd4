# AGPL-3.0 License

"""
GitHub implementation of the check repository client, built on PyGithub.
"""

from typing import Optional

import requests
from github import Auth, Github, GithubException

from check_gate.checks.check import Check
from check_gate.checks.errors import FetchError
from check_gate.git_providers.check_repository import CheckRepositoryClient
from check_gate.log import get_logger

DEFAULT_BASE_URL = "https://api.github.com"


class GithubCheckClient(CheckRepositoryClient):
    """
    Lists the check runs of a commit through the GitHub REST API.
    """

    def __init__(self, token: str = "", base_url: str = DEFAULT_BASE_URL, github: Optional[Github] = None):
        """
        Args:
            token: Token used to authenticate (anonymous access when empty)
            base_url: API root, for GitHub Enterprise Server
            github: Pre-built client, mainly for tests
        """
        self.logger = get_logger()
        if github is not None:
            self.github = github
        elif token:
            self.github = Github(auth=Auth.Token(token), base_url=base_url or DEFAULT_BASE_URL)
        else:
            self.github = Github(base_url=base_url or DEFAULT_BASE_URL)

    def fetch_checks(self, owner: str, repo: str, ref: str) -> list[Check]:
        try:
            commit = self.github.get_repo(f"{owner}/{repo}").get_commit(ref)
            checks = [self._to_check(run) for run in commit.get_check_runs()]
        except GithubException as e:
            raise FetchError(f"Error getting all checks for {owner}/{repo}@{ref}: {e.status} {e.data}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Error getting all checks for {owner}/{repo}@{ref}: {e}") from e

        self.logger.debug(f"Fetched {len(checks)} check runs for {owner}/{repo}@{ref}")
        return checks

    @staticmethod
    def _to_check(run) -> Check:
        app = run.app
        return Check(
            id=run.id,
            name=run.name,
            app_id=app.id if app else None,
            status=run.status,
            conclusion=run.conclusion,
            started_at=run.started_at,
            completed_at=run.completed_at,
            app_name=app.name if app else "",
            details_url=run.details_url,
        )
