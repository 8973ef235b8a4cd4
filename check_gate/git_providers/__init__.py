# AGPL-3.0 License

"""
Sources of the check runs recorded against a commit.
"""

from check_gate.git_providers.check_repository import CheckRepositoryClient, StaticCheckClient
from check_gate.git_providers.github_checks import GithubCheckClient

__all__ = [
    "CheckRepositoryClient",
    "StaticCheckClient",
    "GithubCheckClient",
]
