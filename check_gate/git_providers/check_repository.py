# AGPL-3.0 License

"""
Abstract source of the checks recorded against a commit.
"""

from abc import ABC, abstractmethod

from check_gate.checks.check import Check


class CheckRepositoryClient(ABC):
    """
    Retrieves check runs from a code hosting provider.
    """

    @abstractmethod
    def fetch_checks(self, owner: str, repo: str, ref: str) -> list[Check]:
        """
        Get every check run recorded against a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Commit SHA, branch or tag

        Returns:
            All check runs of the commit

        Raises:
            FetchError: On any transport, authentication or not-found failure
        """
        pass


class StaticCheckClient(CheckRepositoryClient):
    """
    Serves a fixed sequence of check lists, one per call.

    Once the sequence is exhausted the last list keeps being returned.
    """

    def __init__(self, *responses: list[Check]):
        self.responses = [list(r) for r in responses] or [[]]
        self.calls = 0

    def fetch_checks(self, owner: str, repo: str, ref: str) -> list[Check]:
        index = min(self.calls, len(self.responses) - 1)
        self.calls += 1
        return list(self.responses[index])
