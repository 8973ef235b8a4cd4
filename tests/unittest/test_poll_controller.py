# AGPL-3.0 License

"""
Unit tests for the poll controller.
"""

from unittest.mock import AsyncMock

import pytest

from check_gate.checks.check import Check, CheckSelector
from check_gate.checks.errors import ConfigurationError, FetchError
from check_gate.checks.poll_controller import PollConfig, PollController, PollState
from check_gate.checks.verdict import Verdict
from check_gate.git_providers.check_repository import CheckRepositoryClient, StaticCheckClient


def make_check(id, name, status="completed", conclusion="success", app_id=1):
    return Check(id=id, name=name, app_id=app_id, status=status, conclusion=conclusion)


PENDING = [make_check(1, "build", status="in_progress", conclusion=None)]
FAILING = [make_check(1, "build"), make_check(2, "lint", conclusion="failure")]
PASSING = [make_check(1, "build"), make_check(2, "lint")]


class FailingClient(CheckRepositoryClient):
    def __init__(self, error):
        self.error = error
        self.calls = 0

    def fetch_checks(self, owner, repo, ref):
        self.calls += 1
        raise self.error


def make_config(**kwargs):
    defaults = dict(owner="octo", repo="repo", ref="abc123")
    defaults.update(kwargs)
    return PollConfig(**defaults)


@pytest.mark.asyncio
class TestPollController:
    """Tests for PollController.run."""

    async def test_polling_disabled_fetches_once(self):
        client = StaticCheckClient(PENDING, PASSING)
        sleep = AsyncMock()
        controller = PollController(make_config(poll=False, retries=5), client, sleep=sleep)

        outcome = await controller.run()

        assert client.calls == 1
        assert outcome.all_checks_pass is False
        assert outcome.verdict == Verdict.PENDING
        assert outcome.state == PollState.EXHAUSTED
        sleep.assert_not_awaited()

    async def test_polling_disabled_passing(self):
        client = StaticCheckClient(PASSING)
        controller = PollController(make_config(), client, sleep=AsyncMock())

        outcome = await controller.run()

        assert client.calls == 1
        assert outcome.all_checks_pass is True
        assert outcome.state == PollState.SUCCEEDED

    async def test_stops_at_first_passing_verdict(self):
        client = StaticCheckClient(PENDING, FAILING, PASSING, FAILING)
        sleep = AsyncMock()
        controller = PollController(make_config(poll=True, retries=3, polling_interval=2), client, sleep=sleep)

        outcome = await controller.run()

        assert client.calls == 3
        assert outcome.all_checks_pass is True
        assert outcome.iterations == 3
        assert outcome.state == PollState.SUCCEEDED
        assert sleep.await_count == 2
        sleep.assert_awaited_with(120)

    async def test_retry_limit_bounds_fetches(self):
        client = StaticCheckClient(PENDING)
        sleep = AsyncMock()
        controller = PollController(make_config(poll=True, retries=4), client, sleep=sleep)

        outcome = await controller.run()

        assert client.calls == 4
        assert outcome.all_checks_pass is False
        assert outcome.state == PollState.EXHAUSTED
        assert sleep.await_count == 3

    async def test_last_outcome_returned(self):
        client = StaticCheckClient(PENDING, FAILING)
        controller = PollController(make_config(poll=True, retries=2), client, sleep=AsyncMock())

        outcome = await controller.run()

        assert outcome.verdict == Verdict.FAILING
        assert [c.name for c in outcome.filtered_checks] == ["build", "lint"]

    async def test_startup_delay(self):
        client = StaticCheckClient(PASSING)
        sleep = AsyncMock()
        controller = PollController(make_config(delay=5), client, sleep=sleep)

        await controller.run()

        sleep.assert_awaited_once_with(5)

    async def test_own_check_excluded(self):
        checks = PASSING + [make_check(3, "gate", status="in_progress", conclusion=None)]
        client = StaticCheckClient(checks)
        controller = PollController(
            make_config(), client, is_self_check=lambda check: check.name == "gate", sleep=AsyncMock()
        )

        outcome = await controller.run()

        assert outcome.all_checks_pass is True
        assert [c.name for c in outcome.filtered_checks] == ["build", "lint"]

    async def test_missing_checks_reported(self):
        client = StaticCheckClient(PASSING)
        config = make_config(include=(CheckSelector("build", 1), CheckSelector("deploy", 1)))
        controller = PollController(config, client, sleep=AsyncMock())

        outcome = await controller.run()

        assert outcome.all_checks_pass is True
        assert [c.name for c in outcome.filtered_checks] == ["build"]
        assert outcome.missing_checks == [CheckSelector("deploy", 1)]

    async def test_conflicting_rules_fail_before_fetch(self):
        client = StaticCheckClient(PASSING)
        config = make_config(include=(CheckSelector("build"),), exclude=(CheckSelector("lint"),))

        with pytest.raises(ConfigurationError):
            await PollController(config, client, sleep=AsyncMock()).run()
        assert client.calls == 0

    async def test_invalid_retries(self):
        client = StaticCheckClient(PASSING)

        with pytest.raises(ConfigurationError):
            await PollController(make_config(poll=True, retries=0), client, sleep=AsyncMock()).run()

    async def test_fetch_error_aborts_run(self):
        client = FailingClient(FetchError("boom"))
        sleep = AsyncMock()
        controller = PollController(make_config(poll=True, retries=3), client, sleep=sleep)

        with pytest.raises(FetchError, match="boom"):
            await controller.run()
        assert client.calls == 1
        sleep.assert_not_awaited()

    async def test_unexpected_client_error_wrapped(self):
        client = FailingClient(RuntimeError("connection reset"))
        controller = PollController(make_config(), client, sleep=AsyncMock())

        with pytest.raises(FetchError, match="Error getting all checks: connection reset"):
            await controller.run()


def test_max_iterations():
    assert make_config(poll=False, retries=7).max_iterations == 1
    assert make_config(poll=True, retries=7).max_iterations == 7
