# AGPL-3.0 License

import argparse
import asyncio
import sys

from check_gate.checks.errors import CheckGateError, ConfigurationError
from check_gate.config_loader import apply_github_environment, get_settings
from check_gate.log import LoggingFormat, get_logger, setup_logger
from check_gate.tools.checks_gate import ChecksGate


def set_parser():
    parser = argparse.ArgumentParser(
        description="Wait for the checks of a commit to finish and fail unless they all pass.",
        epilog="Any setting can also be given through CHECK_GATE_<SECTION>__<KEY> environment variables.",
    )
    parser.add_argument("--owner", help="Repository owner")
    parser.add_argument("--repo", help="Repository name")
    parser.add_argument("--ref", help="Commit SHA to evaluate")
    parser.add_argument("--poll", action=argparse.BooleanOptionalAction, default=None,
                        help="Keep polling until the checks pass or retries run out")
    parser.add_argument("--retries", type=int, help="Maximum number of fetches when polling")
    parser.add_argument("--polling-interval", type=float, help="Minutes between fetches")
    parser.add_argument("--delay", type=float, help="Seconds to wait before the first fetch")
    parser.add_argument("--fail-on-missing-checks", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser


def apply_cli_overrides(args, settings) -> None:
    overrides = {
        "github.owner": args.owner,
        "github.repo": args.repo,
        "github.ref": args.ref,
        "checks.poll": args.poll,
        "checks.retries": args.retries,
        "checks.polling_interval": args.polling_interval,
        "checks.delay": args.delay,
        "checks.fail_on_missing_checks": args.fail_on_missing_checks,
        "log.level": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            settings.set(key, value)


def logging_format(value) -> LoggingFormat:
    """
    Raises:
        ConfigurationError: If the value is not a known log format
    """
    try:
        return LoggingFormat(str(value).upper())
    except ValueError:
        choices = ", ".join(f.value for f in LoggingFormat)
        raise ConfigurationError(f"Unknown log format {value!r}, expected one of: {choices}")


def run(inargs=None) -> int:
    args = set_parser().parse_args(inargs)
    settings = get_settings()
    apply_cli_overrides(args, settings)
    apply_github_environment(settings)

    try:
        setup_logger(settings.get("log.level", "INFO"), logging_format(settings.get("log.format", "CONSOLE")))
        return asyncio.run(ChecksGate(settings).run())
    except CheckGateError as e:
        get_logger().error(f"Checks gate failed: {e}")
        return 1


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
