# AGPL-3.0 License

"""
Global settings, loaded with Dynaconf from the bundled configuration.toml.

Environment variables prefixed with CHECK_GATE_ override any value, using a
double underscore for nesting (e.g. CHECK_GATE_CHECKS__POLL=true).
"""

import os
from os.path import abspath, dirname, join

from dynaconf import Dynaconf

current_dir = dirname(abspath(__file__))

SETTINGS_FILES = [
    "settings/configuration.toml",
]

global_settings = Dynaconf(
    envvar_prefix="CHECK_GATE",
    merge_enabled=True,
    settings_files=[join(current_dir, f) for f in SETTINGS_FILES],
)


def get_settings() -> Dynaconf:
    return global_settings


def apply_github_environment(settings: Dynaconf) -> None:
    """
    Fill repository, commit and token settings from the GitHub Actions
    environment when they are not configured explicitly.
    """
    repository = os.environ.get("GITHUB_REPOSITORY", "")
    if repository and "/" in repository:
        owner, repo = repository.split("/", 1)
        if not settings.get("github.owner"):
            settings.set("github.owner", owner)
        if not settings.get("github.repo"):
            settings.set("github.repo", repo)
    if not settings.get("github.ref") and os.environ.get("GITHUB_SHA"):
        settings.set("github.ref", os.environ["GITHUB_SHA"])
    if not settings.get("github.token") and os.environ.get("GITHUB_TOKEN"):
        settings.set("github.token", os.environ["GITHUB_TOKEN"])
