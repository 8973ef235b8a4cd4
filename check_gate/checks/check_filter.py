# AGPL-3.0 License

"""
Include/exclude filtering of the checks recorded against a commit.
"""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from check_gate.checks.check import Check, CheckSelector
from check_gate.checks.errors import ConfigurationError


@dataclass
class FilteredResult:
    """
    Outcome of filtering a raw check list.

    Attributes:
        filtered_checks: Checks retained by the rules, in input order
        missing_checks: Include selectors that matched no check
    """
    filtered_checks: list[Check] = field(default_factory=list)
    missing_checks: list[CheckSelector] = field(default_factory=list)


def ensure_exclusive_rules(include: Sequence[CheckSelector], exclude: Sequence[CheckSelector]) -> None:
    """
    Raises:
        ConfigurationError: If both include and exclude rules are given
    """
    if include and exclude:
        raise ConfigurationError(
            "You cannot define both checks_include and checks_exclude, please use only one of them"
        )


def unique_checks(checks: Iterable[Check]) -> list[Check]:
    """Drop repeated entries of the same check run, keeping the first occurrence."""
    seen = set()
    result = []
    for check in checks:
        if check.id in seen:
            continue
        seen.add(check.id)
        result.append(check)
    return result


def unique_by_key(checks: Iterable[Check]) -> list[Check]:
    """Keep one run per (name, app_id) pair, the first one listed."""
    seen = set()
    result = []
    for check in checks:
        if check.key in seen:
            continue
        seen.add(check.key)
        result.append(check)
    return result


def unique_selectors(selectors: Iterable[CheckSelector]) -> list[CheckSelector]:
    """Drop repeated (name, app_id) selectors, keeping the first occurrence."""
    seen = set()
    result = []
    for selector in selectors:
        if selector.key in seen:
            continue
        seen.add(selector.key)
        result.append(selector)
    return result


def include_matching(checks: Sequence[Check], include: Sequence[CheckSelector]) -> FilteredResult:
    """
    Keep only checks matched by an include selector.

    Selectors without any matching check are reported as missing. Repeated
    runs of the same (name, app_id) check collapse to the first one listed.
    """
    matched_ids = set()
    missing = []
    for selector in unique_selectors(include):
        matches = [check for check in checks if selector.matches(check)]
        if not matches:
            missing.append(selector)
        matched_ids.update(check.id for check in matches)

    filtered = unique_by_key(check for check in checks if check.id in matched_ids)
    return FilteredResult(filtered_checks=filtered, missing_checks=missing)


def exclude_matching(checks: Sequence[Check], exclude: Sequence[CheckSelector]) -> FilteredResult:
    """
    Drop checks matched by any exclude selector. Absent checks are not reported.

    Repeated runs of the same (name, app_id) check collapse to the first one listed.
    """
    selectors = unique_selectors(exclude)
    kept = [
        check for check in checks
        if not any(selector.matches(check) for selector in selectors)
    ]
    return FilteredResult(filtered_checks=unique_by_key(kept))


def filter_checks(
    raw_checks: Sequence[Check],
    include: Sequence[CheckSelector] = (),
    exclude: Sequence[CheckSelector] = (),
) -> FilteredResult:
    """
    Apply include/exclude rules to the checks of a commit.

    Args:
        raw_checks: All checks recorded against the commit
        include: Selectors of checks to keep (mutually exclusive with exclude)
        exclude: Selectors of checks to drop (mutually exclusive with include)

    Returns:
        FilteredResult with the retained checks and missing include selectors

    Raises:
        ConfigurationError: If both include and exclude are non-empty
    """
    ensure_exclusive_rules(include, exclude)

    if include:
        return include_matching(raw_checks, include)
    if exclude:
        return exclude_matching(raw_checks, exclude)
    return FilteredResult(filtered_checks=unique_checks(raw_checks))
