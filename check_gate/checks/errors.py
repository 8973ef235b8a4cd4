# AGPL-3.0 License

"""
Error types raised by the check gate.
"""


class CheckGateError(Exception):
    """Base class for all check gate errors."""


class ConfigurationError(CheckGateError):
    """Raised when the gate configuration is invalid, before any fetch happens."""


class FetchError(CheckGateError):
    """Raised when the checks for a commit could not be retrieved."""


class ResolutionError(CheckGateError):
    """Raised when the check run of the current job cannot be identified."""
