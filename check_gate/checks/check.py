# AGPL-3.0 License

"""
Check run data structures.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from check_gate.checks.errors import ConfigurationError

# Marker values accepted in configuration for "match any app"
ANY_APP_MARKERS = ("*", "-1", -1)


class CheckStatus(str, Enum):
    """
    Lifecycle status of a check run.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"
    COMPLETED = "completed"


class CheckConclusion(str, Enum):
    """
    Final conclusion of a completed check run.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"


@dataclass(frozen=True)
class Check:
    """
    A single check run recorded against a commit.

    Attributes:
        id: Identity of the check run
        name: Check name as shown on the commit
        app_id: Id of the app that created the check run
        status: Lifecycle status (see CheckStatus)
        conclusion: Final conclusion, only meaningful once completed
        app_name: Display name of the creating app
    """

    id: Union[int, str]
    name: str
    app_id: int
    status: str
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    app_name: str = ""
    details_url: Optional[str] = None

    @property
    def key(self) -> tuple[str, int]:
        """(name, app_id) pair used for matching and de-duplication."""
        return self.name, self.app_id

    @property
    def is_completed(self) -> bool:
        return self.status == CheckStatus.COMPLETED.value

    def to_dict(self) -> dict:
        """Convert to the check run payload shape used by the GitHub REST API."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "details_url": self.details_url,
            "app": {"id": self.app_id, "name": self.app_name},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Check":
        """Create Check from a check run payload."""
        app = data.get("app") or {}
        return cls(
            id=data["id"],
            name=data["name"],
            app_id=app.get("id", data.get("app_id")),
            status=data["status"],
            conclusion=data.get("conclusion"),
            started_at=_parse_timestamp(data.get("started_at")),
            completed_at=_parse_timestamp(data.get("completed_at")),
            app_name=app.get("name", ""),
            details_url=data.get("details_url"),
        )


@dataclass(frozen=True)
class CheckSelector:
    """
    Include/exclude rule identifying checks by name and creating app.

    An app_id of None matches checks created by any app.
    """

    name: str
    app_id: Optional[int] = None

    @property
    def key(self) -> tuple[str, Optional[int]]:
        return self.name, self.app_id

    @property
    def matches_any_app(self) -> bool:
        return self.app_id is None

    def matches(self, check: Check) -> bool:
        """Exact name match, and exact app match unless the selector accepts any app."""
        if check.name != self.name:
            return False
        return self.matches_any_app or check.app_id == self.app_id

    def __str__(self) -> str:
        app = "*" if self.matches_any_app else str(self.app_id)
        return f"{self.name} (app {app})"

    def to_dict(self) -> dict:
        return {"name": self.name, "app_id": self.app_id}

    @classmethod
    def from_value(cls, value: Any) -> "CheckSelector":
        """
        Build a selector from a configuration value.

        Accepts a bare check name or a mapping with "name" and optional "app_id".

        Raises:
            ConfigurationError: If the value has an unsupported shape
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if not value.strip():
                raise ConfigurationError("Check selector name must not be empty")
            return cls(name=value.strip())
        if isinstance(value, dict):
            name = value.get("name")
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(f"Check selector requires a non-empty 'name': {value!r}")
            app_id = value.get("app_id")
            if app_id is None or app_id in ANY_APP_MARKERS:
                return cls(name=name.strip())
            try:
                return cls(name=name.strip(), app_id=int(app_id))
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid app_id for check selector '{name}': {app_id!r}")
        raise ConfigurationError(f"Unsupported check selector: {value!r}")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # GitHub uses a trailing "Z" which older fromisoformat does not accept
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
