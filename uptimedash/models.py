"""Data models for monitored sites and client-side view state."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)

# The backend serializes never-checked sites with Go's zero time.
_ZERO_TIME_PREFIX = "0001-01-01"


class SiteStatus(str, Enum):
    """Last known uptime status of a site."""

    UP = "UP"
    DOWN = "DOWN"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "SiteStatus | None":
        """Normalize a raw status value, case-insensitively.

        Returns None when the value is absent or empty; unrecognized strings
        map to UNKNOWN.
        """
        if value is None:
            return None
        text = str(value).strip().upper()
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            return cls.UNKNOWN


class FilterState(str, Enum):
    """Which sites are visible on the dashboard."""

    ALL = "all"
    DOWN_ONLY = "down"


def _parse_timestamp(value: object) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    if value.startswith(_ZERO_TIME_PREFIX):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable timestamp: %s", value)
        return None


@dataclass(frozen=True)
class Site:
    """A monitored site as reported by the backend.

    Attributes:
        id: Server-assigned unique identifier.
        url: Monitored URL.
        last_status: Last known status, or None if never reported.
        last_checked: Timestamp of the last check, or None if never checked.
    """

    id: int
    url: str
    last_status: SiteStatus | None = None
    last_checked: datetime | None = None

    @property
    def is_down(self) -> bool:
        return self.last_status is SiteStatus.DOWN

    @classmethod
    def from_dict(cls, data: dict) -> "Site":
        """Build a Site from an API payload entry.

        Raises:
            ValueError: If the entry has no integer id.
        """
        site_id = data.get("id")
        if isinstance(site_id, bool) or not isinstance(site_id, int):
            raise ValueError(f"Site entry has invalid id: {site_id!r}")

        return cls(
            id=site_id,
            url=str(data.get("url", "")),
            last_status=SiteStatus.parse(data.get("last_status")),
            last_checked=_parse_timestamp(data.get("last_checked")),
        )


@dataclass(frozen=True)
class BulkResult:
    """Outcome counts of a bulk add or delete.

    Individual failing items are not identified.
    """

    attempted: int
    succeeded: int

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    @property
    def is_partial(self) -> bool:
        return self.succeeded < self.attempted


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a backend re-check of all sites."""

    updated: int
    total: int


@dataclass(frozen=True)
class HeaderState:
    """Tri-state value of the select-all control."""

    checked: bool
    indeterminate: bool


@dataclass(frozen=True)
class LinkCode:
    """One-time code for linking a Telegram chat to the account.

    Attributes:
        code: Code to send to the bot with /link.
        expires_in: Seconds until the code expires.
        message: Human-readable instructions from the backend.
    """

    code: str
    expires_in: int
    message: str
