"""Tests for data models."""

from datetime import UTC, datetime

import pytest

from uptimedash.models import BulkResult, Site, SiteStatus


class TestSiteStatus:
    """Tests for status normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("UP", SiteStatus.UP),
            ("down", SiteStatus.DOWN),
            (" Down ", SiteStatus.DOWN),
            ("UNKNOWN", SiteStatus.UNKNOWN),
            ("flapping", SiteStatus.UNKNOWN),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, raw: object, expected: SiteStatus | None) -> None:
        """Statuses are matched case-insensitively."""
        assert SiteStatus.parse(raw) is expected


class TestSite:
    """Tests for Site.from_dict."""

    def test_full_entry(self) -> None:
        """All fields are parsed from an API entry."""
        site = Site.from_dict(
            {
                "id": 4,
                "url": "https://example.com",
                "user_id": 1,
                "last_status": "DOWN",
                "last_checked": "2026-10-19T12:00:00Z",
                "created_at": "2026-10-01T00:00:00Z",
            }
        )

        assert site.id == 4
        assert site.url == "https://example.com"
        assert site.is_down
        assert site.last_checked == datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def test_never_checked(self) -> None:
        """The zero timestamp means never checked."""
        site = Site.from_dict({"id": 1, "url": "u", "last_checked": "0001-01-01T00:00:00Z"})

        assert site.last_checked is None
        assert site.last_status is None
        assert not site.is_down

    def test_bad_timestamp(self) -> None:
        """Unparseable timestamps are dropped."""
        assert Site.from_dict({"id": 1, "url": "u", "last_checked": "yesterday"}).last_checked is None

    @pytest.mark.parametrize("bad_id", [None, "3", 2.5, True])
    def test_rejects_bad_id(self, bad_id: object) -> None:
        """Only integer ids are accepted."""
        with pytest.raises(ValueError):
            Site.from_dict({"id": bad_id, "url": "u"})


class TestBulkResult:
    """Tests for BulkResult."""

    def test_partial(self) -> None:
        """Fewer successes than attempts is partial."""
        result = BulkResult(attempted=3, succeeded=2)
        assert result.failed == 1
        assert result.is_partial

    def test_complete(self) -> None:
        """All successes is not partial."""
        assert not BulkResult(attempted=2, succeeded=2).is_partial
