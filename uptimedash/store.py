"""Authoritative in-memory site collection and the filtered visible subset."""

import logging

from .errors import ValidationError
from .models import BulkResult, FilterState, RefreshResult, Site
from .session import SessionManager, ensure_success, json_body
from .validation import clean_urls, validate_bulk_urls

logger = logging.getLogger(__name__)


def _count(body: dict, key: str) -> int:
    value = body.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


class SiteCollectionStore:
    """Owns the list of sites fetched from the backend and the display filter.

    The collection is only ever replaced wholesale by fetch_all(); mutations
    go to the backend and are followed by a refetch. A failed request leaves
    the collection unchanged.
    """

    def __init__(self, session: SessionManager) -> None:
        self._session = session
        self._sites: list[Site] = []
        self._filter = FilterState.ALL
        self._visible: list[Site] = []

    @property
    def sites(self) -> list[Site]:
        """Full collection in fetch order."""
        return list(self._sites)

    @property
    def visible(self) -> list[Site]:
        """Sites passing the active filter, in fetch order."""
        return list(self._visible)

    @property
    def filter(self) -> FilterState:
        return self._filter

    def visible_ids(self) -> list[int]:
        return [site.id for site in self._visible]

    def all_ids(self) -> set[int]:
        return {site.id for site in self._sites}

    def get(self, site_id: int) -> Site | None:
        for site in self._sites:
            if site.id == site_id:
                return site
        return None

    def fetch_all(self) -> list[Site]:
        """Replace the collection with the backend's current list.

        A payload without a list of sites is treated as an empty collection.

        Raises:
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        response = ensure_success(self._session.authorized_request("GET", "/api/sites"), "load sites")
        raw_sites = json_body(response).get("sites")

        if not isinstance(raw_sites, list):
            if raw_sites is not None:
                logger.warning("Malformed sites payload (%s), treating as empty", type(raw_sites).__name__)
            raw_sites = []

        sites = []
        for entry in raw_sites:
            if not isinstance(entry, dict):
                logger.warning("Skipping malformed site entry: %r", entry)
                continue
            try:
                sites.append(Site.from_dict(entry))
            except ValueError as e:
                logger.warning("Skipping malformed site entry: %s", e)

        self._sites = sites
        self._recompute_visible()
        logger.debug("Fetched %d sites (%d visible)", len(self._sites), len(self._visible))
        return self.sites

    def add_single(self, url: str, refetch: bool = True) -> None:
        """Add one site, then refetch so its status fields come from the backend.

        Args:
            url: URL to monitor; surrounding whitespace is ignored.
            refetch: Reload the collection after the add. Callers that report
                a reload failure separately from the add pass False and reload
                themselves.

        Raises:
            ValidationError: If the URL is empty after trimming.
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        url = url.strip()
        if not url:
            raise ValidationError("Enter a URL")

        ensure_success(self._session.authorized_request("POST", "/api/sites", json={"url": url}), "add site")
        logger.info("Added site %s", url)
        if refetch:
            self.fetch_all()

    def add_bulk(self, urls: list[str]) -> BulkResult:
        """Add up to MAX_BULK_URLS sites in one request.

        Raises:
            ValidationError: If no URL remains after trimming or the batch is
                over the cap. No request is sent in that case.
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        cleaned = clean_urls(urls)
        error = validate_bulk_urls(cleaned)
        if error:
            raise ValidationError(error)

        response = ensure_success(
            self._session.authorized_request("POST", "/api/sites/bulk", json={"urls": cleaned}),
            "add sites",
        )
        body = json_body(response)
        result = BulkResult(attempted=_count(body, "total"), succeeded=_count(body, "success"))
        logger.info("Bulk add: %d/%d succeeded", result.succeeded, result.attempted)
        return result

    def delete_single(self, site_id: int) -> None:
        """Delete one site on the backend.

        Raises:
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        ensure_success(self._session.authorized_request("DELETE", f"/api/sites/{site_id}"), "delete site")
        logger.info("Deleted site %d", site_id)

    def delete_bulk(self, site_ids: set[int]) -> BulkResult:
        """Delete several sites in one request.

        Partial success is normal and reported through the counts only.

        Raises:
            ValidationError: If no ids are given.
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        if not site_ids:
            raise ValidationError("No sites selected")

        ids = sorted(site_ids)
        response = ensure_success(
            self._session.authorized_request("POST", "/api/sites/bulk-delete", json={"site_ids": ids}),
            "delete sites",
        )
        body = json_body(response)
        result = BulkResult(attempted=_count(body, "total"), succeeded=_count(body, "success"))
        logger.info("Bulk delete: %d/%d succeeded", result.succeeded, result.attempted)
        return result

    def refresh_statuses(self, refetch: bool = True) -> RefreshResult:
        """Ask the backend to re-check every site, then refetch.

        Args:
            refetch: Reload the collection after the re-check.

        Raises:
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        response = ensure_success(self._session.authorized_request("POST", "/api/sites/refresh"), "refresh sites")
        body = json_body(response)
        result = RefreshResult(updated=_count(body, "updated"), total=_count(body, "total"))
        logger.info("Refresh: %d/%d sites updated", result.updated, result.total)
        if refetch:
            self.fetch_all()
        return result

    def set_filter(self, state: FilterState) -> None:
        self._filter = FilterState(state)
        self._recompute_visible()

    def reset(self) -> None:
        """Drop the collection and return to the unfiltered view."""
        self._sites = []
        self._filter = FilterState.ALL
        self._visible = []

    def _recompute_visible(self) -> None:
        if self._filter is FilterState.DOWN_ONLY:
            self._visible = [site for site in self._sites if site.is_down]
        else:
            self._visible = list(self._sites)
