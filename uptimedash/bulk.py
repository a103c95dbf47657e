"""Bulk add/delete orchestration across the store and the selection."""

import logging

from .errors import AuthExpired, NetworkError, ValidationError
from .models import BulkResult
from .notify import ERROR, SUCCESS, WARNING, Notifier
from .selection import SelectionModel
from .store import SiteCollectionStore
from .validation import clean_urls, validate_bulk_urls

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load sites"


def _result_level(result: BulkResult) -> str:
    return WARNING if result.is_partial else SUCCESS


class BulkOperationCoordinator:
    """Runs operations that touch many sites and reconciles state afterwards.

    Each operation runs its phases in order: request, refetch, selection
    reconciliation, then a single notification with the counts.
    """

    def __init__(self, store: SiteCollectionStore, selection: SelectionModel, notifier: Notifier) -> None:
        self._store = store
        self._selection = selection
        self._notifier = notifier

    def add_many(self, urls: list[str]) -> BulkResult | None:
        """Add a batch of URLs and report "{succeeded} of {attempted}".

        Empty or oversized batches are rejected before any request.

        Returns:
            The bulk result, or None if nothing was added.
        """
        cleaned = clean_urls(urls)
        error = validate_bulk_urls(cleaned)
        if error:
            self._notifier.notify(error, ERROR)
            return None

        try:
            result = self._store.add_bulk(cleaned)
        except AuthExpired:
            return None
        except (ValidationError, NetworkError) as e:
            logger.error("Bulk add failed: %s", e)
            self._notifier.notify(f"Failed to add sites: {e}", ERROR)
            return None

        refetch_error = self._refetch()
        self._notifier.notify(f"Added {result.succeeded} of {result.attempted} sites", _result_level(result))
        if refetch_error is not None:
            self._notifier.notify(LOAD_FAILED_MESSAGE, ERROR)
        return result

    def delete_selected(self) -> BulkResult | None:
        """Delete every selected site and report "{succeeded} of {attempted}".

        Does nothing when the selection is empty. The selection is cleared and
        the collection refetched whatever the outcome of the delete.

        Returns:
            The bulk result, or None if no delete completed.
        """
        site_ids = set(self._selection.selected)
        if not site_ids:
            return None

        result: BulkResult | None = None
        try:
            result = self._store.delete_bulk(site_ids)
        except AuthExpired:
            pass
        except (ValidationError, NetworkError) as e:
            logger.error("Bulk delete of %d sites failed: %s", len(site_ids), e)
            self._notifier.notify(f"Failed to delete sites: {e}", ERROR)

        self._selection.clear()
        refetch_error = self._refetch()

        if result is not None:
            self._notifier.notify(f"Deleted {result.succeeded} of {result.attempted} sites", _result_level(result))
            if refetch_error is not None:
                self._notifier.notify(LOAD_FAILED_MESSAGE, ERROR)
        return result

    def _refetch(self) -> NetworkError | None:
        """Reload the collection and reconcile the selection.

        On failure the previous collection is kept and the error is returned
        for the caller to report.
        """
        try:
            self._store.fetch_all()
        except AuthExpired:
            return None
        except NetworkError as e:
            logger.warning("Refetch after bulk operation failed: %s", e)
            return e
        finally:
            self._selection.reconcile()
        return None
