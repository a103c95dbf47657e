"""Multi-selection of sites with shift-click range support.

Selection is always interpreted against the store's current visible ordering:
range spans and select-all only touch sites that are on screen, while
membership of hidden sites is preserved until a reconciliation drops ids that
no longer exist in the full collection.
"""

import logging
from collections.abc import Callable, Iterable

from .models import HeaderState

logger = logging.getLogger(__name__)


class SelectionModel:
    """Tracks selected site ids and the anchor used for range selection."""

    def __init__(
        self,
        visible_ids: Callable[[], list[int]],
        all_ids: Callable[[], set[int]],
    ) -> None:
        """Initialize the selection model.

        Args:
            visible_ids: Returns the currently visible site ids in render order.
            all_ids: Returns the ids of the full last-fetched collection.
        """
        self._visible_ids = visible_ids
        self._all_ids = all_ids
        self._selected: set[int] = set()
        self._anchor: int | None = None

    @property
    def selected(self) -> list[int]:
        """Selected ids, sorted."""
        return sorted(self._selected)

    @property
    def anchor(self) -> int | None:
        return self._anchor

    def __len__(self) -> int:
        return len(self._selected)

    def is_selected(self, site_id: int) -> bool:
        return site_id in self._selected

    def toggle_single(self, site_id: int) -> bool:
        """Flip one site's membership and make it the range anchor.

        Returns:
            The site's new membership.
        """
        if site_id not in self._all_ids():
            logger.debug("Ignoring toggle of unknown site %d", site_id)
            return False

        if site_id in self._selected:
            self._selected.discard(site_id)
            checked = False
        else:
            self._selected.add(site_id)
            checked = True
        self._anchor = site_id
        return checked

    def toggle_range(self, site_id: int, checked: bool) -> list[int]:
        """Set every site between the anchor and site_id to checked.

        The span is inclusive and works in either direction. The anchor stays
        where it is. Without a usable anchor (none yet, or not currently
        visible) only site_id is set and it becomes the anchor.

        Returns:
            Ids whose membership was set, in visible order.
        """
        order = self._visible_ids()
        if site_id not in order:
            logger.debug("Ignoring range to site %d, not visible", site_id)
            return []

        if self._anchor is None or self._anchor not in order:
            self._apply([site_id], checked)
            self._anchor = site_id
            return [site_id]

        lo, hi = sorted((order.index(self._anchor), order.index(site_id)))
        span = order[lo : hi + 1]
        self._apply(span, checked)
        return span

    def select_all(self, checked: bool) -> None:
        """Set every visible site to checked; hidden sites are untouched."""
        self._apply(self._visible_ids(), checked)

    def header_state(self) -> HeaderState:
        """Tri-state of the select-all control for the visible set."""
        visible = self._visible_ids()
        count = sum(1 for site_id in visible if site_id in self._selected)
        if count == 0:
            return HeaderState(checked=False, indeterminate=False)
        if count == len(visible):
            return HeaderState(checked=True, indeterminate=False)
        return HeaderState(checked=False, indeterminate=True)

    def reconcile(self, all_ids: Iterable[int] | None = None) -> None:
        """Drop selected ids (and the anchor) missing from the full collection.

        Args:
            all_ids: Ids of the full collection; defaults to the bound provider.
        """
        present = set(all_ids) if all_ids is not None else self._all_ids()
        stale = self._selected - present
        if stale:
            logger.debug("Dropping %d stale selections", len(stale))
            self._selected -= stale
        if self._anchor is not None and self._anchor not in present:
            self._anchor = None

    def clear(self) -> None:
        self._selected.clear()
        self._anchor = None

    def _apply(self, ids: Iterable[int], checked: bool) -> None:
        if checked:
            self._selected.update(ids)
        else:
            self._selected.difference_update(ids)
