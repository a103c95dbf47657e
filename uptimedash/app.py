"""Dashboard controller: wires the session, store, selection and bulk layers.

Every public method is one user action. Errors stop at this boundary: they are
reported through the notifier and the method returns a falsy value. AuthExpired
is never reported here because SessionManager already told the user.
"""

import logging
from enum import Enum

import requests

from .bulk import LOAD_FAILED_MESSAGE, BulkOperationCoordinator
from .config import Config
from .credentials import FileTokenStore, TokenStore
from .errors import AuthError, AuthExpired, NetworkError, RegistrationError, ValidationError
from .models import BulkResult, FilterState, HeaderState, LinkCode, RefreshResult, Site
from .notify import ERROR, INFO, SUCCESS, Notifier
from .selection import SelectionModel
from .session import SessionManager
from .store import SiteCollectionStore

logger = logging.getLogger(__name__)


class View(str, Enum):
    """Which page the user is looking at."""

    LOGIN = "login"
    DASHBOARD = "dashboard"


def _format_details(details: dict[str, str]) -> str:
    return "; ".join(f"{field}: {message}" for field, message in sorted(details.items()))


class Dashboard:
    """Owns the view state and dispatches user actions to the components."""

    def __init__(
        self,
        config: Config,
        notifier: Notifier,
        token_store: TokenStore | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self._notifier = notifier
        self.view = View.LOGIN
        self.session = SessionManager(
            config.server,
            token_store if token_store is not None else FileTokenStore(config.credentials.path),
            notifier,
            on_expired=self._on_session_expired,
            http=http,
        )
        self.store = SiteCollectionStore(self.session)
        self.selection = SelectionModel(self.store.visible_ids, self.store.all_ids)
        self.bulk = BulkOperationCoordinator(self.store, self.selection, notifier)

    # -- session -------------------------------------------------------------

    def resume(self) -> bool:
        """Restore a persisted session without loading sites."""
        try:
            restored = self.session.verify_session()
        except OSError as e:
            logger.error("Cannot access token store: %s", e)
            restored = False

        self.view = View.DASHBOARD if restored else View.LOGIN
        return restored

    def start(self) -> bool:
        """Restore a persisted session, load sites and greet the user.

        A failed load still opens the dashboard with an empty list. An expiry
        during the load ends at the login view without a greeting.

        Returns:
            True if the dashboard is open.
        """
        if not self.resume():
            return False

        self.load_sites()
        if self.view is not View.DASHBOARD:
            return False
        self._notifier.notify("Welcome back!", SUCCESS)
        return True

    def login(self, username: str, password: str) -> bool:
        try:
            self.session.login(username, password)
        except AuthError as e:
            self._notifier.notify(str(e), ERROR)
            return False
        except NetworkError as e:
            logger.error("Login failed: %s", e)
            self._notifier.notify("Network error", ERROR)
            return False

        self._notifier.notify("Logged in successfully", SUCCESS)
        self.view = View.DASHBOARD
        self.load_sites()
        return True

    def register(self, username: str, email: str, password: str) -> bool:
        try:
            self.session.register(username, email, password)
        except (ValidationError, RegistrationError) as e:
            message = f"Registration failed: {_format_details(e.details)}" if e.details else "Registration failed"
            self._notifier.notify(message, ERROR)
            return False
        except NetworkError as e:
            logger.error("Registration failed: %s", e)
            self._notifier.notify("Network error", ERROR)
            return False

        self._notifier.notify("Registration successful, you can now log in", SUCCESS)
        self.view = View.LOGIN
        return True

    def logout(self) -> None:
        self.session.logout()
        self._reset()

    def link_telegram(self) -> LinkCode | None:
        try:
            link = self.session.request_telegram_link_code()
        except AuthExpired:
            return None
        except NetworkError as e:
            logger.error("Telegram link code failed: %s", e)
            self._notifier.notify("Failed to create Telegram link code", ERROR)
            return None

        self._notifier.notify(link.message, INFO)
        return link

    # -- sites ---------------------------------------------------------------

    def load_sites(self) -> bool:
        """Refetch the collection; on failure the previous one is kept."""
        try:
            self.store.fetch_all()
        except AuthExpired:
            return False
        except NetworkError as e:
            logger.error("Loading sites failed: %s", e)
            self._notifier.notify(LOAD_FAILED_MESSAGE, ERROR)
            return False
        finally:
            self.selection.reconcile()
        return True

    def add_site(self, url: str) -> bool:
        """Add one site. A failed reload after the add does not undo its success."""
        try:
            self.store.add_single(url, refetch=False)
        except AuthExpired:
            return False
        except ValidationError as e:
            self._notifier.notify(str(e), ERROR)
            return False
        except NetworkError as e:
            logger.error("Adding %s failed: %s", url, e)
            self._notifier.notify("Failed to add site", ERROR)
            return False

        self._notifier.notify(f"Added {url.strip()}", SUCCESS)
        self.load_sites()
        return True

    def add_sites(self, urls: list[str]) -> BulkResult | None:
        return self.bulk.add_many(urls)

    def delete_site(self, site_id: int) -> bool:
        try:
            self.store.delete_single(site_id)
        except AuthExpired:
            return False
        except NetworkError as e:
            logger.error("Deleting site %d failed: %s", site_id, e)
            self._notifier.notify("Failed to delete site", ERROR)
            return False

        self._notifier.notify("Site deleted", SUCCESS)
        self.load_sites()
        return True

    def delete_selected(self) -> BulkResult | None:
        return self.bulk.delete_selected()

    def refresh(self) -> RefreshResult | None:
        try:
            result = self.store.refresh_statuses(refetch=False)
        except AuthExpired:
            return None
        except NetworkError as e:
            logger.error("Refresh failed: %s", e)
            self._notifier.notify("Failed to refresh statuses", ERROR)
            return None

        self._notifier.notify(f"Updated {result.updated} of {result.total} sites", SUCCESS)
        self.load_sites()
        return result

    # -- view / selection ----------------------------------------------------

    def visible_sites(self) -> list[Site]:
        return self.store.visible

    def set_filter(self, state: FilterState) -> None:
        self.store.set_filter(state)

    def toggle(self, site_id: int, shift: bool = False, checked: bool | None = None) -> None:
        """Handle a click on a site's checkbox.

        Args:
            site_id: Site that was clicked.
            shift: Whether the range modifier was held.
            checked: Checkbox value after the click; for a shift-click it
                defaults to the opposite of the site's current membership.
        """
        if not shift:
            self.selection.toggle_single(site_id)
            return
        if checked is None:
            checked = not self.selection.is_selected(site_id)
        self.selection.toggle_range(site_id, checked)

    def select_all(self, checked: bool) -> None:
        self.selection.select_all(checked)

    def header_state(self) -> HeaderState:
        return self.selection.header_state()

    def _on_session_expired(self) -> None:
        logger.info("Switching to login view after session expiry")
        self._reset()

    def _reset(self) -> None:
        self.selection.clear()
        self.store.reset()
        self.view = View.LOGIN
