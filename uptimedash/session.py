"""Session lifecycle and credential-carrying requests against the backend."""

import logging
import threading
from collections.abc import Callable
from typing import Any

import requests

from .config import ServerConfig
from .credentials import TokenStore
from .errors import AuthError, AuthExpired, NetworkError, RegistrationError, ValidationError
from .models import LinkCode
from .notify import ERROR, Notifier
from .validation import validate_registration

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired, please log in again"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


def is_success(response: requests.Response) -> bool:
    """Return True for 2xx responses."""
    return 200 <= response.status_code < 300


def json_body(response: requests.Response) -> dict[str, Any]:
    """Decode a JSON object body, treating anything else as empty."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def ensure_success(response: requests.Response, action: str) -> requests.Response:
    """Raise NetworkError unless the response is 2xx.

    Args:
        response: Response to check.
        action: Short description used in the error message (e.g. "add site").
    """
    if not is_success(response):
        raise NetworkError(f"Failed to {action} (HTTP {response.status_code})", status_code=response.status_code)
    return response


def _mask_token(token: str | None) -> str:
    if not token:
        return "<none>"
    return token[:6] + "***"


class SessionManager:
    """Owns the authentication token and wraps requests with it.

    Any HTTP 401 on an authorized request tears the session down exactly once:
    the token is cleared in memory and in the store, the user is notified, and
    on_expired is called so the UI can switch to the logged-out view.
    """

    def __init__(
        self,
        config: ServerConfig,
        token_store: TokenStore,
        notifier: Notifier,
        on_expired: Callable[[], None] | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._token_store = token_store
        self._notifier = notifier
        self._on_expired = on_expired
        self._http = http if http is not None else requests.Session()
        self._lock = threading.Lock()
        self._token: str | None = None
        # Bumped whenever a session starts or ends; a 401 only expires the
        # session generation its request was sent with.
        self._generation = 0

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def login(self, username: str, password: str) -> str:
        """Authenticate and start a session.

        Returns:
            The new session token.

        Raises:
            AuthError: If the backend rejects the credentials.
            NetworkError: If the request cannot complete.
        """
        response = self._send("POST", "/api/login", json={"username": username, "password": password})
        if not is_success(response):
            logger.info("Login rejected for %s (HTTP %d)", username, response.status_code)
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        token = json_body(response).get("token")
        if not token or not isinstance(token, str):
            logger.warning("Login response for %s carried no token", username)
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        self._start(token)
        self._token_store.write(token)
        logger.info("Logged in as %s (token %s)", username, _mask_token(token))
        return token

    def register(self, username: str, email: str, password: str) -> None:
        """Create an account.

        Raises:
            ValidationError: If the fields fail client-side validation.
            RegistrationError: If the backend rejects the registration; carries
                field-level details when the backend supplies them.
            NetworkError: If the request cannot complete.
        """
        errors = validate_registration(username, email, password)
        if errors:
            raise ValidationError("Invalid registration data", details=errors)

        response = self._send(
            "POST",
            "/api/register",
            json={"username": username, "email": email, "password": password},
        )
        if is_success(response):
            logger.info("Registered user %s", username)
            return

        details = json_body(response).get("details")
        logger.info("Registration rejected for %s (HTTP %d)", username, response.status_code)
        if isinstance(details, dict) and details:
            raise RegistrationError(
                "Registration failed",
                details={str(field): str(message) for field, message in details.items()},
            )
        raise RegistrationError("Registration failed")

    def verify_session(self) -> bool:
        """Restore a persisted session if the backend still accepts it.

        Any failure, including network errors, discards the persisted token.

        Returns:
            True if a session is now active.
        """
        token = self._token_store.read()
        if not token:
            logger.debug("No persisted token, starting logged out")
            return False

        try:
            response = self._send("GET", "/api/verify-token", token=token)
        except NetworkError as e:
            logger.warning("Session verification failed: %s", e)
            self._discard()
            return False

        if not is_success(response):
            logger.info("Persisted token rejected (HTTP %d)", response.status_code)
            self._discard()
            return False

        self._start(token)
        logger.info("Session restored (token %s)", _mask_token(token))
        return True

    def authorized_request(self, method: str, path: str, json: Any = None) -> requests.Response:
        """Send a request carrying the session credential.

        Non-2xx responses other than 401 are returned for the caller to judge.

        Raises:
            AuthExpired: If there is no session or the backend answers 401.
            NetworkError: If the request cannot complete.
        """
        with self._lock:
            token = self._token
            generation = self._generation

        if token is None:
            raise AuthExpired("Not logged in")

        response = self._send(method, path, json=json, token=token)
        if response.status_code == 401:
            logger.info("%s %s rejected credential (token %s)", method, path, _mask_token(token))
            self._expire(generation)
            raise AuthExpired()
        return response

    def logout(self) -> None:
        """End the session locally. Never contacts the backend."""
        with self._lock:
            self._token = None
            self._generation += 1
        self._token_store.clear()
        logger.info("Logged out")

    def request_telegram_link_code(self) -> LinkCode:
        """Ask the backend for a one-time code to link a Telegram chat.

        Raises:
            AuthExpired: If the session is rejected.
            NetworkError: On transport failure or a non-2xx response.
        """
        response = ensure_success(
            self.authorized_request("POST", "/api/telegram/link-code"),
            "create Telegram link code",
        )
        body = json_body(response)
        code = body.get("code")
        if not code:
            raise NetworkError("Link code response carried no code", status_code=response.status_code)

        return LinkCode(
            code=str(code),
            expires_in=int(body.get("expires_in", 0)),
            message=str(body.get("message") or f"Send /link {code} to the bot in Telegram."),
        )

    def _start(self, token: str) -> None:
        with self._lock:
            self._token = token
            self._generation += 1

    def _discard(self) -> None:
        with self._lock:
            self._token = None
            self._generation += 1
        self._token_store.clear()

    def _expire(self, generation: int) -> None:
        """Tear down the session if it is still the one the request used."""
        with self._lock:
            if self._token is None or generation != self._generation:
                logger.debug("Session already expired, ignoring repeated 401")
                return
            self._token = None
            self._generation += 1

        self._token_store.clear()
        logger.warning("Session expired")
        self._notifier.notify(SESSION_EXPIRED_MESSAGE, ERROR)
        if self._on_expired is not None:
            self._on_expired()

    def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        token: str | None = None,
    ) -> requests.Response:
        """Issue a request, translating transport failures into NetworkError."""
        url = self._config.base_url + path
        headers = {"User-Agent": self._config.user_agent}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s", method, url)
        try:
            return self._http.request(
                method,
                url,
                json=json,
                headers=headers,
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkError(f"Network error: {e}") from e
