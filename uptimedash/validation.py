"""Client-side input validation, applied before any request is sent."""

import logging
import re

logger = logging.getLogger(__name__)

# Hard cap on URLs per bulk-add request; the backend rejects larger batches.
MAX_BULK_URLS = 50

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

# Single "@" with a non-empty local part and domain.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


def parse_url_list(text: str) -> list[str]:
    """Split pasted text into URLs, one per line.

    Lines are trimmed; blank lines and lines starting with '#' are dropped.

    Args:
        text: Raw multi-line input.

    Returns:
        URLs in input order.
    """
    urls = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        urls.append(line)
    return urls


def clean_urls(urls: list[str]) -> list[str]:
    """Trim every URL and drop the ones left empty."""
    return [url.strip() for url in urls if url and url.strip()]


def validate_bulk_urls(urls: list[str]) -> str | None:
    """Check a cleaned bulk-add batch against the request limits.

    Returns:
        An error message if the batch is unacceptable, None otherwise.
    """
    if not urls:
        return "Enter at least one URL"
    if len(urls) > MAX_BULK_URLS:
        return f"Too many URLs ({len(urls)}). Maximum {MAX_BULK_URLS} at once"
    return None


def validate_registration(username: str, email: str, password: str) -> dict[str, str]:
    """Validate registration fields with the same rules the backend applies.

    Returns:
        Mapping of field name to error message; empty if all fields are valid.
    """
    errors: dict[str, str] = {}

    if len(username) < MIN_USERNAME_LENGTH:
        errors["username"] = f"Username must be at least {MIN_USERNAME_LENGTH} characters"

    if not _EMAIL_PATTERN.match(email):
        errors["email"] = "Invalid email address"

    if len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit = any(c.isdigit() for c in password)
    if not (has_upper and has_lower and has_digit):
        errors["password"] = "Password must contain uppercase, lowercase letters and numbers"

    if errors:
        logger.debug("Registration input rejected: %s", sorted(errors))
    return errors
