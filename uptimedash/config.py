"""Configuration loader with type-safe dataclasses."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from . import __version__


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 10


def _get_default_token_path() -> str:
    """Get the default token path using XDG-compliant directory.

    Returns ~/.local/share/uptimedash/token which is the standard
    location for user-specific data files on Linux/macOS.
    """
    home = Path.home()
    return str(home / ".local" / "share" / "uptimedash" / "token")


DEFAULT_TOKEN_PATH = _get_default_token_path()


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the monitoring backend."""

    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT  # seconds per request
    user_agent: str = f"UptimeDash/{__version__}"

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigError("Server base_url cannot be empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigError(f"Server base_url must start with http:// or https://, got '{self.base_url}'")
        if self.timeout < 1:
            raise ConfigError(f"Server timeout must be at least 1 second (got {self.timeout})")
        if not self.user_agent:
            raise ConfigError("User-Agent cannot be empty")


@dataclass(frozen=True)
class CredentialsConfig:
    """Configuration for the persisted session token."""

    path: str = DEFAULT_TOKEN_PATH

    def __post_init__(self) -> None:
        if not self.path:
            raise ConfigError("Credentials path cannot be empty")


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    server: ServerConfig = field(default_factory=ServerConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)


def _parse_server_config(data: dict | None) -> ServerConfig:
    """Parse server configuration section."""
    if data is None:
        return ServerConfig()
    if not isinstance(data, dict):
        raise ConfigError("'server' section must be a dictionary")

    try:
        timeout = int(data.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        raise ConfigError(f"Server timeout must be an integer, got {data.get('timeout')!r}")

    return ServerConfig(
        base_url=str(data.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        timeout=timeout,
        user_agent=str(data.get("user_agent", f"UptimeDash/{__version__}")),
    )


def _parse_credentials_config(data: dict | None) -> CredentialsConfig:
    """Parse credentials configuration section."""
    if data is None:
        return CredentialsConfig()
    if not isinstance(data, dict):
        raise ConfigError("'credentials' section must be a dictionary")

    path = str(data.get("path", DEFAULT_TOKEN_PATH))
    return CredentialsConfig(path=os.path.expanduser(path))


def _apply_env_overrides(config_data: dict) -> dict:
    """Apply environment variable overrides to configuration.

    Supported overrides:
    - UPTIMEDASH_BASE_URL: Override server.base_url
    - UPTIMEDASH_TIMEOUT: Override server.timeout
    - UPTIMEDASH_TOKEN_PATH: Override credentials.path
    """
    if config_data.get("server") is None:
        config_data["server"] = {}
    if config_data.get("credentials") is None:
        config_data["credentials"] = {}

    # Malformed sections are left alone so the section parsers can reject them
    server = config_data["server"]
    credentials = config_data["credentials"]

    base_url = os.environ.get("UPTIMEDASH_BASE_URL")
    if base_url is not None and isinstance(server, dict):
        server["base_url"] = base_url

    timeout = os.environ.get("UPTIMEDASH_TIMEOUT")
    if timeout is not None and isinstance(server, dict):
        server["timeout"] = timeout

    token_path = os.environ.get("UPTIMEDASH_TOKEN_PATH")
    if token_path is not None and isinstance(credentials, dict):
        credentials["path"] = token_path

    return config_data


def load_config(config_path: str | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None to use
            defaults (environment overrides still apply).

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the file cannot be read or configuration is invalid.
    """
    if config_path is None:
        data: dict = {}
    else:
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML configuration: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}")

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a YAML dictionary")

    data = _apply_env_overrides(data)

    return Config(
        server=_parse_server_config(data.get("server")),
        credentials=_parse_credentials_config(data.get("credentials")),
    )
