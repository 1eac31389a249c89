""" Client configuration with environment overrides """

import os
from dataclasses import dataclass
from typing import Callable, Optional

from . import __version__

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_REDIRECTS = 5


@dataclass
class ClientConfig:
    """Settings shared by every request a SyncHTTPClient makes."""
    user_agent: str = f"NetHttp/{__version__}"
    default_timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS

    def __post_init__(self):
        """Validate numeric settings."""
        if self.default_timeout <= 0:
            raise ValueError(f"default_timeout must be > 0, got {self.default_timeout}")
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0, got {self.max_redirects}")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from NETHTTP_* environment variables, falling back to defaults."""
        return cls(
            user_agent=os.getenv("NETHTTP_USER_AGENT") or cls.user_agent,
            default_timeout=_env_number("NETHTTP_TIMEOUT", float, DEFAULT_TIMEOUT),
            max_redirects=_env_number("NETHTTP_MAX_REDIRECTS", int, DEFAULT_MAX_REDIRECTS),
        )


def _env_number(name: str, cast: Callable, default):
    raw: Optional[str] = os.getenv(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}")
