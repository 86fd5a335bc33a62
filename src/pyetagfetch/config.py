"""Fetcher configuration for pyetagfetch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyetagfetch._constants import ACCEPT_JSON, USER_AGENT
from pyetagfetch.exceptions import FetcherConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FetcherConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FetcherConfig:
    """Endpoint and transport configuration.

    Parameters
    ----------
    url : str
        Resource to fetch. May be empty at construction time and supplied
        later through :meth:`pyetagfetch.EtagFetcher.reset`.
    refresh_interval : float or None
        Client-chosen refresh interval in seconds, independent of the
        server's ``Expires`` header. ``None`` disables it.
    fetch_refreshes_without_interval : bool
        When a value is known and neither ``Expires`` nor a refresh interval
        applies, the value is normally treated as fresh forever. Set this to
        ``True`` to contact the server on every :meth:`fetch` in that case.
    request_timeout : float
        Total timeout for a single GET in seconds.
    user_agent : str
        ``User-Agent`` header sent by :class:`AiohttpTransport`.
    accept : str
        ``Accept`` header sent by :class:`AiohttpTransport`.
    """

    url: str = ""
    refresh_interval: float | None = None
    fetch_refreshes_without_interval: bool = False
    request_timeout: float = 30.0
    user_agent: str = USER_AGENT
    accept: str = ACCEPT_JSON

    def __post_init__(self) -> None:
        if self.refresh_interval is not None and self.refresh_interval < 0:
            raise FetcherConfigError(f"refresh_interval must be >= 0, got {self.refresh_interval}")
        if self.request_timeout <= 0:
            raise FetcherConfigError(f"request_timeout must be > 0, got {self.request_timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FetcherConfig:
        """Create configuration from ``PYETAGFETCH_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("PYETAGFETCH_URL")
        if url is not None:
            config_kwargs["url"] = url

        user_agent = env.get("PYETAGFETCH_USER_AGENT")
        if user_agent is not None:
            config_kwargs["user_agent"] = user_agent

        interval_env = env.get("PYETAGFETCH_REFRESH_INTERVAL")
        if interval_env is not None and "refresh_interval" not in overrides:
            stripped = interval_env.strip()
            config_kwargs["refresh_interval"] = (
                _env_float("PYETAGFETCH_REFRESH_INTERVAL", stripped) if stripped else None
            )

        timeout_env = env.get("PYETAGFETCH_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("PYETAGFETCH_REQUEST_TIMEOUT", timeout_env)

        if "fetch_refreshes_without_interval" not in overrides:
            config_kwargs["fetch_refreshes_without_interval"] = _env_bool(
                env.get("PYETAGFETCH_FETCH_REFRESHES_WITHOUT_INTERVAL"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
