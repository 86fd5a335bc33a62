from __future__ import annotations

import pytest

from pyetagfetch._constants import USER_AGENT
from pyetagfetch.config import FetcherConfig
from pyetagfetch.exceptions import FetcherConfigError

_ENV_VARS = (
    "PYETAGFETCH_URL",
    "PYETAGFETCH_USER_AGENT",
    "PYETAGFETCH_REFRESH_INTERVAL",
    "PYETAGFETCH_REQUEST_TIMEOUT",
    "PYETAGFETCH_FETCH_REFRESHES_WITHOUT_INTERVAL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = FetcherConfig()
    assert config.url == ""
    assert config.refresh_interval is None
    assert config.fetch_refreshes_without_interval is False
    assert config.request_timeout == 30.0
    assert config.user_agent == USER_AGENT


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYETAGFETCH_URL", "https://api.example.com/items")
    monkeypatch.setenv("PYETAGFETCH_REFRESH_INTERVAL", "60")
    monkeypatch.setenv("PYETAGFETCH_REQUEST_TIMEOUT", "5.5")
    monkeypatch.setenv("PYETAGFETCH_FETCH_REFRESHES_WITHOUT_INTERVAL", "yes")
    monkeypatch.setenv("PYETAGFETCH_USER_AGENT", "probe/1")

    config = FetcherConfig.from_env()

    assert config.url == "https://api.example.com/items"
    assert config.refresh_interval == 60.0
    assert config.request_timeout == 5.5
    assert config.fetch_refreshes_without_interval is True
    assert config.user_agent == "probe/1"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYETAGFETCH_URL", "https://env.example.com")
    monkeypatch.setenv("PYETAGFETCH_REFRESH_INTERVAL", "not-a-number")

    config = FetcherConfig.from_env(url="https://override.example.com", refresh_interval=10.0)

    assert config.url == "https://override.example.com"
    assert config.refresh_interval == 10.0


def test_empty_interval_env_disables_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYETAGFETCH_REFRESH_INTERVAL", " ")
    assert FetcherConfig.from_env().refresh_interval is None


def test_invalid_number_in_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYETAGFETCH_REQUEST_TIMEOUT", "soon")
    with pytest.raises(FetcherConfigError, match="PYETAGFETCH_REQUEST_TIMEOUT"):
        FetcherConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"refresh_interval": -1.0},
        {"request_timeout": 0.0},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, float]) -> None:
    with pytest.raises(FetcherConfigError):
        FetcherConfig(**kwargs)  # type: ignore[arg-type]
