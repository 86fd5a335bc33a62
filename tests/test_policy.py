from __future__ import annotations

from email.utils import formatdate

import pytest
from pydantic import ValidationError

from pyetagfetch.state.cache import EndpointCacheState
from pyetagfetch.state.policy import compute_refresh_delay, parse_expires

NOW = 1_700_000_000.0


def _delay(**overrides: object) -> float | None:
    kwargs: dict[str, object] = {
        "now": NOW,
        "expires_at": None,
        "last_fetch_timestamp": None,
        "refresh_interval": None,
        "has_value": False,
    }
    kwargs.update(overrides)
    return compute_refresh_delay(**kwargs)  # type: ignore[arg-type]


class TestComputeRefreshDelay:
    def test_nothing_known_is_due_now(self) -> None:
        assert _delay() == 0.0

    def test_value_without_any_freshness_signal_is_never_refreshed(self) -> None:
        assert _delay(has_value=True) is None

    def test_future_expiry(self) -> None:
        assert _delay(expires_at=NOW + 30, has_value=True) == pytest.approx(30.0)

    def test_past_expiry_is_stale_not_undefined(self) -> None:
        assert _delay(expires_at=NOW - 1, has_value=True) == 0.0

    def test_refresh_interval_window(self) -> None:
        assert _delay(last_fetch_timestamp=NOW - 10, refresh_interval=60.0, has_value=True) == pytest.approx(50.0)

    def test_refresh_interval_elapsed(self) -> None:
        assert _delay(last_fetch_timestamp=NOW - 60, refresh_interval=60.0, has_value=True) == 0.0

    def test_interval_without_previous_fetch_is_due(self) -> None:
        assert _delay(refresh_interval=60.0, has_value=True) == 0.0

    def test_shorter_of_expiry_and_interval_wins(self) -> None:
        assert _delay(
            expires_at=NOW + 30,
            last_fetch_timestamp=NOW - 50,
            refresh_interval=60.0,
        ) == pytest.approx(10.0)
        assert _delay(
            expires_at=NOW + 5,
            last_fetch_timestamp=NOW,
            refresh_interval=60.0,
        ) == pytest.approx(5.0)

    def test_interval_boundary(self) -> None:
        last = NOW
        assert _delay(now=last + 59.999, last_fetch_timestamp=last, refresh_interval=60.0, has_value=True) > 0
        assert _delay(now=last + 60.0, last_fetch_timestamp=last, refresh_interval=60.0, has_value=True) == 0.0


class TestParseExpires:
    def test_http_date(self) -> None:
        assert parse_expires(formatdate(NOW, usegmt=True)) == NOW

    def test_rfc1123_literal(self) -> None:
        assert parse_expires("Sun, 06 Nov 1994 08:49:37 GMT") == 784111777.0

    @pytest.mark.parametrize("value", [None, "", "0", "-1", "not a date"])
    def test_missing_or_unparsable(self, value: str | None) -> None:
        assert parse_expires(value) is None


def test_cache_state_defaults_and_immutability() -> None:
    state = EndpointCacheState()
    assert state.etag is None
    assert state.expires_at is None
    assert state.last_fetch_timestamp is None
    assert not state.has_validator

    with pytest.raises(ValidationError):
        state.etag = "x"  # type: ignore[misc]
