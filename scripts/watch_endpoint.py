#!/usr/bin/env python3
"""Watch a JSON endpoint and print every change.

Subscribes to an :class:`EtagFetcher` for the given URL and prints each new
value and every loading transition, so ETag/Expires behaviour of a server
can be observed by hand::

    python scripts/watch_endpoint.py https://api.example.com/items --refresh-interval 30
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyetagfetch import (  # noqa: E402
    AiohttpTransport,
    BearerTokenAuth,
    EtagFetcher,
    FetcherConfig,
    NoAuth,
    structural_equal,
)
from pyetagfetch.contracts import identity  # noqa: E402


def _print_value(value: Any) -> None:
    stamp = time.strftime("%H:%M:%S")
    print(f"[{stamp}] change:")
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def _print_loading(loading: bool) -> None:
    stamp = time.strftime("%H:%M:%S")
    print(f"[{stamp}] {'request started' if loading else 'request finished'}")


def _print_error(exc: BaseException) -> None:
    print(f"stream ended: {exc}", file=sys.stderr)


async def run(args: argparse.Namespace) -> int:
    config = FetcherConfig.from_env(
        url=args.url,
        refresh_interval=args.refresh_interval,
        fetch_refreshes_without_interval=args.always_refresh,
    )
    auth = BearerTokenAuth(args.bearer_token) if args.bearer_token else NoAuth()

    async with AiohttpTransport(config) as transport:
        fetcher: EtagFetcher[Any, Any] = EtagFetcher.from_config(
            config,
            transport,
            identity,
            structural_equal,
            auth_provider=auth,
        )
        loading = fetcher.loading.subscribe(_print_loading)
        with fetcher.data.subscribe(_print_value, _print_error):
            try:
                await asyncio.sleep(args.duration)
            finally:
                loading.unsubscribe()

        print(f"etag={fetcher.etag!r} expires_at={fetcher.expires_at!r}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Poll a JSON endpoint using ETag/Expires revalidation.")
    parser.add_argument("url", help="Endpoint URL")
    parser.add_argument("--refresh-interval", type=float, default=None, help="Client refresh interval in seconds")
    parser.add_argument(
        "--always-refresh",
        action="store_true",
        help="Revalidate even when the server gives no freshness information",
    )
    parser.add_argument("--bearer-token", help="Send Authorization: Bearer <token>")
    parser.add_argument("--duration", type=float, default=300.0, help="Seconds to watch before exiting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
