"""Internal constants shared across the library."""

USER_AGENT = "pyetagfetch/0.1"
ACCEPT_JSON = "application/json"

HEADER_ETAG = "ETag"
HEADER_EXPIRES = "Expires"
HEADER_IF_NONE_MATCH = "If-None-Match"

#: Statuses a conditional GET may legitimately answer with.
ACCEPTED_STATUSES: frozenset[int] = frozenset({200, 304})
