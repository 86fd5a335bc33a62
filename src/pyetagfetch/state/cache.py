"""Validator and freshness bookkeeping for one endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EndpointCacheState(BaseModel):
    """What the last completed request told us about the resource.

    Parameters
    ----------
    etag : str or None
        Opaque validator from the last response's ``ETag`` header, stored
        verbatim and echoed back as ``If-None-Match``.
    expires_at : float or None
        Epoch seconds parsed from the last response's ``Expires`` header.
    last_fetch_timestamp : float or None
        Epoch seconds at which the last request completed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    etag: str | None = None
    expires_at: float | None = None
    last_fetch_timestamp: float | None = Field(default=None, ge=0)

    @property
    def has_validator(self) -> bool:
        return bool(self.etag)
