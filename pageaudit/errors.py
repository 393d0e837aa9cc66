"""Exceptions raised across the audit engine."""

from typing import Optional


class PageAuditError(Exception):
    """Base class for engine failures surfaced to the caller."""


class ScrapeError(PageAuditError):
    """The primary page fetch failed; no facts could be extracted.

    The underlying httpx error is kept on ``cause`` (and chained as
    ``__cause__`` by the raiser).
    """

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        detail = str(cause) if cause is not None else "unknown error"
        super().__init__(f"Failed to scrape website {url}: {detail}")
