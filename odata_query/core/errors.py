"""
odata_query.core.errors - Exception hierarchy
==============================================

Builder misuse raises immediately; transport failures are wrapped so the
fetch pipeline can recognise them.
"""

from __future__ import annotations

from typing import Optional


class ODataError(Exception):
    """Base class for all odata_query errors."""


class ODataValidationError(ODataError, ValueError):
    """
    Raised synchronously when a query builder is put into an invalid state.

    Attributes
    ----------
    field : str
        The OData parameter the offending call targeted, e.g. "$select"
    """

    def __init__(self, message: str, field: str = "") -> None:
        super().__init__(f"[OData Helper] {message}")
        self.field = field


class ODataTransportError(ODataError, RuntimeError):
    """
    Raised by a transport when no HTTP response could be obtained.

    Attributes
    ----------
    method : str
        HTTP method of the failed request
    url : str
        The URL that was called
    """

    def __init__(
        self,
        method: str,
        url: str,
        reason: Optional[str] = None,
    ) -> None:
        snippet = (reason or "")[:1200]
        super().__init__(f"OData transport error for {method.upper()} {url}: {snippet}")
        self.method = method.upper()
        self.url = url
        self.reason = reason or ""
