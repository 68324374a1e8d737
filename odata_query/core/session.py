"""
odata_query.core.session - HTTP transport
==========================================

The query builders never talk to the network themselves. They hand a fully
built request to a transport and await its response:

- Transport: the protocol any transport must satisfy
- TransportResponse: status code, headers and raw body text
- TransportConfig: pool, TLS and timeout settings
- RequestsTransport: default transport on top of a pooled requests.Session
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Union

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from odata_query.core.errors import ODataTransportError


Body = Optional[Union[str, bytes]]


@dataclass(frozen=True)
class TransportResponse:
    """
    Raw HTTP response as seen by the fetch pipeline.

    Attributes
    ----------
    status_code : int
        HTTP status code, passed through untouched
    headers : dict
        Response headers
    text : str
        Response body decoded to text
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""


class Transport(Protocol):
    """Anything that can send one HTTP request and await its response."""

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Body = None,
    ) -> TransportResponse:
        ...


@dataclass
class TransportConfig:
    """
    Settings for RequestsTransport.

    Parameters
    ----------
    timeout : float
        Request timeout in seconds (default: 60.0)
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    retries : int
        Connection-level retries performed by urllib3 (default: 0)
    pool_connections : int
        Number of connection pools to cache
    pool_maxsize : int
        Maximum connections kept per pool
    user_agent : str
        User-Agent header value

    Examples
    --------
    >>> cfg = TransportConfig(timeout=15.0, verify="/etc/ssl/corp-ca.pem")
    """
    timeout: float = 60.0
    verify: Union[bool, str] = True
    retries: int = 0
    pool_connections: int = 20
    pool_maxsize: int = 50
    user_agent: str = "odata-query/0.1"


class RequestsTransport:
    """
    Default transport backed by a pooled requests.Session.

    The blocking request runs in a worker thread so that ``send`` can be
    awaited. Non-2xx responses are returned as-is; only failures that produce
    no response at all raise ODataTransportError.

    Parameters
    ----------
    cfg : TransportConfig, optional
        Transport settings

    Examples
    --------
    >>> with RequestsTransport(TransportConfig(timeout=10)) as transport:
    ...     query = Query(base_url="services.odata.org", path="/V4/TripPinService/People",
    ...                   transport=transport)
    """

    def __init__(self, cfg: Optional[TransportConfig] = None) -> None:
        self.cfg = cfg or TransportConfig()
        self.timeout = float(self.cfg.timeout)
        self.verify = self.cfg.verify
        self.logger = logging.getLogger("odata_query.transport")

        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _build_session(self) -> Session:
        sess = requests.Session()
        sess.headers.update({"User-Agent": self.cfg.user_agent})

        retry = Retry(
            total=self.cfg.retries,
            connect=self.cfg.retries,
            read=0,
            status=0,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(
            max_retries=retry,
            pool_connections=self.cfg.pool_connections,
            pool_maxsize=self.cfg.pool_maxsize,
        )
        sess.mount("https://", adapter)
        sess.mount("http://", adapter)
        return sess

    def _to_response(self, r: Response) -> TransportResponse:
        return TransportResponse(
            status_code=r.status_code,
            headers=dict(r.headers),
            text=r.text,
        )

    def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Body = None,
    ) -> TransportResponse:
        """
        Send a request synchronously.

        Raises
        ------
        ODataTransportError
            If requests could not obtain a response
        """
        t0 = time.perf_counter()
        try:
            r = self.session.request(
                method=method,
                url=url,
                headers=headers,
                data=body,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            raise ODataTransportError(method, url, str(exc)) from exc
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %s %sms", method.upper(), url, r.status_code, round(dt, 1))
        return self._to_response(r)

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Body = None,
    ) -> TransportResponse:
        return await asyncio.to_thread(self.request, method, url, headers, body)
