import http.client
import logging
import socket
import ssl
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urljoin

from .exceptions import (
    HttpRequestFailed, RequestConnectionError, RequestTimeoutError, TooManyRedirectsError
)
from .models import HTTPRequest, RawResponse
from .utils import quote_path, quote_query

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302, 303, 307, 308)


class Transport(ABC):
    """Performs one blocking HTTP exchange."""

    @abstractmethod
    def send(self, request: HTTPRequest) -> RawResponse:
        """Send the request and return the raw status, header list and body bytes."""
        pass

    def close(self) -> None:
        pass


class HTTPClientTransport(Transport):
    """Transport built on http.client. Opens a fresh connection per exchange."""

    def __init__(self, max_redirects: int = 5, ssl_context: Optional[ssl.SSLContext] = None):
        self.max_redirects = max_redirects
        self.ssl_context = ssl_context

    def _create_connection(self, parsed_url, timeout: Optional[float]) -> http.client.HTTPConnection:
        """Create a new connection for the given URL."""
        kwargs = {}
        if timeout is not None:
            kwargs['timeout'] = timeout

        if parsed_url.scheme == 'https':
            return http.client.HTTPSConnection(
                parsed_url.hostname,
                parsed_url.port,
                context=self.ssl_context or ssl.create_default_context(),
                **kwargs
            )
        elif parsed_url.scheme == 'http':
            return http.client.HTTPConnection(
                parsed_url.hostname,
                parsed_url.port,
                **kwargs
            )
        raise HttpRequestFailed(f"HTTP request failed: unsupported URL scheme '{parsed_url.scheme}'")

    def send(self, request: HTTPRequest) -> RawResponse:
        method, url, body = request.method, request.url, request.body

        for hop in range(self.max_redirects + 1):
            raw = self._send_once(
                HTTPRequest(method, url, request.headers, body, request.timeout)
            )
            location = dict((k.lower(), v) for k, v in raw.headers).get('location')
            if raw.status not in REDIRECT_STATUSES or not location:
                return raw

            next_url = urljoin(url, location)
            logger.debug(f"Redirect {raw.status}: {url} -> {next_url}")
            if raw.status in (301, 302, 303) and method != 'HEAD':
                method, body = 'GET', None
            url = next_url

        raise TooManyRedirectsError(
            f"HTTP request failed: too many redirects (limit {self.max_redirects}) for url {request.url}"
        )

    def _send_once(self, request: HTTPRequest) -> RawResponse:
        parsed_url = request.parsed_url
        if not parsed_url.hostname:
            raise HttpRequestFailed(f"HTTP request failed: no host in url {request.url}")

        path = quote_path(parsed_url.path or '/')
        if parsed_url.query:
            path += '?' + quote_query(parsed_url.query)

        payload = request.body.encode('utf-8') if request.body is not None else None

        try:
            conn = self._create_connection(parsed_url, request.timeout)
            try:
                conn.request(request.method, path, body=payload, headers=request.headers)
                response = conn.getresponse()
                body = response.read()
                return RawResponse(
                    status=response.status,
                    headers=response.getheaders(),
                    body=body,
                    url=request.url
                )
            finally:
                conn.close()

        except socket.timeout as e:
            raise RequestTimeoutError(
                f"HTTP request failed: request timed out after {request.timeout} seconds"
            ) from e
        except OSError as e:
            raise RequestConnectionError(f"HTTP request failed: connection error: {e}") from e
        except http.client.HTTPException as e:
            raise HttpRequestFailed(f"HTTP request failed: {e!r}") from e
