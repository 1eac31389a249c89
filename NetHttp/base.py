import time
from typing import Dict, List, Optional

from .config import ClientConfig
from .exceptions import HttpRequestFailed, ResponseBodyError, UnsupportedMethodError
from .middlewares import BaseMiddleware, LoggingMiddleware, UserAgentMiddleware
from .models import HTTPRequest, HTTPResponse, RawResponse
from .transports import HTTPClientTransport, Transport

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
JSON_CONTENT_TYPE = "application/json"


def resolve_method(method) -> str:
    """Upper-case the verb and check it is one we can send."""
    if not isinstance(method, str) or method.upper() not in SUPPORTED_METHODS:
        raise UnsupportedMethodError(method)
    return method.upper()


def merge_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Apply headers in order; a later name replaces an earlier one regardless of case."""
    merged: Dict[str, str] = {}
    for name, value in (headers or {}).items():
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def with_json_content_type(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Copy headers, adding Content-Type: application/json unless one is already set."""
    final_headers = dict(headers or {})
    if not any(name.lower() == 'content-type' for name in final_headers):
        final_headers['Content-Type'] = JSON_CONTENT_TYPE
    return final_headers


def _charset(content_type: Optional[str]) -> str:
    for param in (content_type or '').split(';')[1:]:
        key, _, value = param.partition('=')
        if key.strip().lower() == 'charset' and value.strip():
            return value.strip().strip('"\'')
    return 'utf-8'


# Core Request Execution Logic
class RequestExecutor:
    """Validates a request, runs it through middleware and the transport, and
    normalizes the raw result into an HTTPResponse."""

    def __init__(self, transport: Optional[Transport] = None,
                 middleware: Optional[List[BaseMiddleware]] = None):
        self.transport = transport or HTTPClientTransport()
        self.middleware = middleware or []
        self._closed = False

    def execute_request(self, request: HTTPRequest) -> HTTPResponse:
        """Execute an HTTP request. Errors are raised, never retried."""
        if self._closed:
            raise RuntimeError("Client is closed")

        request.method = resolve_method(request.method)
        if request.timeout is not None and request.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {request.timeout}")
        request.headers = merge_headers(request.headers)

        # Process request through middleware
        for middleware in self.middleware:
            request = middleware.process_request(request)

        try:
            response = self._execute_single_request(request)

            # Process response through middleware
            for middleware in reversed(self.middleware):
                response = middleware.process_response(response)

            return response

        except Exception as error:
            # Process error through middleware
            for middleware in self.middleware:
                error = middleware.process_error(error, request)
            raise error

    def _execute_single_request(self, request: HTTPRequest) -> HTTPResponse:
        """Execute a single HTTP request."""
        start_time = time.time()

        try:
            raw = self.transport.send(request)
        except HttpRequestFailed:
            raise
        except Exception as e:
            raise HttpRequestFailed(f"HTTP request failed: {e}") from e

        return self._normalize(raw, request, time.time() - start_time)

    def _normalize(self, raw: RawResponse, request: HTTPRequest, elapsed: float) -> HTTPResponse:
        headers = {}
        for name, value in raw.headers:
            headers[name.lower()] = value

        charset = _charset(headers.get('content-type'))
        try:
            text = raw.body.decode(charset)
        except (UnicodeError, LookupError) as e:
            raise ResponseBodyError(f"Response body error: {e}") from e

        return HTTPResponse(
            status_code=int(raw.status),
            header_map=headers,
            text=text,
            url=raw.url or request.url,
            elapsed=elapsed
        )

    def close(self):
        """Close the executor and its transport."""
        self._closed = True
        self.transport.close()

# Synchronous Client
class SyncHTTPClient:
    """Synchronous HTTP client: a generic request() plus one shorthand per verb."""

    def __init__(self, transport: Optional[Transport] = None,
                 middleware: Optional[List[BaseMiddleware]] = None,
                 config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        if transport is None:
            transport = HTTPClientTransport(max_redirects=self.config.max_redirects)

        # Create default middleware if none provided
        if middleware is None:
            middleware = [
                UserAgentMiddleware(self.config.user_agent),
                LoggingMiddleware()
            ]

        self._executor = RequestExecutor(transport, middleware)

    def request(self, method: str, url: str, headers: Optional[Dict[str, str]] = None,
                body: Optional[str] = None, timeout: Optional[float] = None) -> HTTPResponse:
        """Make a synchronous HTTP request. A timeout of None uses the transport default."""
        request = HTTPRequest(
            method=method,
            url=url,
            headers=dict(headers or {}),
            body=body,
            timeout=timeout
        )

        return self._executor.execute_request(request)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP GET request"""
        return self.request('GET', url, headers, None, self.config.default_timeout)

    def delete(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP DELETE request"""
        return self.request('DELETE', url, headers, None, self.config.default_timeout)

    def head(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP HEAD request"""
        return self.request('HEAD', url, headers, None, self.config.default_timeout)

    def options(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP OPTIONS request"""
        return self.request('OPTIONS', url, headers, None, self.config.default_timeout)

    def post(self, url: str, body: Optional[str] = None,
             headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP POST request, defaulting Content-Type to JSON."""
        return self.request('POST', url, with_json_content_type(headers), body,
                            self.config.default_timeout)

    def put(self, url: str, body: Optional[str] = None,
            headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP PUT request, defaulting Content-Type to JSON."""
        return self.request('PUT', url, with_json_content_type(headers), body,
                            self.config.default_timeout)

    def patch(self, url: str, body: Optional[str] = None,
              headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """HTTP PATCH request, defaulting Content-Type to JSON."""
        return self.request('PATCH', url, with_json_content_type(headers), body,
                            self.config.default_timeout)

    def close(self):
        """Close the client and its transport."""
        self._executor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
