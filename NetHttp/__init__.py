"""NetHttp - A minimal synchronous HTTP client."""

__version__ = "0.1.0"

# Import key classes for easier access
from .api import request, get, post, put, delete, patch, head, options
from .base import SyncHTTPClient, RequestExecutor, SUPPORTED_METHODS
from .config import ClientConfig
from .exceptions import (
    HTTPClientError,
    UnsupportedMethodError,
    HttpRequestFailed,
    RequestTimeoutError,
    RequestConnectionError,
    TooManyRedirectsError,
    HTTPStatusError,
    ResponseBodyError,
    JsonParseError,
    InvalidUrlError
)
from .middlewares import BaseMiddleware, LoggingMiddleware, UserAgentMiddleware
from .models import HTTPRequest, HTTPResponse, RawResponse
from .transports import Transport, HTTPClientTransport
from .utils import build_query, parse_url
