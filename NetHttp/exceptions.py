from typing import Dict, Optional

# Exceptions
class HTTPClientError(Exception):
    """Base exception for every NetHttp failure."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class UnsupportedMethodError(HTTPClientError):
    """Raised when the HTTP verb is not one of the supported methods."""
    def __init__(self, method):
        super().__init__(f"Unsupported method: {method}")
        self.method = method

class HttpRequestFailed(HTTPClientError):
    """Raised when the transport could not complete the exchange."""
    def __init__(self, message: str, status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers or {}
        self.body = body

class RequestTimeoutError(HttpRequestFailed):
    """Raised when request times out."""
    pass

class RequestConnectionError(HttpRequestFailed):
    """Raised when connection fails."""
    pass

class TooManyRedirectsError(HttpRequestFailed):
    """Raised when the redirect limit is exceeded."""
    pass

class HTTPStatusError(HttpRequestFailed):
    """Raised by HTTPResponse.raise_for_status() for 4xx and 5xx responses."""
    pass

class ResponseBodyError(HTTPClientError):
    """Raised when the response body cannot be decoded as text."""
    pass

class JsonParseError(HTTPClientError):
    """Raised when the response body is not valid JSON."""
    pass

class InvalidUrlError(HTTPClientError):
    """Raised when a URL cannot be parsed."""
    pass
