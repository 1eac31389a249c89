import logging
# Configure logging
logger = logging.getLogger(__name__)

from typing import Optional

from .models import HTTPRequest, HTTPResponse

# Middleware System
class BaseMiddleware:
    """Hooks around one exchange. Every hook returns what it was given unless it
    needs to substitute a new request, response or error."""

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        """Called in registration order once the method and headers are validated."""
        return request

    def process_response(self, response: HTTPResponse) -> HTTPResponse:
        """Called in reverse registration order with the normalized response."""
        return response

    def process_error(self, error: Exception, request: HTTPRequest) -> Exception:
        """Called in registration order; the returned error is the one raised."""
        return error

class LoggingMiddleware(BaseMiddleware):
    """Logs each exchange at DEBUG and each failure at ERROR."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        body_size = len(request.body) if request.body is not None else 0
        self.logger.debug(f"Sending {request.method} {request.url} "
                          f"(timeout={request.timeout}, body={body_size} chars)")
        return request

    def process_response(self, response: HTTPResponse) -> HTTPResponse:
        self.logger.debug(f"Received {response.status_code} from {response.url} "
                          f"in {response.elapsed * 1000:.1f}ms")
        return response

    def process_error(self, error: Exception, request: HTTPRequest) -> Exception:
        self.logger.error(f"{request.method} {request.url} failed: {type(error).__name__}: {error}")
        return error

class UserAgentMiddleware(BaseMiddleware):
    """Sets User-Agent unless the caller already sent one under any casing."""

    def __init__(self, user_agent: str):
        self.user_agent = user_agent

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        if not any(name.lower() == 'user-agent' for name in request.headers):
            request.headers['User-Agent'] = self.user_agent
        return request
