"""
Module-level HTTP functions. Each call builds its own SyncHTTPClient and closes
it afterwards, so nothing is shared between calls.
"""

from typing import Dict, Optional

from .base import SyncHTTPClient
from .models import HTTPResponse


def request(method: str, url: str, headers: Optional[Dict[str, str]] = None,
            body: Optional[str] = None, timeout: Optional[float] = None) -> HTTPResponse:
    """Send a request with any supported method."""
    with SyncHTTPClient() as client:
        return client.request(method, url, headers=headers, body=body, timeout=timeout)


def get(url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP GET request"""
    with SyncHTTPClient() as client:
        return client.get(url, headers)


def post(url: str, body: Optional[str] = None,
         headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP POST request"""
    with SyncHTTPClient() as client:
        return client.post(url, body, headers)


def put(url: str, body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP PUT request"""
    with SyncHTTPClient() as client:
        return client.put(url, body, headers)


def delete(url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP DELETE request"""
    with SyncHTTPClient() as client:
        return client.delete(url, headers)


def patch(url: str, body: Optional[str] = None,
          headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP PATCH request"""
    with SyncHTTPClient() as client:
        return client.patch(url, body, headers)


def head(url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP HEAD request"""
    with SyncHTTPClient() as client:
        return client.head(url, headers)


def options(url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
    """HTTP OPTIONS request"""
    with SyncHTTPClient() as client:
        return client.options(url, headers)
