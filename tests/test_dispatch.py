"""
Unit tests for the request dispatcher, driven through a fake transport.
Run: pytest tests/test_dispatch.py -v
"""

import logging

import pytest

from NetHttp import (
    BaseMiddleware,
    HttpRequestFailed,
    LoggingMiddleware,
    RequestTimeoutError,
    ResponseBodyError,
    SUPPORTED_METHODS,
    SyncHTTPClient,
    UnsupportedMethodError,
    UserAgentMiddleware,
)


class TestMethodResolution:
    @pytest.mark.parametrize("method", ["FETCH", "connect", "TRACE", "", "get "])
    def test_unsupported_method_never_reaches_transport(self, client, transport, method):
        with pytest.raises(UnsupportedMethodError) as exc:
            client.request(method, "http://example.com/")
        assert exc.value.method == method
        assert str(exc.value) == f"Unsupported method: {method}"
        assert transport.requests == []

    def test_non_string_method(self, client, transport):
        with pytest.raises(UnsupportedMethodError):
            client.request(None, "http://example.com/")
        assert transport.requests == []

    @pytest.mark.parametrize("method", SUPPORTED_METHODS)
    def test_method_is_upper_cased(self, client, transport, method):
        client.request(method.lower(), "http://example.com/")
        assert transport.last.method == method


class TestRequestShape:
    def test_timeout_passed_through(self, client, transport):
        client.request("GET", "http://example.com/", timeout=7)
        assert transport.last.timeout == 7

    def test_timeout_absent_means_transport_default(self, client, transport):
        client.request("GET", "http://example.com/")
        assert transport.last.timeout is None

    @pytest.mark.parametrize("timeout", [-1, 0, 0.0])
    def test_non_positive_timeout_rejected(self, client, transport, timeout):
        with pytest.raises(ValueError):
            client.request("GET", "http://example.com/", timeout=timeout)
        assert transport.requests == []

    def test_headers_applied_verbatim(self, client, transport):
        client.request("GET", "http://example.com/", headers={"X-Token": "abc", "accept": "*/*"})
        assert transport.last.headers == {"X-Token": "abc", "accept": "*/*"}

    def test_duplicate_header_names_last_write_wins(self, client, transport):
        client.request("GET", "http://example.com/", headers={"x-a": "1", "X-A": "2"})
        assert transport.last.headers == {"X-A": "2"}

    def test_body_forwarded_on_any_verb(self, client, transport):
        client.request("DELETE", "http://example.com/", body="payload")
        assert transport.last.body == "payload"

    def test_caller_headers_not_mutated(self, transport):
        client = SyncHTTPClient(transport=transport)
        headers = {"X-A": "1"}
        client.request("GET", "http://example.com/", headers=headers)
        assert headers == {"X-A": "1"}
        assert "User-Agent" in transport.last.headers


class TestNormalization:
    def test_status_headers_body(self, client, transport):
        transport.queue(201, [("Content-Type", "text/plain"), ("X-Test", "1")], b"created",
                        url="http://example.com/final")
        resp = client.request("POST", "http://example.com/")
        assert resp.status() == 201
        assert resp.headers() == {"content-type": "text/plain", "x-test": "1"}
        assert resp.body() == "created"
        assert resp.url == "http://example.com/final"
        assert resp.elapsed >= 0

    def test_repeated_header_last_value_wins(self, client, transport):
        transport.queue(200, [("Set-Thing", "a"), ("set-thing", "b")], b"")
        resp = client.request("GET", "http://example.com/")
        assert resp.header("Set-Thing") == "b"

    def test_error_status_is_returned(self, client, transport):
        transport.queue(500, [], b"boom")
        resp = client.request("GET", "http://example.com/")
        assert resp.status() == 500
        assert resp.body() == "boom"

    def test_url_defaults_to_request_url(self, client, transport):
        transport.queue(200, [], b"")
        assert client.request("GET", "http://example.com/a").url == "http://example.com/a"

    def test_charset_from_content_type(self, client, transport):
        transport.queue(200, [("Content-Type", "text/plain; charset=latin-1")], "café".encode("latin-1"))
        assert client.request("GET", "http://example.com/").body() == "café"

    def test_invalid_utf8_raises_body_error(self, client, transport):
        transport.queue(200, [], b"\xff\xfe\xfa")
        with pytest.raises(ResponseBodyError) as exc:
            client.request("GET", "http://example.com/")
        assert str(exc.value).startswith("Response body error:")

    def test_unknown_charset_raises_body_error(self, client, transport):
        transport.queue(200, [("Content-Type", "text/plain; charset=klingon")], b"abc")
        with pytest.raises(ResponseBodyError):
            client.request("GET", "http://example.com/")

    @pytest.mark.parametrize("charset", ["undefined", "idna"])
    def test_codec_unicode_error_raises_body_error(self, client, transport, charset):
        transport.queue(200, [("Content-Type", f"text/plain; charset={charset}")], b"abc\xff")
        with pytest.raises(ResponseBodyError) as exc:
            client.request("GET", "http://example.com/")
        assert isinstance(exc.value.__cause__, UnicodeError)


class TestTransportFailures:
    def test_http_request_failed_passes_through(self, client, transport):
        error = RequestTimeoutError("HTTP request failed: request timed out after 1 seconds")
        transport.fail(error)
        with pytest.raises(RequestTimeoutError) as exc:
            client.request("GET", "http://example.com/")
        assert exc.value is error

    def test_other_errors_are_wrapped(self, client, transport):
        transport.fail(RuntimeError("dns exploded"))
        with pytest.raises(HttpRequestFailed) as exc:
            client.request("GET", "http://example.com/")
        assert str(exc.value) == "HTTP request failed: dns exploded"
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_no_retry(self, client, transport):
        transport.fail(RuntimeError("down"))
        with pytest.raises(HttpRequestFailed):
            client.request("GET", "http://example.com/")
        assert len(transport.requests) == 1


class RecordingMiddleware(BaseMiddleware):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def process_request(self, request):
        self.log.append(("request", self.name))
        return request

    def process_response(self, response):
        self.log.append(("response", self.name))
        return response

    def process_error(self, error, request):
        self.log.append(("error", self.name))
        return error


class TestMiddleware:
    def test_order(self, transport):
        log = []
        client = SyncHTTPClient(transport=transport, middleware=[
            RecordingMiddleware("a", log), RecordingMiddleware("b", log)
        ])
        client.get("http://example.com/")
        assert log == [("request", "a"), ("request", "b"), ("response", "b"), ("response", "a")]

    def test_error_hooks_run(self, transport):
        log = []
        client = SyncHTTPClient(transport=transport, middleware=[RecordingMiddleware("a", log)])
        transport.fail(RuntimeError("down"))
        with pytest.raises(HttpRequestFailed):
            client.get("http://example.com/")
        assert log == [("request", "a"), ("error", "a")]

    def test_user_agent_respects_caller(self, transport):
        client = SyncHTTPClient(transport=transport, middleware=[UserAgentMiddleware("ua/1")])
        client.get("http://example.com/", headers={"user-agent": "mine"})
        assert transport.last.headers == {"user-agent": "mine"}
        client.get("http://example.com/")
        assert transport.last.headers == {"User-Agent": "ua/1"}

    def test_logging_middleware(self, transport, caplog):
        client = SyncHTTPClient(transport=transport, middleware=[LoggingMiddleware()])
        transport.queue(204, [], b"")
        transport.fail(RuntimeError("down"))
        with caplog.at_level(logging.DEBUG, logger="NetHttp"):
            client.get("http://example.com/ok")
            with pytest.raises(HttpRequestFailed):
                client.get("http://example.com/bad")
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("Sending GET http://example.com/ok (timeout=30") for m in messages)
        assert any(m.startswith("Received 204 from http://example.com/ok in ") for m in messages)
        assert "GET http://example.com/bad failed: HttpRequestFailed: HTTP request failed: down" in messages
        assert [r.levelname for r in caplog.records if "failed" in r.getMessage()] == ["ERROR"]


class TestLifecycle:
    def test_context_manager_closes_transport(self, transport):
        with SyncHTTPClient(transport=transport) as client:
            client.get("http://example.com/")
        assert transport.closed

    def test_closed_client_refuses_requests(self, client):
        client.close()
        with pytest.raises(RuntimeError):
            client.get("http://example.com/")
