import pytest

from NetHttp import RawResponse, SyncHTTPClient, Transport


class FakeTransport(Transport):
    """Records every request and replays scripted responses or errors."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests = []
        self.closed = False

    def queue(self, status=200, headers=None, body=b"", url=""):
        self.responses.append(RawResponse(status, list(headers or []), body, url))

    def fail(self, error):
        self.responses.append(error)

    def send(self, request):
        self.requests.append(request)
        item = self.responses.pop(0) if self.responses else RawResponse(200, [], b"")
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return SyncHTTPClient(transport=transport, middleware=[])
