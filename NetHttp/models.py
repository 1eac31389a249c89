import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from .exceptions import HTTPStatusError, JsonParseError

# Request/Response Models
@dataclass
class HTTPRequest:
    """Represents an HTTP request."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    timeout: Optional[float] = None

    @property
    def parsed_url(self):
        return urlsplit(self.url)

@dataclass
class RawResponse:
    """What a transport hands back before normalization."""
    status: int
    headers: List[Tuple[str, str]]
    body: bytes
    url: str = ""


def _reject_constant(name: str):
    raise ValueError(f"invalid literal {name}")


@dataclass(frozen=True)
class HTTPResponse:
    """Represents an HTTP response.

    Header names are lower-cased on construction and the header mapping is
    read-only, so a response never changes once it exists.
    """
    status_code: int
    header_map: Mapping[str, str] = field(default_factory=dict, hash=False)
    text: str = ""
    url: str = ""
    elapsed: float = 0.0

    def __post_init__(self):
        normalized = {}
        for name, value in self.header_map.items():
            normalized[name.lower()] = value
        object.__setattr__(self, "header_map", MappingProxyType(normalized))

    def status(self) -> int:
        """Get response status."""
        return self.status_code

    def header(self, name: str) -> Optional[str]:
        """Get a single header value, matching the name case-insensitively."""
        return self.header_map.get(name.lower())

    def headers(self, name: Optional[str] = None) -> Union[Optional[str], Dict[str, str]]:
        """Get one header by name, or a copy of all headers when no name is given."""
        if name is None:
            return dict(self.header_map)
        return self.header(name)

    def body(self) -> str:
        """Get response body."""
        return self.text

    def json(self) -> Dict[str, str]:
        """Parse the body as JSON into a flat mapping of member name to JSON text.

        Member values are serialized back to compact JSON rather than unwrapped,
        so ``{"a": 1, "b": "x"}`` gives ``{"a": "1", "b": '"x"'}``. A body whose
        top-level value is not an object yields an empty dict.
        """
        try:
            value = json.loads(self.text, parse_constant=_reject_constant)
        except ValueError as e:
            raise JsonParseError(f"JSON parse error: {e}") from e

        result = {}
        if isinstance(value, dict):
            for k, v in value.items():
                result[k] = json.dumps(v, separators=(',', ':'), ensure_ascii=False)
        return result

    def raise_for_status(self) -> "HTTPResponse":
        """Raise HTTPStatusError for 4xx/5xx responses, otherwise return self."""
        if self.status_code >= 400:
            kind = "Client error" if self.status_code < 500 else "Server error"
            raise HTTPStatusError(
                f"{kind}: {self.status_code} for url {self.url}",
                status_code=self.status_code,
                headers=dict(self.header_map),
                body=self.text
            )
        return self
