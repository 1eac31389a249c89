import re
from typing import Dict, Mapping
from urllib.parse import quote, unquote, urlsplit

from .exceptions import InvalidUrlError

SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*$')
DEFAULT_PORTS = {'http': 80, 'https': 443, 'ws': 80, 'wss': 443, 'ftp': 21}
SPECIAL_SCHEMES = set(DEFAULT_PORTS) | {'file'}

C0_AND_SPACE = ''.join(chr(i) for i in range(0x21))
_PRINTABLE = ''.join(chr(i) for i in range(0x21, 0x7f))
# Printable ASCII left as-is in each component; everything else is percent-encoded
PATH_SAFE = ''.join(c for c in _PRINTABLE if c not in '"#<>?`{}')
QUERY_SAFE = ''.join(c for c in _PRINTABLE if c not in '"#<>\'')
OPAQUE_SAFE = _PRINTABLE + ' '
OPAQUE_QUERY_SAFE = QUERY_SAFE + "'"
FORBIDDEN_HOST_CHARS = set(' <>^|%/\\?#@')
SINGLE_DOT = ('.', '%2e')
DOUBLE_DOT = ('..', '.%2e', '%2e.', '%2e%2e')


def build_query(params: Mapping[str, str]) -> str:
  # Encoders keep the mapping's iteration order; only unreserved characters stay literal
  return "&".join(
      f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
      for key, value in params.items()
  )


def quote_path(path: str) -> str:
  return quote(path, safe=PATH_SAFE)


def quote_query(query: str) -> str:
  return quote(query, safe=QUERY_SAFE)


def remove_dot_segments(path: str) -> str:
  """Resolve ``.`` and ``..`` segments of an absolute path."""
  segments = path.split('/')[1:]
  output = []
  for i, segment in enumerate(segments):
      last = i == len(segments) - 1
      segment_lower = segment.lower()
      if segment_lower in DOUBLE_DOT:
          if output:
              output.pop()
          if last:
              output.append('')
      elif segment_lower in SINGLE_DOT:
          if last:
              output.append('')
      else:
          output.append(segment)
  return '/' + '/'.join(output)


def parse_url(url: str) -> Dict[str, str]:
  """Split an absolute URL into scheme, host, path and, when present, query and port.

  Leading and trailing controls and spaces are trimmed and tabs or newlines
  inside the URL are dropped. For http(s), ws(s) and ftp the host is lower-cased
  and IDNA-encoded, missing slashes after the scheme are tolerated, dot segments
  are resolved and the path and query are percent-encoded.
  """
  if not isinstance(url, str):
      raise InvalidUrlError(f"Invalid URL: expected a string, got {type(url).__name__}")
  url = re.sub(r'[\t\n\r]', '', url.strip(C0_AND_SPACE))

  scheme, sep, rest = url.partition(':')
  if not sep or not SCHEME_RE.match(scheme):
      raise InvalidUrlError("Invalid URL: relative URL without a base")
  if any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in url):
      raise InvalidUrlError("Invalid URL: control character in URL")

  scheme = scheme.lower()
  if scheme in DEFAULT_PORTS:
      # Backslashes count as slashes before the query, and the slashes after the scheme are optional
      before, after = re.match(r"([^?#]*)(.*)", rest, re.S).groups()
      before = before.replace('\\', '/').lstrip('/')
      url = f"{scheme}://{before}{after}"

  try:
      parts = urlsplit(url)
      port = parts.port
  except ValueError as e:
      raise InvalidUrlError(f"Invalid URL: {e}") from e

  special = scheme in SPECIAL_SCHEMES
  if special:
      host = _special_host(parts.hostname or '')
  else:
      host = _raw_host(parts.netloc) if parts.netloc else ''
  if scheme in DEFAULT_PORTS and not host:
      raise InvalidUrlError("Invalid URL: empty host")

  path = parts.path
  if path.startswith('/') or special:
      path = quote_path(remove_dot_segments(path or '/'))
  else:
      path = quote(path, safe=OPAQUE_SAFE)

  result = {'scheme': scheme, 'host': host, 'path': path}

  if '?' in url.split('#', 1)[0]:
      result['query'] = quote_query(parts.query) if special else quote(parts.query, safe=OPAQUE_QUERY_SAFE)

  if port is not None and port != DEFAULT_PORTS.get(scheme):
      result['port'] = str(port)

  return result


def _special_host(host: str) -> str:
  host = unquote(host).lower()
  if ':' in host:
      return f'[{host}]'
  if any(ch in FORBIDDEN_HOST_CHARS or ch.isspace() for ch in host):
      raise InvalidUrlError(f"Invalid URL: invalid domain character in {host!r}")
  if host.isascii():
      return host
  try:
      return host.encode('idna').decode('ascii')
  except UnicodeError as e:
      raise InvalidUrlError(f"Invalid URL: invalid international domain name: {e}") from e


def _raw_host(netloc: str) -> str:
  # Non-special schemes keep the host's original casing
  hostport = netloc.rpartition('@')[2]
  if hostport.startswith('['):
      return hostport[:hostport.index(']') + 1]
  return hostport.partition(':')[0]
