"""ssurtparse.parse
A lenient, lossless URL parser in the manner of web browsers (https://url.spec.whatwg.org/),
plus SSURT, a field ordering of the parsed URL that sorts by host.
Every byte string parses, and the parsed fields always concatenate back to the input.
"""

import dataclasses
import enum
import logging
import re
import types

from typing import Iterator, Mapping, Self

from .ipaddr import parse_ipv4

logger = logging.getLogger(__name__)

# str input and output cross into bytes with this codec.
# surrogateescape keeps text <-> bytes lossless for arbitrary bytes.
_DEFAULT_ENCODING: str = "utf-8"
_ENCODING_ERRORS: str = "surrogateescape"

# "leading and trailing C0 control or space"
_C0_CONTROL_OR_SPACE: bytes = bytes(range(0x00, 0x20 + 1))

# browsers silently drop these from the scheme and from slash runs
_TAB_AND_NEWLINE: bytes = b"\t\n\r"

# scheme = ALPHA *( any byte but ":" ), only if followed by ":"
_SCHEME_PAT: re.Pattern[bytes] = re.compile(rb"[A-Za-z][^:]*(?=:)")

# slashes (special) = *( "/" / "\" / CR / LF / TAB )
_SPECIAL_SLASHES_PAT: re.Pattern[bytes] = re.compile(rb"[/\\\r\n\t]*")

# slashes (file) = *( CR / LF / TAB ) 2( ( "/" / "\" ) *( CR / LF / TAB ) )
_FILE_SLASHES_PAT: re.Pattern[bytes] = re.compile(rb"[\r\n\t]*(?:[/\\][\r\n\t]*){2}")

# slashes (other) = *( CR / LF / TAB ) 2( "/" *( CR / LF / TAB ) )
_NONSPECIAL_SLASHES_PAT: re.Pattern[bytes] = re.compile(rb"[\r\n\t]*(?:/[\r\n\t]*){2}")

# authority (special, file) = *( any byte but "/" or "\" )
_SPECIAL_AUTHORITY_PAT: re.Pattern[bytes] = re.compile(rb"[^/\\]*")

# authority (other) = *( any byte but "/" )
_NONSPECIAL_AUTHORITY_PAT: re.Pattern[bytes] = re.compile(rb"[^/]*")

# IP-literal = "[" *( any byte but "]" ) "]"
_IP_LITERAL_PAT: re.Pattern[bytes] = re.compile(rb"\[[^\]]*\]")

# scheme -> default port, for the schemes the URL standard calls "special".
# file: is special too, but it has no port and a grammar of its own.
SPECIAL_SCHEMES: Mapping[bytes, int | None] = types.MappingProxyType(
    {
        b"ftp": 21,
        b"gopher": 70,
        b"http": 80,
        b"https": 443,
        b"ws": 80,
        b"wss": 443,
        b"file": None,
    }
)


class SchemeClass(enum.Enum):
    """Which pathish grammar applies to a URL."""

    SPECIAL = "special"
    FILE = "file"
    OPAQUE = "opaque"


def _clean_scheme(scheme: bytes) -> bytes:
    return scheme.translate(None, _TAB_AND_NEWLINE).lower()


def classify_scheme(scheme: bytes) -> SchemeClass:
    """Case-insensitive, and ignores tabs and newlines, so b"HT\\tTP" is special."""
    clean: bytes = _clean_scheme(scheme)
    if clean == b"file":
        return SchemeClass.FILE
    if clean in SPECIAL_SCHEMES:
        return SchemeClass.SPECIAL
    return SchemeClass.OPAQUE


def default_port(scheme: bytes) -> int | None:
    """The well-known port of a special scheme. None for file: and for every other scheme."""
    return SPECIAL_SCHEMES.get(_clean_scheme(scheme))


def _must_match(pattern: re.Pattern[bytes], data: bytes, pos: int) -> re.Match[bytes]:
    """Matches a sub-grammar that can always match (possibly empty) at pos.

    If it doesn't match, the grammar itself is broken.
    """
    m: re.Match[bytes] | None = pattern.match(data, pos)
    if m is None:
        logger.error("pattern %r failed to match %r at offset %d", pattern.pattern, data, pos)
        raise AssertionError(f"{pattern.pattern!r} didn't match")
    return m


def _as_bytes(name: str, value: object) -> bytes:
    if value is None:
        raise TypeError(f"{name} must not be None")
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode(_DEFAULT_ENCODING, _ENCODING_ERRORS)
    raise TypeError(f"{name} must be bytes, not {type(value).__name__}")


@dataclasses.dataclass
class ParsedUrl:
    """A URL split into its syntactic fields. Get one from parse_url.

    Each field is a slice of the parsed input, with b"" meaning "not present".
    In declaration order they concatenate back to that input. Fields can be
    reassigned, but never to None.
    """

    leading_junk: bytes = b""
    scheme: bytes = b""
    colon_after_scheme: bytes = b""
    slashes: bytes = b""
    username: bytes = b""
    colon_before_password: bytes = b""
    password: bytes = b""
    at_sign: bytes = b""
    host: bytes = b""
    colon_before_port: bytes = b""
    port: bytes = b""
    path: bytes = b""
    question_mark: bytes = b""
    query: bytes = b""
    hash_sign: bytes = b""
    fragment: bytes = b""
    trailing_junk: bytes = b""

    def __setattr__(self: Self, name: str, value: object) -> None:
        if name in _FIELD_NAMES:
            value = _as_bytes(name, value)
        super().__setattr__(name, value)

    def __iter__(self: Self) -> Iterator[bytes]:
        return (getattr(self, name) for name in _FIELD_NAMES)

    def __bytes__(self: Self) -> bytes:
        return self.to_bytes()

    def __str__(self: Self) -> str:
        return self.to_text()

    def to_bytes(self: Self) -> bytes:
        return b"".join(self)

    def to_text(self: Self) -> str:
        return self.to_bytes().decode(_DEFAULT_ENCODING, _ENCODING_ERRORS)

    @property
    def host_port(self: Self) -> bytes:
        """host:port"""
        return self.host + self.colon_before_port + self.port

    @property
    def scheme_class(self: Self) -> SchemeClass:
        return classify_scheme(self.scheme)

    @property
    def default_port(self: Self) -> int | None:
        return default_port(self.scheme)

    def ssurt(self: Self) -> bytes:
        """Format this URL with a field order suitable for sorting.

        The host comes first, reversed, then port, scheme, credentials, and the rest
        in the usual order, e.g. http://user@www.example.com:8080/a?b
        becomes com,example,www,//:8080:http@user/a?b
        """
        return b"".join(
            (
                self.leading_junk,
                ssurt_host(self.host),
                self.slashes,
                self.colon_before_port,
                self.port,
                self.colon_after_scheme,
                self.scheme,
                self.at_sign,
                self.username,
                self.colon_before_password,
                self.password,
                self.path,
                self.question_mark,
                self.query,
                self.hash_sign,
                self.fragment,
                self.trailing_junk,
            )
        )


_FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in dataclasses.fields(ParsedUrl))


def ssurt_host(host: bytes) -> bytes:
    """Reverse host unless it's an IPv4 or IPv6 address."""
    if not host or host.startswith(b"[") or parse_ipv4(host) is not None:
        return host
    return reverse_host(host)


def reverse_host(host: bytes) -> bytes:
    """Reverse dotted segments. Swap commas and dots. Add a trailing comma.
    e.g. reverse_host(b"x,y.b.c") == b"c,b,x.y,"
    """
    # Segments are delimited by the original dots, so a comma stays inside its segment.
    nocommas: bytes = host.replace(b",", b".")
    segments: list[bytes] = []
    j: int = len(host)
    i: int = host.rfind(b".")
    while i != -1:
        segments.append(nocommas[i + 1 : j])
        j = i
        i = host.rfind(b".", 0, j)
    segments.append(nocommas[:j])
    return b"".join(segment + b"," for segment in segments)


def _parse_authority(url: ParsedUrl, authority: bytes) -> None:
    """authority = [ username [ ":" password ] "@" ] host [ ":" port ]"""
    hostport: bytes = authority
    i: int = min((k for k in (authority.find(b":"), authority.find(b"@")) if k != -1), default=-1)
    if i != -1 and authority[i : i + 1] == b"@":
        url.username = authority[:i]
        url.at_sign = b"@"
        hostport = authority[i + 1 :]
    elif i != -1:
        # the password runs to the last "@", which can be anywhere after the colon
        j: int = authority.rfind(b"@", i + 1)
        if j != -1:
            url.username = authority[:i]
            url.colon_before_password = b":"
            url.password = authority[i + 1 : j]
            url.at_sign = b"@"
            hostport = authority[j + 1 :]

    m: re.Match[bytes] | None = _IP_LITERAL_PAT.match(hostport)
    if m is not None and hostport[m.end() : m.end() + 1] in (b"", b":"):
        host_end: int = m.end()
    else:
        host_end = hostport.find(b":")
        if host_end == -1:
            host_end = len(hostport)
    url.host = hostport[:host_end]
    if host_end < len(hostport):
        url.colon_before_port = b":"
        url.port = hostport[host_end + 1 :]


def _parse_file_pathish(url: ParsedUrl, pathish: bytes) -> None:
    """Only two separators are consumed, so file:///foo has an empty host and path /foo.
    Without them (file:C:/foo, file:/foo) there is no host at all.
    """
    m: re.Match[bytes] | None = _FILE_SLASHES_PAT.match(pathish)
    if m is None:
        url.path = pathish
        return
    url.slashes = m[0]
    m = _must_match(_SPECIAL_AUTHORITY_PAT, pathish, m.end())
    url.host = m[0]
    url.path = pathish[m.end() :]


def _parse_pathish(url: ParsedUrl, pathish: bytes, scheme_class: SchemeClass) -> None:
    """Splits pathish, the stretch between the scheme and the query, into slashes, authority and path."""
    if scheme_class is SchemeClass.FILE:
        # file: URLs never have credentials or a port
        _parse_file_pathish(url, pathish)
        return

    m: re.Match[bytes] | None
    if scheme_class is SchemeClass.SPECIAL:
        m = _must_match(_SPECIAL_SLASHES_PAT, pathish, 0)
        authority_pat: re.Pattern[bytes] = _SPECIAL_AUTHORITY_PAT
    else:
        m = _NONSPECIAL_SLASHES_PAT.match(pathish)
        authority_pat = _NONSPECIAL_AUTHORITY_PAT
        if m is None:
            # no "//", so it's an opaque path like mailto:user@host
            url.path = pathish
            return
    url.slashes = m[0]
    m = _must_match(authority_pat, pathish, m.end())
    url.path = pathish[m.end() :]
    _parse_authority(url, m[0])


def parse_url(data: bytes | str) -> ParsedUrl:
    """Lenient URL parser. Never fails, and never loses a byte:
    parse_url(data).to_bytes() == data for any bytes data.
    str data is encoded as UTF-8 first.
    """
    if isinstance(data, str):
        data = data.encode(_DEFAULT_ENCODING, _ENCODING_ERRORS)
    url: ParsedUrl = ParsedUrl()

    rest: bytes = data.lstrip(_C0_CONTROL_OR_SPACE)
    url.leading_junk = data[: len(data) - len(rest)]
    data = rest
    rest = data.rstrip(_C0_CONTROL_OR_SPACE)
    url.trailing_junk = data[len(rest) :]
    data = rest

    pos: int = 0
    m: re.Match[bytes] | None = _SCHEME_PAT.match(data)
    if m is not None:
        url.scheme = m[0]
        url.colon_after_scheme = b":"
        pos = m.end() + 1

    # pathish runs to the first "?" or "#"
    end: int = len(data)
    for delim in (b"?", b"#"):
        k: int = data.find(delim, pos, end)
        if k != -1:
            end = k
    pathish: bytes = data[pos:end]

    if data[end : end + 1] == b"?":
        url.question_mark = b"?"
        k = data.find(b"#", end + 1)
        if k == -1:
            k = len(data)
        url.query = data[end + 1 : k]
        end = k
    if end < len(data):
        url.hash_sign = b"#"
        url.fragment = data[end + 1 :]

    scheme_class: SchemeClass = classify_scheme(url.scheme)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("scheme %r is %s", url.scheme, scheme_class.value)
    _parse_pathish(url, pathish, scheme_class)
    return url
