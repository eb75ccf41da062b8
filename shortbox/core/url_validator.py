"""
URL Validator

Parses, canonicalizes and authorizes an untrusted string as a redirect
target. Every URL written to the store has come through validate_url().

Pipeline:
1. Type check, sanitize, trim, NFKC
2. Length limit (2048, after normalization)
3. Scheme allowlist (http/https) checked on the raw text, before parsing
4. Parse (urllib split plus WHATWG-style host parsing)
5. Post-parse checks: scheme, userinfo, hostname shape, SSRF classifier
6. Rebuild a canonical URL (lowercase scheme/host, default port stripped)

The canonical form is stable: validating an accepted URL again returns the
same string, so it can be used for storage and dedup.
"""

import ipaddress
import logging
import re
from typing import List, NamedTuple, Optional
from urllib.parse import quote, unquote, urlsplit

import idna

from shortbox.core.addresses import is_blocked_hostname, is_ipv4_literal
from shortbox.core.results import ErrorKind, ValidationResult
from shortbox.core.sanitize import normalize_text, strip_control_chars

logger = logging.getLogger(__name__)

MAX_URL_LENGTH = 2048

ALLOWED_SCHEMES = frozenset({"http", "https"})

DEFAULT_PORTS = {"http": 80, "https": 443}

SCHEME_PREFIX = re.compile(r"^([a-zA-Z][a-zA-Z0-9+\-.]*):(//)?")

# WHATWG forbidden host code points (controls are already stripped)
FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|")

# Characters left as-is when re-encoding; everything else (space, quotes,
# angle brackets, non-ASCII, ...) is percent-encoded. "%" is kept so
# existing escapes survive.
PATH_SAFE = "!$%&'()*+,/:;=@[\\]^|"
QUERY_SAFE = "!$%&()*+,/:;=?@[\\]^`{|}"
FRAGMENT_SAFE = "!#$%&'()*+,/:;=?@[\\]^{|}"

_DECIMAL = re.compile(r"^[0-9]+$")
_OCTAL = re.compile(r"^[0-7]+$")
_HEX = re.compile(r"^[0-9a-fA-F]+$")

_DOT_SEGMENTS = frozenset({".", "%2e"})
_DOUBLE_DOT_SEGMENTS = frozenset({"..", ".%2e", "%2e.", "%2e%2e"})


class ParsedURL(NamedTuple):
    """Components of a URL after parsing and host canonicalization."""
    scheme: str
    host: str
    port: Optional[int]
    path: str
    query: str
    fragment: str
    has_userinfo: bool


def _parse_ipv4_number(part: str) -> Optional[int]:
    """Parse one IPv4 part as decimal, 0x-hex or 0-prefixed octal."""
    if not part:
        return None
    radix, pattern = 10, _DECIMAL
    if part[:2] in ("0x", "0X"):
        part, radix, pattern = part[2:], 16, _HEX
    elif len(part) > 1 and part[0] == "0":
        part, radix, pattern = part[1:], 8, _OCTAL
    if not part:
        return 0
    if not pattern.match(part):
        return None
    return int(part, radix)


def _split_host_labels(host: str) -> List[str]:
    labels = host.split(".")
    if len(labels) > 1 and labels[-1] == "":
        labels.pop()
    return labels


def _ends_in_number(host: str) -> bool:
    last = _split_host_labels(host)[-1]
    if last and _DECIMAL.match(last):
        return True
    return _parse_ipv4_number(last) is not None


def _parse_ipv4(host: str) -> str:
    """
    Canonicalize IPv4 shorthand ("2130706433", "0x7f.1", "0177.0.0.1") to a
    dotted quad the way a browser would.

    Raises:
        ValueError: If the host ends in a number but is not a valid IPv4 address
    """
    labels = _split_host_labels(host)
    if len(labels) > 4:
        raise ValueError("too many IPv4 parts")

    numbers = []
    for label in labels:
        number = _parse_ipv4_number(label)
        if number is None:
            raise ValueError("invalid IPv4 part")
        numbers.append(number)

    if any(number > 255 for number in numbers[:-1]):
        raise ValueError("IPv4 part out of range")
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        raise ValueError("IPv4 address out of range")

    address = numbers[-1]
    for index, number in enumerate(numbers[:-1]):
        address += number * 256 ** (3 - index)
    return str(ipaddress.IPv4Address(address))


def _canonical_host(hostname: str, bracketed: bool) -> str:
    """
    Canonicalize a hostname: compress IPv6, IDNA-encode international names,
    expand IPv4 shorthand.

    Raises:
        ValueError: If the host is not acceptable to a WHATWG URL parser
    """
    if bracketed:
        if "%" in hostname:
            # Zone IDs ("fe80::1%25eth0") are not valid in a URL host
            raise ValueError("scoped IPv6 literal")
        return ipaddress.IPv6Address(hostname).compressed

    # "example.com." and "example.com" name the same host
    host = unquote(hostname).rstrip(".")
    if not host.isascii():
        # UTS #46 non-transitional mapping, as browsers do; IDNAError is a ValueError
        host = idna.encode(host, uts46=True, transitional=False).decode("ascii")
    host = host.lower()

    if not host or any(char in FORBIDDEN_HOST_CHARS for char in host):
        raise ValueError("forbidden host code point")

    if _ends_in_number(host):
        return _parse_ipv4(host)
    return host


def _normalize_path(path: str) -> str:
    """Resolve "." and ".." segments; an empty path becomes "/"."""
    if not path:
        return "/"

    segments = path.split("/")[1:]
    output: List[str] = []
    for index, segment in enumerate(segments):
        is_last = index == len(segments) - 1
        lowered = segment.lower()
        if lowered in _DOUBLE_DOT_SEGMENTS:
            if output:
                output.pop()
            if is_last:
                output.append("")
        elif lowered in _DOT_SEGMENTS:
            if is_last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def parse_url(url: str) -> ParsedURL:
    """
    Parse an http(s) URL into canonical components.

    Backslashes before the query are treated as "/", as browsers do for
    http and https.

    Raises:
        ValueError: If the URL cannot be parsed
    """
    scheme_end = url.index("://") + 3
    head, rest = url[:scheme_end], url[scheme_end:]
    cut = len(rest)
    for delimiter in ("?", "#"):
        position = rest.find(delimiter)
        if position != -1:
            cut = min(cut, position)
    url = head + rest[:cut].replace("\\", "/") + rest[cut:]

    parts = urlsplit(url)
    port = parts.port  # raises ValueError for a non-numeric or out-of-range port

    host_info = parts.netloc.rpartition("@")[2]
    hostname = parts.hostname or ""
    if hostname:
        hostname = _canonical_host(hostname, host_info.startswith("["))

    return ParsedURL(
        scheme=parts.scheme.lower(),
        host=hostname,
        port=port,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
        has_userinfo=bool(parts.username or parts.password),
    )


def build_url(parsed: ParsedURL) -> str:
    """Serialize parsed components into the canonical URL string."""
    netloc = f"[{parsed.host}]" if ":" in parsed.host else parsed.host
    if parsed.port is not None and parsed.port != DEFAULT_PORTS.get(parsed.scheme):
        netloc = f"{netloc}:{parsed.port}"

    url = f"{parsed.scheme}://{netloc}{quote(_normalize_path(parsed.path), safe=PATH_SAFE)}"
    if parsed.query:
        url += "?" + quote(parsed.query, safe=QUERY_SAFE)
    if parsed.fragment:
        url += "#" + quote(parsed.fragment, safe=FRAGMENT_SAFE)
    return url


def _reject(reason: str, kind: ErrorKind) -> ValidationResult[str]:
    logger.debug("URL rejected: %s", reason)
    return ValidationResult.failure(reason, kind)


def validate_url(raw: object) -> ValidationResult[str]:
    """
    Validate and canonicalize a redirect target.

    Args:
        raw: Untrusted value from a request payload

    Returns:
        Success carrying the canonical URL, or a failure with a user-facing
        reason (never parser internals)
    """
    if not isinstance(raw, str):
        return _reject("URL must be a string.", ErrorKind.TYPE)

    text = normalize_text(strip_control_chars(raw).strip())

    if not text:
        return _reject("URL must not be empty.", ErrorKind.FORMAT)

    if len(text) > MAX_URL_LENGTH:
        return _reject(f"URL must be {MAX_URL_LENGTH} characters or fewer.", ErrorKind.FORMAT)

    # Scheme allowlist runs before the parser gets a chance to reinterpret anything
    match = SCHEME_PREFIX.match(text)
    missing_scheme = "URL must include a scheme (https:// or http://)."
    if match is None:
        return _reject(missing_scheme, ErrorKind.FORMAT)

    scheme = match.group(1).lower()
    if match.group(2) is None and (scheme in ALLOWED_SCHEMES or "." in scheme):
        # "http:example.com", or "example.com:8080/..." with no scheme at all
        return _reject(missing_scheme, ErrorKind.FORMAT)
    if scheme not in ALLOWED_SCHEMES:
        return _reject(
            f'URL scheme "{scheme}" is not allowed. Only http and https are accepted.',
            ErrorKind.POLICY,
        )

    try:
        parsed = parse_url(text)
    except ValueError:
        return _reject("URL is not valid and could not be parsed.", ErrorKind.FORMAT)

    if parsed.scheme not in ALLOWED_SCHEMES:
        return _reject("Only http and https URLs are accepted.", ErrorKind.POLICY)

    if parsed.has_userinfo:
        return _reject("URLs with embedded credentials are not accepted.", ErrorKind.POLICY)

    if not parsed.host:
        return _reject("URL must contain a valid hostname.", ErrorKind.FORMAT)

    is_raw_ip = is_ipv4_literal(parsed.host) or ":" in parsed.host
    if not is_raw_ip and "." not in parsed.host:
        return _reject("URL hostname does not appear to be a valid domain.", ErrorKind.FORMAT)

    if is_blocked_hostname(parsed.host):
        return _reject("URL resolves to a reserved or private address.", ErrorKind.POLICY)

    canonical = build_url(parsed)
    if len(canonical) > MAX_URL_LENGTH:
        # Percent-encoding can push an accepted length over the limit
        return _reject(f"URL must be {MAX_URL_LENGTH} characters or fewer.", ErrorKind.FORMAT)

    return ValidationResult.success(canonical)
