"""
Network Address Classifier

Decides whether a hostname or IP literal must be refused as a redirect
target (SSRF defense).

This is a purely syntactic check over the literal hostname string. It does
NOT resolve DNS, so a public name that later resolves to a private address
(DNS rebinding) is not caught here.
"""

import ipaddress
import re

BLOCKED_HOSTNAMES = frozenset({
    "localhost",
    "metadata.google.internal",
    "metadata.goog",
    "instance-data",
    "computemetadata",
})

BLOCKED_SUFFIXES = (
    ".local",
    ".internal",
    ".localhost",
    ".lan",
    ".corp",
    ".intranet",
)

BLOCKED_IPV4_NETWORKS = tuple(ipaddress.IPv4Network(net) for net in (
    "0.0.0.0/8",        # "this" network
    "127.0.0.0/8",      # loopback
    "10.0.0.0/8",       # private
    "172.16.0.0/12",    # private (172.16.0.0 - 172.31.255.255)
    "192.168.0.0/16",   # private
    "169.254.0.0/16",   # link-local, cloud metadata
    "100.64.0.0/10",    # CGNAT
    "198.51.100.0/24",  # TEST-NET-2
    "203.0.113.0/24",   # TEST-NET-3
    "240.0.0.0/4",      # reserved
))

BROADCAST_IPV4 = ipaddress.IPv4Address("255.255.255.255")

BLOCKED_IPV6_NETWORKS = tuple(ipaddress.IPv6Network(net) for net in (
    "::/16",      # ::, ::1, IPv4-mapped/compatible and anything else "::"-prefixed
    "fc00::/7",   # unique local
    "fe80::/10",  # link-local
    "ff00::/8",   # multicast
))

DOTTED_QUAD = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")


def is_ipv4_literal(hostname: str) -> bool:
    return DOTTED_QUAD.match(hostname) is not None


def _is_blocked_ipv4(hostname: str) -> bool:
    try:
        address = ipaddress.IPv4Address(hostname)
    except ValueError:
        # Octet out of range or leading zeros: not a host we can reason about
        return True
    if address == BROADCAST_IPV4:
        return True
    return any(address in network for network in BLOCKED_IPV4_NETWORKS)


def _is_blocked_ipv6(hostname: str) -> bool:
    try:
        address = ipaddress.IPv6Address(hostname.strip("[]"))
    except ValueError:
        return True
    return any(address in network for network in BLOCKED_IPV6_NETWORKS)


def is_blocked_hostname(hostname: str) -> bool:
    """
    Check a hostname against the SSRF blocklists.

    Rules, first match wins:
    1. Exact internal/metadata hostnames
    2. Internal-looking suffixes (.local, .internal, ...)
    3. Dotted-quad IPv4 literals inside private/reserved ranges
    4. IPv6 literals (anything containing a colon) in loopback, unspecified,
       unique-local, link-local or multicast space
    5. Any other DNS name is allowed

    Args:
        hostname: Hostname as extracted from a parsed URL (brackets and a
            trailing dot optional)

    Returns:
        True if the host must be refused
    """
    # Absolute names ("localhost.") match their relative form
    host = hostname.lower().rstrip(".")

    if host in BLOCKED_HOSTNAMES:
        return True

    if host.endswith(BLOCKED_SUFFIXES):
        return True

    if is_ipv4_literal(host):
        return _is_blocked_ipv4(host)

    if ":" in host:
        return _is_blocked_ipv6(host)

    return False
