"""
Utility functions
"""

import hashlib
import ipaddress
import re
from typing import Optional
from urllib.parse import urlparse

PRIVATE_HOST_PATTERNS = [
    re.compile(r'^(.+\.)?localhost\.?$', re.IGNORECASE),
    re.compile(r'^127\.'),
    re.compile(r'^\[?::1\]?$'),
    re.compile(r'^10\.'),
    re.compile(r'^192\.168\.'),
    re.compile(r'^172\.(1[6-9]|2\d|3[0-1])\.'),
    re.compile(r'^169\.254\.'),
]

# Substrings of request URLs dropped when ad blocking is on
TRACKER_SUBSTRINGS = (
    'googletagmanager.com',
    'google-analytics.com',
    'doubleclick.net',
    'googlesyndication.com',
    'adservice.google.com',
    'facebook.net',
    'hotjar.com',
    'segment.io',
    'mixpanel.com',
    'scorecardresearch.com',
    'analytics.',
)

_IPV4_NUMBER = re.compile(r'^(0[xX][0-9a-fA-F]*|\d+)$')

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')

TRUTHY_FLAGS = {'1', 'true', 'yes', 'on'}


def _parse_ipv4_number(part: str) -> int:
    if part[:2].lower() == '0x':
        return int(part[2:] or '0', 16)
    if len(part) > 1 and part.startswith('0'):
        return int(part, 8)
    return int(part, 10)


def canonical_host(hostname: str) -> str:
    """
    Rewrite numeric IPv4 spellings the way browsers do before they connect.

    "2130706433", "0x7f000001", "0177.0.0.1" and "127.1" all become
    "127.0.0.1". Hosts whose last label is not a number come back unchanged.
    Raises ValueError for numeric hosts a browser would refuse to parse.
    """
    if ':' in hostname:
        return hostname

    parts = hostname.split('.')
    if len(parts) > 1 and parts[-1] == '':
        parts.pop()
    if not _IPV4_NUMBER.match(parts[-1]):
        return hostname

    if len(parts) > 4 or not all(_IPV4_NUMBER.match(part) for part in parts):
        raise ValueError(f"invalid IPv4 host: {hostname}")

    numbers = [_parse_ipv4_number(part) for part in parts]
    if any(n > 255 for n in numbers[:-1]) or numbers[-1] >= 256 ** (5 - len(numbers)):
        raise ValueError(f"IPv4 host out of range: {hostname}")

    value = numbers[-1]
    for index, number in enumerate(numbers[:-1]):
        value += number * 256 ** (3 - index)
    return str(ipaddress.IPv4Address(value))


def is_probably_private_host(hostname: str) -> bool:
    """Check whether a hostname looks like a loopback, private or link-local address"""
    try:
        hostname = canonical_host(hostname)
    except ValueError:
        # Unparseable numeric hosts are refused outright
        return True

    if any(pattern.search(hostname) for pattern in PRIVATE_HOST_PATTERNS):
        return True

    try:
        address = ipaddress.ip_address(hostname.strip('[]'))
    except ValueError:
        return False

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
    )


def is_valid_http_url(candidate: Optional[str]) -> bool:
    """Check that a URL is absolute http(s) and does not point at a private host"""
    if not candidate:
        return False

    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
    except ValueError:
        return False

    if parsed.scheme.lower() not in ('http', 'https'):
        return False
    if not hostname:
        return False
    if is_probably_private_host(hostname):
        return False
    return True


def parse_int(value: Optional[str], default: int) -> int:
    """Parse the leading integer of a query value, falling back to the default"""
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1))


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def parse_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_FLAGS


def is_tracker_url(url: str) -> bool:
    return any(marker in url for marker in TRACKER_SUBSTRINGS)


def content_hash(data: bytes) -> str:
    """Hex SHA-1 of the image bytes, used as the ETag"""
    return hashlib.sha1(data).hexdigest()
