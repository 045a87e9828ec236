# src/pipeforge/core/security/web.py
"""URL security for fetch operators.

Two checks run before any outbound request, in this order:

1. **Private-network rejection**: only http/https, and the host must not be
   localhost, a loopback, private, or link-local address.
2. **Domain whitelist**: the hostname must be on the configured allow-list.

Error messages name the policy that was violated, never the internal check
that tripped, and the whitelist contents are never echoed back.
"""

from __future__ import annotations

import ipaddress
import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from pipeforge.contracts.errors import SecurityError

logger = structlog.get_logger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})

PRIVATE_NETWORKS_ERROR = "Security error: Private networks are not allowed"
INVALID_URL_ERROR = "Invalid URL format"

# Each range blocks a specific route back into the host's own network.
BLOCKED_IP_RANGES = [
    # IPv4 ranges
    ipaddress.ip_network("0.0.0.0/32"),  # Unspecified - routes to localhost on most stacks
    ipaddress.ip_network("127.0.0.0/8"),  # Loopback
    ipaddress.ip_network("10.0.0.0/8"),  # Private Class A (RFC 1918)
    ipaddress.ip_network("172.16.0.0/12"),  # Private Class B (RFC 1918)
    ipaddress.ip_network("192.168.0.0/16"),  # Private Class C (RFC 1918)
    ipaddress.ip_network("169.254.0.0/16"),  # Link-local (cloud metadata endpoints)
    # IPv6 ranges
    ipaddress.ip_network("::1/128"),  # IPv6 loopback
    ipaddress.ip_network("fc00::/7"),  # IPv6 unique local (RFC 4193)
    ipaddress.ip_network("fe80::/10"),  # IPv6 link-local
]

LOCALHOST_NAMES = frozenset({"localhost", "localhost.localdomain"})

DEFAULT_DOMAIN_WHITELIST: tuple[str, ...] = (
    "api.github.com",
    "jsonplaceholder.typicode.com",
    "api.openweathermap.org",
    "api.exchangerate-api.com",
    "restcountries.com",
    "raw.githubusercontent.com",
    "hnrss.org",
    "api.open-meteo.com",
    "rss.nytimes.com",
    "dev.to",
    "medium.com",
    "reddit.com",
    "www.reddit.com",
    "old.reddit.com",
    "news.ycombinator.com",
    "hacker-news.firebaseio.com",
    "en.wikipedia.org",
    "api.wikipedia.org",
    "www.youtube.com",
)


@dataclass(frozen=True, slots=True)
class URLSecurityResult:
    valid: bool
    error: str | None = None


def _normalize_host(hostname: str) -> str:
    return hostname.strip().lower().removeprefix("[").removesuffix("]").rstrip(".")


def is_private_host(hostname: str) -> bool:
    """Return True if hostname is localhost or an IP literal in a blocked range.

    Hostnames that are not IP literals (other than localhost) are not
    resolved here; the domain whitelist is what constrains named hosts.

    Examples:
        >>> is_private_host("192.168.1.10")
        True
        >>> is_private_host("[::1]")
        True
        >>> is_private_host("api.github.com")
        False
    """
    host = _normalize_host(hostname)
    if host in LOCALHOST_NAMES or host.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    # IPv4-mapped IPv6 (::ffff:10.0.0.1) must be judged as the IPv4 it wraps
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip in blocked for blocked in BLOCKED_IP_RANGES)


def _split_url(url: str) -> urllib.parse.SplitResult | None:
    try:
        parsed = urllib.parse.urlsplit(url.strip())
        # Accessing hostname/port validates bracketed IPv6 and port syntax
        _ = parsed.hostname
        _ = parsed.port
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    return parsed


def validate_url_security(url: str) -> URLSecurityResult:
    """Check scheme and host of a URL against the private-network policy.

    Returns:
        URLSecurityResult; error is user-facing when valid is False.
    """
    if not isinstance(url, str):
        return URLSecurityResult(valid=False, error=INVALID_URL_ERROR)
    parsed = _split_url(url)
    if parsed is None:
        return URLSecurityResult(valid=False, error=INVALID_URL_ERROR)
    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        return URLSecurityResult(
            valid=False,
            error=f'Security error: Protocol "{scheme}:" is not allowed. Only HTTP and HTTPS are permitted.',
        )
    if not parsed.hostname:
        return URLSecurityResult(valid=False, error=INVALID_URL_ERROR)
    if is_private_host(parsed.hostname):
        return URLSecurityResult(valid=False, error=PRIVATE_NETWORKS_ERROR)
    return URLSecurityResult(valid=True)


def is_valid_and_safe_url(url: str) -> bool:
    return validate_url_security(url).valid


class DomainWhitelist:
    """Exact-hostname allow-list for outbound fetches.

    Matching is case-insensitive and exact: "api.github.com" does not admit
    "evil.api.github.com".
    """

    def __init__(self, domains: Iterable[str] = DEFAULT_DOMAIN_WHITELIST) -> None:
        self._domains = frozenset(_normalize_host(d) for d in domains if d and d.strip())

    def __len__(self) -> int:
        return len(self._domains)

    def is_allowed(self, url: str) -> bool:
        parsed = _split_url(url) if isinstance(url, str) else None
        if parsed is None or parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.hostname:
            return False
        return _normalize_host(parsed.hostname) in self._domains

    def domains(self) -> list[str]:
        return sorted(self._domains)

    def error_message(self, url: str) -> str:
        parsed = _split_url(url) if isinstance(url, str) else None
        if parsed is None or not parsed.hostname:
            return INVALID_URL_ERROR
        host = _normalize_host(parsed.hostname)
        return f"Domain not whitelisted: {host}. Please contact support to request whitelist addition."


def ensure_fetch_allowed(url: str, whitelist: DomainWhitelist, *, user_id: str | None = None) -> None:
    """Run both fetch guards, raising on the first violation.

    Raises:
        SecurityError: If the URL targets a private network, uses a
            forbidden scheme, or its domain is not whitelisted.
    """
    result = validate_url_security(url)
    if not result.valid:
        raise SecurityError(result.error or INVALID_URL_ERROR)
    if not whitelist.is_allowed(url):
        logger.warning("domain_rejected", url=url, user_id=user_id)
        raise SecurityError(whitelist.error_message(url))
