"""URL Safety Guard: SSRF protection for outbound fetches.

A URL is allowed only when its scheme is ``http``/``https`` and *every*
address its host resolves to lies outside the private, loopback and
link-local ranges below.  Resolution failures are treated as blocked (fail
closed).  The guard never raises for hostile input; it returns a
:class:`GuardVerdict`.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass
from enum import Enum

import httpx

from speedreader.scraper.errors import Forbidden, InvalidInput

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fixed ranges and names
# ---------------------------------------------------------------------------
BLOCKED_NETWORKS = [
    ipaddress.ip_network(n)
    for n in [
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "::1/128",
        "::/128",
        "fc00::/7",
        "fe80::/10",
    ]
]

RESERVED_HOSTNAMES = frozenset(
    {
        "localhost",
        "localhost.localdomain",
        "ip6-localhost",
        "ip6-loopback",
        "0.0.0.0",
    }
)

ALLOWED_SCHEMES = ("http", "https")


class Verdict(str, Enum):
    ALLOWED = "allowed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class AddressClassification:
    """An IP literal and whether outbound requests to it are permitted."""

    address: str
    verdict: Verdict

    @property
    def blocked(self) -> bool:
        return self.verdict is Verdict.BLOCKED


@dataclass(frozen=True)
class GuardVerdict:
    """Outcome of :func:`check_url`."""

    allowed: bool
    reason: str | None = None
    invalid_input: bool = False

    @classmethod
    def allow(cls) -> GuardVerdict:
        return cls(allowed=True)

    @classmethod
    def block(cls, reason: str, *, invalid_input: bool = False) -> GuardVerdict:
        return cls(allowed=False, reason=reason, invalid_input=invalid_input)


# ---------------------------------------------------------------------------
# Address classification
# ---------------------------------------------------------------------------

def classify_address(literal: str) -> AddressClassification:
    """Classify an IPv4/IPv6 literal.  Pure: no network access.

    Anything that does not parse as an IP address is blocked.
    """
    try:
        ip = ipaddress.ip_address(literal.strip("[]"))
    except ValueError:
        return AddressClassification(literal, Verdict.BLOCKED)

    # ::ffff:a.b.c.d is routed to the embedded IPv4 address.
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    if str(ip) in RESERVED_HOSTNAMES or any(ip in net for net in BLOCKED_NETWORKS):
        return AddressClassification(literal, Verdict.BLOCKED)
    return AddressClassification(literal, Verdict.ALLOWED)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def _is_reserved_hostname(host: str) -> bool:
    return host in RESERVED_HOSTNAMES or host.endswith(".localhost")


def resolve_host(host: str, port: int | None = None) -> list[str]:
    """Return every address *host* resolves to.

    Raises:
        OSError: When resolution fails (including ``socket.gaierror``).
        UnicodeError: When *host* is not IDNA-encodable.
    """
    infos = socket.getaddrinfo(host, port, proto=socket.IPPROTO_TCP)
    addresses: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def check_url(url: str) -> GuardVerdict:
    """Decide whether *url* may be fetched.

    Steps: scheme check, IP-literal classification, reserved-name check,
    then DNS resolution where any private result blocks the whole host.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return GuardVerdict.block("Invalid URL", invalid_input=True)

    if parsed.scheme not in ALLOWED_SCHEMES:
        return GuardVerdict.block("Invalid URL protocol", invalid_input=True)

    host = parsed.host.rstrip(".").lower()
    if not host:
        return GuardVerdict.block("Invalid URL", invalid_input=True)

    if _is_ip_literal(host):
        result = classify_address(host)
        if result.blocked:
            logger.info("Blocked private address literal %s", host)
            return GuardVerdict.block(f"Address {host} is not allowed")
        return GuardVerdict.allow()

    if _is_reserved_hostname(host):
        logger.info("Blocked reserved hostname %s", host)
        return GuardVerdict.block(f"Host {host} is not allowed")

    try:
        addresses = resolve_host(host, parsed.port)
    except (OSError, UnicodeError) as exc:
        logger.info("Blocked unresolvable host %s: %s", host, exc)
        return GuardVerdict.block(f"Could not resolve host {host}")

    if not addresses:
        return GuardVerdict.block(f"Could not resolve host {host}")

    for address in addresses:
        if classify_address(address).blocked:
            logger.info("Blocked host %s resolving to private address %s", host, address)
            return GuardVerdict.block(f"Host {host} resolves to a private address")

    return GuardVerdict.allow()


def ensure_allowed(url: str) -> None:
    """Raise when :func:`check_url` rejects *url*.

    Raises:
        InvalidInput: Malformed URL or disallowed scheme.
        Forbidden: Private/reserved/unresolvable target.
    """
    verdict = check_url(url)
    if verdict.allowed:
        return
    if verdict.invalid_input:
        raise InvalidInput(verdict.reason)
    raise Forbidden(verdict.reason)
