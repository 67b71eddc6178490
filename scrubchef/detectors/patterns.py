"""Fixed-pattern detectors.

Each detector here scans with a built-in expression; ``config`` only carries
rendering options, apart from the email domain allow-list and the IPv4 subnet
exclusions.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ErrorCategory
from .base import Match, find_pattern, registry, string_list

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
IPV4_RE = re.compile(
    r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b"
)
# Full form first, then the compressed forms.
IPV6_RE = re.compile(
    r"\b(?:[0-9a-f]{1,4}:){7}[0-9a-f]{1,4}\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,7}:\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,6}:[0-9a-f]{1,4}\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,5}(?::[0-9a-f]{1,4}){1,2}\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,4}(?::[0-9a-f]{1,4}){1,3}\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,3}(?::[0-9a-f]{1,4}){1,4}\b"
    r"|\b(?:[0-9a-f]{1,4}:){1,2}(?::[0-9a-f]{1,4}){1,5}\b"
    r"|\b[0-9a-f]{1,4}:(?::[0-9a-f]{1,4}){1,6}\b"
    r"|\b::(?:[0-9a-f]{1,4}:){0,6}[0-9a-f]{1,4}\b",
    re.IGNORECASE,
)
MAC_RE = re.compile(r"\b(?:[0-9a-f]{2}[:-]){5}[0-9a-f]{2}\b|\b[0-9a-f]{12}\b", re.IGNORECASE)
HOSTNAME_RE = re.compile(r"\b(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}\b")
JWT_RE = re.compile(r"eyJ[A-Za-z0-9_-]+\.eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")
UUID_RE = re.compile(
    r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b"
)
PHONE_RE = re.compile(r"(?:\+\d{1,3}\s?)?(?:\(\d{3}\)|\d{3})[\s.-]?\d{3}[\s.-]?\d{4}")
SSN_RE = re.compile(r"\b\d{3}[-\s]?\d{2}[-\s]?\d{4}\b")
CREDIT_CARD_RE = re.compile(r"\b(?:\d{4}[\s-]?){3}\d{4,7}\b")
URL_RE = re.compile(r"https?://[^\s<>\"]+")
# At least 20 characters to keep ordinary words out.
BASE64_RE = re.compile(r"\b[A-Za-z0-9+/]{20,}={0,2}\b")
OAUTH_RE = re.compile(r"\bya29\.[a-zA-Z0-9_-]{50,}\b", re.IGNORECASE)


def _in_domains(address: str, domains: list[str]) -> bool:
    domain = address.rpartition("@")[2].lower()
    return any(domain == d or domain.endswith("." + d) for d in domains)


@registry.detector("email", "EMAIL")
def find_email(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Email addresses."""
    allowed = [d.lower().lstrip("@") for d in string_list(config, "allowedDomains")]
    for match in find_pattern(EMAIL_RE, text):
        if allowed and _in_domains(match.text, allowed):
            continue
        yield match


def _excluded_networks(config: Mapping[str, Any]) -> list[ipaddress.IPv4Network]:
    networks = []
    for cidr in string_list(config, "excludeSubnets"):
        try:
            network = ipaddress.ip_network(cidr, strict=False)
        except ValueError:
            log.warning(
                "invalid_subnet",
                extra={
                    "event_type": "invalid_subnet",
                    "error_category": ErrorCategory.CONFIG.value,
                },
            )
            continue
        if isinstance(network, ipaddress.IPv4Network):
            networks.append(network)
    return networks


@registry.detector("ipv4", "IPV4")
def find_ipv4(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Dotted-quad IPv4 addresses."""
    excluded = _excluded_networks(config)
    for match in find_pattern(IPV4_RE, text):
        if excluded:
            # The pattern admits zero-padded octets, which ipaddress rejects.
            octets = (str(int(octet)) for octet in match.text.split("."))
            address = ipaddress.IPv4Address(".".join(octets))
            if any(address in network for network in excluded):
                continue
        yield match


def _fixed(kind: str, prefix: str, pattern: re.Pattern[str], description: str, *aliases: str) -> None:
    def find(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
        return find_pattern(pattern, text)

    find.__name__ = f"find_{kind}"
    registry.detector(kind, prefix, aliases=aliases, description=description)(find)


_fixed("ipv6", "IPV6", IPV6_RE, "IPv6 addresses, full and compressed")
_fixed("mac", "MAC", MAC_RE, "MAC addresses")
_fixed("hostname", "HOSTNAME", HOSTNAME_RE, "Hostnames and FQDNs")
_fixed("jwt", "JWT", JWT_RE, "JSON Web Tokens")
_fixed("uuid", "UUID", UUID_RE, "UUIDs")
_fixed("phone", "PHONE", PHONE_RE, "Phone numbers")
_fixed("ssn", "SSN", SSN_RE, "US social security numbers")
_fixed("credit_card", "CC", CREDIT_CARD_RE, "Credit card numbers")
_fixed("url", "URL", URL_RE, "http(s) URLs")
_fixed("base64", "BASE64", BASE64_RE, "Long base64 strings")
_fixed("oauth", "OAUTH", OAUTH_RE, "Google OAuth access tokens", "oauth_token")
