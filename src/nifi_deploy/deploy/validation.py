"""Input validation for deployment values.

Every value the workflow consumes passes through one of these functions
before use. They are pure: they return the checked value (or the parsed
enum) and raise ``ValidationError`` with ``field``/``value``/``constraint``
set when the value is rejected. Callers never recover - the run aborts.

Rules:
    validate_non_empty      any non-empty string
    validate_port           ^[0-9]+$
    validate_proxy_host     ^[A-Za-z0-9]+$   (no dots, no port suffix)
    validate_proxy_address  hostname | IPv4 | [IPv6], any with :port
    validate_local_host     exactly "localhost" or "0.0.0.0"
    validate_destination    exactly "localhost" or "server"

Tags:
    validation, input, regex, nifi-deploy
"""

from __future__ import annotations

import ipaddress
import re

from nifi_deploy.core.errors import ValidationError
from nifi_deploy.deploy.config import DeployDestination

PORT_RE = re.compile(r"^[0-9]+$")
ALNUM_HOST_RE = re.compile(r"^[A-Za-z0-9]+$")

_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
PROXY_ADDRESS_RE = re.compile(
    rf"^(?:{_LABEL}(?:\.{_LABEL})*|\[(?P<ipv6>[0-9A-Fa-f:.]+)\])(?::(?P<port>[0-9]{{1,5}}))?$"
)

LOCAL_HOSTS = ("localhost", "0.0.0.0")


def validate_non_empty(value: str | None, field: str = "value") -> str:
    if not value:
        raise ValidationError(
            f"{field} cannot be empty.",
            field=field,
            constraint="non-empty",
        )
    return value


def validate_port(value: str | None, field: str = "http_port") -> str:
    """Accept only strings made of ASCII digits."""
    if value is None or not PORT_RE.fullmatch(value):
        raise ValidationError(
            f"{field} should contain only numbers.",
            field=field,
            value=value,
            constraint=PORT_RE.pattern,
        )
    return value


def validate_proxy_host(value: str | None, field: str = "proxy_host") -> str:
    """Accept only alphanumeric host names.

    Dotted names and ``host:port`` forms are rejected; use
    ``validate_proxy_address`` to accept them.
    """
    if value is None or not ALNUM_HOST_RE.fullmatch(value):
        raise ValidationError(
            f"{field} should contain only alphanumeric characters and numbers.",
            field=field,
            value=value,
            constraint=ALNUM_HOST_RE.pattern,
        )
    return value


def validate_proxy_address(value: str | None, field: str = "proxy_host") -> str:
    """Accept hostnames, IPv4 and bracketed IPv6 addresses, each with an optional ``:port``."""
    match = PROXY_ADDRESS_RE.fullmatch(value) if value is not None else None
    if match and match["ipv6"]:
        try:
            ipaddress.IPv6Address(match["ipv6"])
        except ValueError:
            match = None
    if match is None:
        raise ValidationError(
            f"{field} should be a hostname or IP address, optionally followed by :port.",
            field=field,
            value=value,
            constraint="host[:port]",
        )
    port = match["port"]
    if port and not 0 < int(port) <= 65535:
        raise ValidationError(
            f"{field} port suffix out of range: {port}",
            field=field,
            value=value,
            constraint="1-65535",
        )
    return value


def validate_local_host(value: str | None, field: str = "proxy_host") -> str:
    if value not in LOCAL_HOSTS:
        raise ValidationError(
            f"{field} should be either 'localhost' or '0.0.0.0'.",
            field=field,
            value=value,
            constraint=" | ".join(LOCAL_HOSTS),
        )
    return value  # type: ignore[return-value]


def validate_destination(value: str | None) -> DeployDestination:
    """Map the destination answer to its enum; matching is case-sensitive."""
    for destination in DeployDestination:
        if value == destination.value:
            return destination
    raise ValidationError(
        "Invalid deploy destination.",
        field="destination",
        value=value,
        constraint="localhost | server",
    )


def proxy_host_validator(policy: str):
    """Return the server-path proxy host validator for a settings policy."""
    if policy == "alnum":
        return validate_proxy_host
    return validate_proxy_address
