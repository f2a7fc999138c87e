"""Backend location parsing and credential resolution.

A location has the form ``swift:///<container>[/<prefix...>]``. Credentials and
endpoints are not part of the location; they are filled in from the usual
OpenStack client environment variables by :func:`apply_environment`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Mapping
from urllib.parse import urlsplit

CONTAINER_POLICY_ENV = "SWIFT_DEFAULT_CONTAINER_POLICY"

# Consulted in order; a field is only filled while it is still empty.
ENVIRONMENT_PRECEDENCE: tuple[tuple[str, str], ...] = (
    # v2/v3
    ("user_name", "OS_USERNAME"),
    ("api_key", "OS_PASSWORD"),
    ("region", "OS_REGION_NAME"),
    ("auth_url", "OS_AUTH_URL"),
    # v3
    ("domain", "OS_USER_DOMAIN_NAME"),
    ("tenant", "OS_PROJECT_NAME"),
    ("tenant_domain", "OS_PROJECT_DOMAIN_NAME"),
    ("trust_id", "OS_TRUST_ID"),
    # v2
    ("tenant_id", "OS_TENANT_ID"),
    ("tenant", "OS_TENANT_NAME"),
    # v1
    ("auth_url", "ST_AUTH"),
    ("user_name", "ST_USER"),
    ("api_key", "ST_KEY"),
    # pre-authenticated
    ("storage_url", "OS_STORAGE_URL"),
    ("auth_token", "OS_AUTH_TOKEN"),
    ("default_container_policy", CONTAINER_POLICY_ENV),
)


class ConfigParseError(ValueError):
    """Raised when a location string cannot be parsed."""


class HostNotSupportedError(ConfigParseError):
    """Raised when a location carries a host component."""


class MissingContainerError(ConfigParseError):
    """Raised when a location does not name a container."""


@dataclass(frozen=True)
class BackendConfig:
    container: str
    prefix: str = ""
    user_name: str = ""
    domain: str = ""
    api_key: str = field(default="", repr=False)
    auth_url: str = ""
    region: str = ""
    tenant: str = ""
    tenant_id: str = ""
    tenant_domain: str = ""
    trust_id: str = ""
    storage_url: str = ""
    auth_token: str = field(default="", repr=False)
    default_container_policy: str = ""

    def __post_init__(self) -> None:
        if not self.container:
            raise MissingContainerError("swift: missing container name")

    @property
    def pre_authenticated(self) -> bool:
        return bool(self.storage_url and self.auth_token)


def parse_config(location: str) -> BackendConfig:
    """Parse a ``swift:///container/prefix`` location into a BackendConfig."""
    try:
        url = urlsplit(location)
    except ValueError as exc:
        raise ConfigParseError(f"swift: invalid location {location!r}: {exc}") from exc

    if url.netloc:
        raise HostNotSupportedError("swift: hostname in swift url is not supported")
    if not url.scheme or not url.path.startswith("/"):
        raise ConfigParseError(f"swift: invalid location {location!r}")

    parts = url.path.split("/", 2)
    if len(parts) < 2 or not parts[1]:
        raise MissingContainerError("swift: missing container name")

    prefix = parts[2] if len(parts) > 2 else ""
    return BackendConfig(container=parts[1], prefix=prefix)


def apply_environment(
    cfg: BackendConfig, environ: Mapping[str, str] | None = None
) -> BackendConfig:
    """Fill every empty credential field from the environment.

    Values already present on cfg are never overwritten, and the first
    non-empty variable for a field wins.
    """
    env = os.environ if environ is None else environ
    values = {f.name: getattr(cfg, f.name) for f in fields(cfg)}
    for name, variable in ENVIRONMENT_PRECEDENCE:
        if values[name]:
            continue
        value = env.get(variable, "")
        if value:
            values[name] = value
    return replace(cfg, **values)


def resolve_config(
    location: str, environ: Mapping[str, str] | None = None
) -> BackendConfig:
    return apply_environment(parse_config(location), environ)
