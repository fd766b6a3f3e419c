"""Process-wide settings for nifi-deploy.

``NifiDeploySettings`` reads ``NIFI_DEPLOY_*`` environment variables (and a
``.env`` file in the working directory) so that every value the interactive
workflow asks for can also be supplied up front:

    NIFI_DEPLOY_DESTINATION=server
    NIFI_DEPLOY_HTTP_PORT=9443
    NIFI_DEPLOY_PROXY_HOST=nifi.example.com:9443
    NIFI_DEPLOY_USERNAME=admin
    NIFI_DEPLOY_PASSWORD=...
    NIFI_DEPLOY_STORE_PASSWORD=...

Fields
──────
log_level / json_logs          : structlog configuration
work_dir                       : where the PKCS12 stores live and the Dockerfile is written
base_image, image_tag          : upstream image and the tag of the TLS build
http_container, https_container: container names per destination
docker_timeout_seconds         : per docker command (builds use build_timeout_seconds)
secrets_dir                    : directory of file-based secrets
proxy_host_policy              : ``address`` (hostnames, IPs, host:port) or ``alnum``

Requires ``pydantic-settings``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NifiDeploySettings(BaseSettings):
    """Settings shared by the CLI and the deployment runner."""

    model_config = SettingsConfigDict(
        env_prefix="NIFI_DEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Resources ────────────────────────────────────────────────
    work_dir: Path = Field(default_factory=Path.cwd)
    base_image: str = "apache/nifi:latest"
    image_tag: str = "nifi"
    http_container: str = "nifi"
    https_container: str = "nifi-v0.1"
    volume_prefix: str = "nifi"
    certs_volume: str = "certs"

    # ── Docker ───────────────────────────────────────────────────
    docker_timeout_seconds: int = 120
    build_timeout_seconds: int = 900

    # ── Secrets ──────────────────────────────────────────────────
    secrets_dir: Path = Path("/run/secrets")
    store_password: SecretStr | None = None

    # ── Validation ───────────────────────────────────────────────
    proxy_host_policy: Literal["address", "alnum"] = "address"

    # ── Deploy values (all optional, prompted when missing) ──────
    destination: str | None = None
    http_port: str | None = None
    proxy_host: str | None = None
    username: str | None = None
    password: SecretStr | None = None


def get_settings(**overrides: object) -> NifiDeploySettings:
    """Build settings from the environment, with keyword overrides on top."""
    return NifiDeploySettings(**overrides)  # type: ignore[arg-type]
