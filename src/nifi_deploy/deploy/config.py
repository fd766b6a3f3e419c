"""Configuration models for a NiFi deployment.

Pydantic v2 models describing *what* gets deployed. A ``DeploymentConfig``
starts partially filled (from a YAML file, ``NIFI_DEPLOY_*`` settings or CLI
flags) and is completed by ``ConfigCollector``, which validates every value
and prompts for whatever is still missing.

Key Concepts:
    DeployDestination: Enum, ``localhost`` (plaintext) or ``server`` (TLS).
    ResourceNames: Image and container names; defaults reproduce the
        historical ``nifi`` / ``nifi-v0.1`` naming but can be overridden per
        environment so several deployments can share one Docker host.
    TlsConfig: Keystore/truststore files, store type and password, and the
        fixed NiFi security identifiers baked into the TLS image.
    DeploymentConfig: The launch values (port, proxy host, credentials) plus
        the two models above.

Override precedence:
    CLI flags > config file > environment (``NIFI_DEPLOY_*``) > prompt.

Tags:
    config, settings, pydantic, deployment, nifi
"""

from __future__ import annotations

import uuid
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic import ValidationError as PydanticValidationError

from nifi_deploy.core.errors import ConfigError
from nifi_deploy.core.settings import NifiDeploySettings

DEFAULT_HTTP_PORT = 8443

# Values gathered by ConfigCollector (prompt, flags, env, file)
DEPLOY_FIELDS = ("destination", "http_port", "proxy_host", "username", "password")
# Config file sections that shape the resources rather than the launch
SECTION_FIELDS = ("names", "tls", "work_dir")


class DeployDestination(str, Enum):
    """Where NiFi is being deployed."""

    LOCALHOST = "localhost"  # Plain upstream image
    SERVER = "server"  # Custom image with TLS stores


class ResourceNames(BaseModel):
    """Names of the Docker resources managed by a deployment."""

    model_config = ConfigDict(extra="forbid")

    base_image: str = Field(default="apache/nifi:latest", description="Upstream NiFi image")
    image_tag: str = Field(default="nifi", description="Tag of the TLS image built locally")
    http_container: str = Field(default="nifi", description="Container name for localhost")
    https_container: str = Field(default="nifi-v0.1", description="Container name for server")
    volume_prefix: str = Field(default="nifi", description="Prefix of the repository volumes")
    certs_volume: str = Field(default="certs", description="Volume mounted for certificate material")

    def container_for(self, destination: DeployDestination) -> str:
        if destination is DeployDestination.SERVER:
            return self.https_container
        return self.http_container

    def image_for(self, destination: DeployDestination) -> str:
        if destination is DeployDestination.SERVER:
            return self.image_tag
        return self.base_image

    @property
    def containers(self) -> list[str]:
        """Every container name this deployment may own, without duplicates."""
        return list(dict.fromkeys([self.http_container, self.https_container]))


class TlsConfig(BaseModel):
    """TLS material and NiFi security settings for the server image."""

    model_config = ConfigDict(extra="forbid")

    truststore: str = Field(default="truststore.pkcs12", description="Truststore file name")
    keystore: str = Field(default="keystore.pkcs12", description="Keystore file name")
    store_type: str = Field(default="PKCS12")
    cert_dir: str = Field(default="/opt/certs", description="Directory of the stores inside the image")
    store_password: SecretStr | None = Field(
        default=None,
        description="Password of both stores; resolved at run time, never defaulted",
    )
    admin_identity: str = Field(default="CN=admin,OU=NIFI")
    authorizer: str = Field(default="single-user-authorizer")
    login_provider: str = Field(default="single-user-provider")
    auth_mode: str = Field(default="tls")

    @property
    def store_files(self) -> list[str]:
        return [self.truststore, self.keystore]

    def image_path(self, filename: str) -> str:
        return f"{self.cert_dir.rstrip('/')}/{filename}"


class DeploymentConfig(BaseModel):
    """Configuration for one NiFi deployment.

    Example::

        config = DeploymentConfig(
            destination=DeployDestination.SERVER,
            http_port=9443,
            proxy_host="nifi.example.com:9443",
            username="admin",
            password="a-long-password",
        )
    """

    # What to deploy
    destination: DeployDestination | None = Field(default=None, description="localhost or server")
    http_port: int | None = Field(default=None, description="Published NiFi web port")
    proxy_host: str | None = Field(default=None, description="NIFI_WEB_PROXY_HOST")
    username: str | None = Field(default=None, description="Single-user username")
    password: SecretStr | None = Field(default=None, description="Single-user password")

    # Resources
    names: ResourceNames = Field(default_factory=ResourceNames)
    tls: TlsConfig = Field(default_factory=TlsConfig)
    work_dir: Path = Field(default_factory=Path.cwd, description="Location of stores and Dockerfile")

    # Execution
    interactive: bool = Field(default=True, description="Prompt for missing values")
    force: bool = Field(default=False, description="Delete an existing container without asking")
    dry_run: bool = Field(default=False, description="Log docker commands instead of running them")

    # Internal
    run_id: str = Field(default="", description="Unique run identifier (auto-generated)")

    @model_validator(mode="after")
    def _set_defaults(self) -> DeploymentConfig:
        if not self.run_id:
            self.run_id = uuid.uuid4().hex[:12]
        return self

    @property
    def tls_enabled(self) -> bool:
        return self.destination is DeployDestination.SERVER

    @property
    def container_name(self) -> str | None:
        if self.destination is None:
            return None
        return self.names.container_for(self.destination)

    @property
    def dockerfile_path(self) -> Path:
        return self.work_dir / "Dockerfile"

    # ------------------------------------------------------------------
    # Construction from settings and config files
    # ------------------------------------------------------------------

    @classmethod
    def from_sources(
        cls,
        settings: NifiDeploySettings,
        file_data: dict[str, Any] | None = None,
        **overrides: Any,
    ) -> DeploymentConfig:
        """Build the resource/TLS part of a config.

        Layers, lowest first: ``NIFI_DEPLOY_*`` settings, the ``names``/``tls``/
        ``work_dir`` sections of a config file, keyword overrides. Deploy
        values (destination, port, credentials) are not taken from here;
        they go through ``ConfigCollector`` so that they are validated the
        same way whatever their source.
        """
        names: dict[str, Any] = {
            "base_image": settings.base_image,
            "image_tag": settings.image_tag,
            "http_container": settings.http_container,
            "https_container": settings.https_container,
            "volume_prefix": settings.volume_prefix,
            "certs_volume": settings.certs_volume,
        }
        tls: dict[str, Any] = {"store_password": settings.store_password}
        values: dict[str, Any] = {"work_dir": settings.work_dir}

        if file_data:
            names.update(file_data.get("names") or {})
            tls.update(file_data.get("tls") or {})
            if file_data.get("work_dir"):
                values["work_dir"] = file_data["work_dir"]

        values["names"] = names
        values["tls"] = tls
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}", cause=exc) from exc


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML deployment file into a mapping.

    Example file::

        destination: server
        http_port: 9443
        proxy_host: nifi.example.com:9443
        username: admin
        names:
          https_container: nifi-staging
          image_tag: nifi-staging
        tls:
          keystore: staging-keystore.pkcs12
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}", cause=exc) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}", cause=exc) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    unknown = set(raw) - set(DEPLOY_FIELDS) - set(SECTION_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")
    return raw
