"""Launchers: the terminal step of a deployment.

Exactly one launcher runs per deployment, picked by the destination:

    localhost → HttpLauncher   upstream image, credentials as env,
                               publishes <port>, 5050, 0.0.0.0:5051, 5052
    server    → HttpsLauncher  Dockerfile with TLS stores → docker build
                               → docker run, publishes <port>, 5050

Both mount the full ``VolumeSet``. Both expect a config that
``ConfigCollector`` has completed.
"""

from __future__ import annotations

from pathlib import Path

from nifi_deploy.core.errors import ExternalToolError, MissingCertificateError, ValidationError
from nifi_deploy.core.logging import get_logger
from nifi_deploy.deploy.config import DeployDestination, DeploymentConfig
from nifi_deploy.deploy.container import ContainerManager, ContainerSpec, PortBinding
from nifi_deploy.deploy.dockerfile import generate_dockerfile, write_dockerfile
from nifi_deploy.deploy.volumes import VolumeSet

logger = get_logger(__name__)

# Auxiliary ports published next to the web port (site-to-site / listeners)
HTTP_AUX_PORTS = (
    PortBinding(5050, 5050),
    PortBinding(5051, 5051, host_ip="0.0.0.0"),
    PortBinding(5052, 5052),
)
HTTPS_AUX_PORTS = (PortBinding(5050, 5050),)


def check_certificate_files(config: DeploymentConfig) -> list[Path]:
    """Both PKCS12 stores must exist in the working directory.

    Raises:
        MissingCertificateError: listing every missing file
    """
    paths = [config.work_dir / name for name in config.tls.store_files]
    missing = [p.name for p in paths if not p.is_file()]
    if missing:
        raise MissingCertificateError(missing, str(config.work_dir)).with_context(
            step="certificates"
        )
    logger.info("certificates.found", files=[p.name for p in paths])
    return paths


class Launcher:
    """Common launch plumbing: credentials env, ports, volumes."""

    destination: DeployDestination

    def __init__(self, containers: ContainerManager, volumes: VolumeSet) -> None:
        self.containers = containers
        self.volumes = volumes

    def launch(self, config: DeploymentConfig) -> str:
        raise NotImplementedError

    def container_spec(self, config: DeploymentConfig) -> ContainerSpec:
        self._require_complete(config)
        return ContainerSpec(
            name=config.names.container_for(self.destination),
            image=config.names.image_for(self.destination),
            ports=[PortBinding(config.http_port, config.http_port), *self.aux_ports],  # type: ignore[arg-type]
            mounts=[v.as_mount() for v in self.volumes],
            env={
                "SINGLE_USER_CREDENTIALS_USERNAME": config.username or "",
                "SINGLE_USER_CREDENTIALS_PASSWORD": config.password.get_secret_value(),  # type: ignore[union-attr]
            },
        )

    @property
    def aux_ports(self) -> tuple[PortBinding, ...]:
        return ()

    @staticmethod
    def _require_complete(config: DeploymentConfig) -> None:
        for name in ("http_port", "username", "password"):
            if getattr(config, name) is None:
                raise ValidationError(f"{name} is required to launch NiFi.", field=name)


class HttpLauncher(Launcher):
    """Runs the unmodified upstream image."""

    destination = DeployDestination.LOCALHOST

    @property
    def aux_ports(self) -> tuple[PortBinding, ...]:
        return HTTP_AUX_PORTS

    def launch(self, config: DeploymentConfig) -> str:
        spec = self.container_spec(config)
        logger.info("launch.http", container=spec.name, image=spec.image, port=config.http_port)
        return self.containers.run_container(spec)


class HttpsLauncher(Launcher):
    """Builds the TLS image and runs it."""

    destination = DeployDestination.SERVER

    @property
    def aux_ports(self) -> tuple[PortBinding, ...]:
        return HTTPS_AUX_PORTS

    def render(self, config: DeploymentConfig) -> str:
        return generate_dockerfile(config)

    def launch(self, config: DeploymentConfig) -> str:
        check_certificate_files(config)
        content = self.render(config)
        if self.containers.dry_run:
            logger.info("dockerfile.rendered", path=str(config.dockerfile_path), lines=content.count("\n"))
        else:
            write_dockerfile(content, config.dockerfile_path)

        logger.info(
            "launch.https",
            image=config.names.image_tag,
            port=config.http_port,
            proxy_host=config.proxy_host,
            username=config.username,
        )

        try:
            self.containers.build_image(config.names.image_tag, config.work_dir, config.dockerfile_path)
        except ExternalToolError as exc:
            exc.with_context(step="build")
            raise ExternalToolError(
                "Failed to build Docker image.",
                returncode=exc.returncode,
                stderr=exc.stderr,
                context=exc.context,
                cause=exc,
            ) from exc

        spec = self.container_spec(config)
        try:
            return self.containers.run_container(spec)
        except ExternalToolError as exc:
            exc.with_context(step="run", container=spec.name)
            raise ExternalToolError(
                "Failed to run Docker container.",
                returncode=exc.returncode,
                stderr=exc.stderr,
                context=exc.context,
                cause=exc,
            ) from exc


def launcher_for(
    destination: DeployDestination,
    containers: ContainerManager,
    volumes: VolumeSet,
) -> Launcher:
    if destination is DeployDestination.SERVER:
        return HttpsLauncher(containers, volumes)
    return HttpLauncher(containers, volumes)
