"""Named Docker volumes backing a NiFi container.

NiFi keeps all of its state under ``/opt/nifi/nifi-current``. Each of the
repositories, the state directory, logs and configuration gets its own named
volume so that a container can be deleted and recreated (for example by the
reconciler) without losing flows or provenance.

    ┌──────────────────────────────┬─────────────────────────────────────────┐
    │ volume                        │ mount point                             │
    ├──────────────────────────────┼─────────────────────────────────────────┤
    │ {prefix}_database_repository  │ /opt/nifi/nifi-current/database_repository │
    │ {prefix}_flowfile_repository  │ /opt/nifi/nifi-current/flowfile_repository │
    │ {prefix}_content_repository   │ /opt/nifi/nifi-current/content_repository  │
    │ {prefix}_provenance_repository│ /opt/nifi/nifi-current/provenance_repository │
    │ {prefix}_state                │ /opt/nifi/nifi-current/state            │
    │ {prefix}_logs                 │ /opt/nifi/nifi-current/logs             │
    │ {prefix}_conf                 │ /opt/nifi/nifi-current/conf             │
    │ {certs_volume}                │ /opt/nifi/nifi-current/certs            │
    └──────────────────────────────┴─────────────────────────────────────────┘

The volume set is created once, unconditionally, before the destination is
known. Its lifecycle after that belongs to Docker.
"""

from __future__ import annotations

from dataclasses import dataclass

from nifi_deploy.core.logging import get_logger
from nifi_deploy.deploy.container import ContainerManager

logger = get_logger(__name__)

NIFI_HOME = "/opt/nifi/nifi-current"

REPOSITORY_DIRS = (
    "database_repository",
    "flowfile_repository",
    "content_repository",
    "provenance_repository",
    "state",
    "logs",
    "conf",
)


@dataclass(frozen=True)
class VolumeSpec:
    """A named volume and where it is mounted inside the container."""

    name: str
    mount_path: str

    def as_mount(self) -> str:
        """``docker run -v`` argument."""
        return f"{self.name}:{self.mount_path}"


@dataclass(frozen=True)
class VolumeSet:
    """The eight volumes of a NiFi deployment."""

    volumes: tuple[VolumeSpec, ...]

    @classmethod
    def for_prefix(cls, prefix: str = "nifi", certs_volume: str = "certs") -> VolumeSet:
        specs = [VolumeSpec(f"{prefix}_{d}", f"{NIFI_HOME}/{d}") for d in REPOSITORY_DIRS]
        specs.append(VolumeSpec(certs_volume, f"{NIFI_HOME}/certs"))
        return cls(tuple(specs))

    @property
    def names(self) -> list[str]:
        return [v.name for v in self.volumes]

    def __iter__(self):
        return iter(self.volumes)

    def __len__(self) -> int:
        return len(self.volumes)


class VolumeProvisioner:
    """Creates every volume of a ``VolumeSet``.

    ``docker volume create`` is idempotent for an existing volume with the
    same driver; any other failure aborts the run.
    """

    def __init__(self, containers: ContainerManager, volumes: VolumeSet) -> None:
        self.containers = containers
        self.volumes = volumes

    def create_volume(self, name: str) -> None:
        self.containers.create_volume(name)
        logger.info("volume.created", volume=name)

    def provision(self) -> list[str]:
        """Create all volumes in order; returns their names."""
        for volume in self.volumes:
            self.create_volume(volume.name)
        logger.info("volumes.ready", count=len(self.volumes))
        return self.volumes.names
