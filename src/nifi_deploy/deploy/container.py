"""Docker CLI wrapper for the NiFi deployment.

Every interaction with the container runtime goes through
``ContainerManager._run_docker``: volume creation, the existing-container
query, forced removal, image build and container run. Commands are run
synchronously via ``subprocess`` with a timeout; a non-zero exit status is
turned into ``ExternalToolError`` carrying the command, exit code and stderr.

Key Concepts:
    ContainerManager: ``create_volume()``, ``container_exists()``,
        ``remove_container()``, ``build_image()``, ``run_container()``,
        ``get_container_status()``.
    ContainerSpec: What to pass to ``docker run`` (name, image, ports,
        volumes, environment).
    PortBinding: One ``-p [ip:]host:container`` publication.

Architecture Decisions:
    - subprocess, not docker-py: works with any runtime exposing a
      ``docker`` CLI (Docker Desktop, Colima, Podman's docker shim).
    - Dry-run: commands are recorded and logged, not executed, and every
      query reports "nothing there".
    - Secret environment values are masked in logged command lines.

Tags:
    container, docker, subprocess, volume, build, nifi-deploy
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from nifi_deploy.core.errors import DockerNotFoundError, ExternalToolError
from nifi_deploy.core.logging import get_logger

logger = get_logger(__name__)

_SECRET_ENV_MARKERS = ("PASSWORD", "SECRET", "TOKEN")


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortBinding:
    """A published port; ``host_ip`` restricts the host interface."""

    host_port: int
    container_port: int
    host_ip: str | None = None

    def as_arg(self) -> str:
        if self.host_ip:
            return f"{self.host_ip}:{self.host_port}:{self.container_port}"
        return f"{self.host_port}:{self.container_port}"


@dataclass
class ContainerSpec:
    """Arguments for a detached ``docker run``."""

    name: str
    image: str
    ports: list[PortBinding] = field(default_factory=list)
    mounts: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    detach: bool = True

    def to_args(self) -> list[str]:
        args = ["run", "--name", self.name]
        for port in self.ports:
            args.extend(["-p", port.as_arg()])
        if self.detach:
            args.append("-d")
        for mount in self.mounts:
            args.extend(["-v", mount])
        for key, value in self.env.items():
            args.extend(["-e", f"{key}={value}"])
        args.append(self.image)
        return args


def redact_command(args: list[str]) -> str:
    """Render a command line with secret ``KEY=value`` pairs masked."""
    rendered = []
    for arg in args:
        key, sep, _ = arg.partition("=")
        if sep and any(marker in key.upper() for marker in _SECRET_ENV_MARKERS):
            rendered.append(f"{key}=**********")
        else:
            rendered.append(arg)
    return " ".join(rendered)


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class ContainerManager:
    """Runs docker CLI commands for the deployment workflow.

    Parameters
    ----------
    timeout
        Timeout in seconds for ordinary docker commands.
    build_timeout
        Timeout in seconds for ``docker build``.
    dry_run
        Record and log commands without executing them.

    Example::

        mgr = ContainerManager()
        mgr.create_volume("nifi_state")
        if mgr.container_exists("nifi"):
            mgr.remove_container("nifi")
    """

    def __init__(
        self,
        timeout: int = 120,
        build_timeout: int = 900,
        dry_run: bool = False,
    ) -> None:
        self.timeout = timeout
        self.build_timeout = build_timeout
        self.dry_run = dry_run
        self.history: list[list[str]] = []
        self._docker_cmd = "docker" if dry_run else self._find_docker()

    # ------------------------------------------------------------------
    # Docker CLI discovery
    # ------------------------------------------------------------------

    @staticmethod
    def _find_docker() -> str:
        """Find the docker CLI binary."""
        docker = shutil.which("docker")
        if docker is None:
            raise DockerNotFoundError(
                "Docker CLI not found on PATH. Install Docker or add it to PATH.\n"
                "  - Linux:   https://docs.docker.com/engine/install/\n"
                "  - macOS:   https://docs.docker.com/desktop/install/mac-install/"
            )
        return docker

    # ------------------------------------------------------------------
    # Volumes
    # ------------------------------------------------------------------

    def create_volume(self, name: str) -> None:
        """``docker volume create``; raises on failure."""
        try:
            self._run_docker(["volume", "create", name])
        except ExternalToolError as exc:
            exc.with_context(step="volumes", volume=name)
            raise

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def list_container_names(self) -> list[str]:
        """Names of all containers, running or not."""
        result = self._run_docker(["ps", "-a", "--format", "{{.Names}}"])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def container_exists(self, name: str) -> bool:
        """Exact-name match against ``docker ps -a``."""
        return name in self.list_container_names()

    def remove_container(self, name: str) -> None:
        """Force-remove a container, stopping it first if running."""
        self._run_docker(["rm", "-f", name])
        logger.info("container.removed", container=name)

    def run_container(self, spec: ContainerSpec) -> str:
        """Start a container; returns its short ID."""
        result = self._run_docker(spec.to_args())
        container_id = result.stdout.strip()[:12]
        logger.info(
            "container.started",
            container=spec.name,
            image=spec.image,
            container_id=container_id or None,
            ports=[p.as_arg() for p in spec.ports],
        )
        return container_id

    def get_container_status(self, name: str) -> str:
        """Container state (running, exited, ...) or ``not_found``."""
        result = self._run_docker(
            ["inspect", "--format", "{{.State.Status}}", name],
            check=False,
        )
        status = result.stdout.strip()
        return status if result.returncode == 0 and status else "not_found"

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def build_image(self, tag: str, context_dir: Path, dockerfile: Path | None = None) -> None:
        """``docker build -t <tag> [-f dockerfile] <context_dir>``."""
        args = ["build", "-t", tag]
        if dockerfile is not None:
            args.extend(["-f", str(dockerfile)])
        args.append(str(context_dir))
        self._run_docker(args, timeout=self.build_timeout)
        logger.info("image.built", image=tag, context=str(context_dir))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _run_docker(
        self,
        args: list[str],
        check: bool = True,
        timeout: int | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a docker CLI command."""
        cmd = [self._docker_cmd, *args]
        display = redact_command(["docker", *args])
        self.history.append(cmd)

        if self.dry_run:
            logger.info("docker.dry_run", cmd=display)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        timeout = timeout or self.timeout
        logger.debug("docker.exec", cmd=display)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExternalToolError(
                f"Docker command timed out after {timeout}s: {display}",
                cause=exc,
            ).with_context(command=display) from exc
        except OSError as exc:
            raise ExternalToolError(
                f"Could not execute docker: {exc}",
                cause=exc,
            ).with_context(command=display) from exc

        if check and result.returncode != 0:
            raise ExternalToolError(
                f"Docker command failed (exit {result.returncode}): {display}",
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            ).with_context(command=display)
        return result
