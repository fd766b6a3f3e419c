"""Existing-container reconciliation.

``docker run --name X`` fails if a container called X already exists, so
before launching the workflow looks for one. Deleting it is destructive
(``docker rm -f`` stops a running container), so removal needs an explicit
yes: an interactive answer of ``y``/``yes``, or ``--force`` in batch mode.
Anything else aborts the run with ``ContainerExistsError``.
"""

from __future__ import annotations

from nifi_deploy.core.errors import ContainerExistsError
from nifi_deploy.core.logging import get_logger
from nifi_deploy.deploy.container import ContainerManager
from nifi_deploy.deploy.inputs import InputSource

logger = get_logger(__name__)


class ContainerReconciler:
    def __init__(
        self,
        containers: ContainerManager,
        source: InputSource,
        force: bool = False,
    ) -> None:
        self.containers = containers
        self.source = source
        self.force = force

    def check_existing_container(self, name: str) -> bool:
        """Remove ``name`` if it exists and removal is confirmed.

        Returns True when a container was removed, False when none existed.

        Raises:
            ContainerExistsError: the container exists and removal was declined
        """
        if not self.containers.container_exists(name):
            return False

        logger.warning("container.exists", container=name)
        if not self.force:
            answer = self.source.confirm(
                f"Container {name} already exists. Do you want to delete it?"
            )
            if not answer:
                logger.error("container.delete_declined", container=name)
                raise ContainerExistsError(name).with_context(step="reconcile", container=name)

        self.containers.remove_container(name)
        return True

    def reconcile(self, names: list[str]) -> list[str]:
        """Check each name in turn; returns the names that were removed."""
        return [name for name in names if self.check_existing_container(name)]
