"""Deployment workflow orchestration.

``DeploymentRunner`` runs the whole deployment as a strict sequence of
steps and stops at the first failure:

    volumes       create the eight named volumes (always)
    reconcile     delete-or-abort for existing containers with our names
    destination   localhost | server
    certificates  (server only) both PKCS12 stores present
    collect       port, proxy host, credentials (+ store password)
    launch        HttpLauncher | HttpsLauncher

Nothing is rolled back on failure: volumes and images already created
stay. Each step is recorded in the returned ``DeploymentResult``; a failed
run carries ``error``/``error_type`` and ``overall_status == FAILED``.

Example::

    config = DeploymentConfig.from_sources(get_settings())
    runner = DeploymentRunner(config, ChainedInput([PromptInput()]))
    result = runner.run()
    if result.error:
        ...

Tags:
    workflow, orchestration, deployment, runner, nifi-deploy
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from nifi_deploy.core.errors import NifiDeployError
from nifi_deploy.core.logging import bind_context, clear_context, get_logger
from nifi_deploy.deploy.collector import ConfigCollector
from nifi_deploy.deploy.config import DeployDestination, DeploymentConfig
from nifi_deploy.deploy.container import ContainerManager
from nifi_deploy.deploy.inputs import InputSource
from nifi_deploy.deploy.launchers import check_certificate_files, launcher_for
from nifi_deploy.deploy.reconciler import ContainerReconciler
from nifi_deploy.deploy.results import DeploymentResult, OverallStatus, StepResult
from nifi_deploy.deploy.volumes import VolumeProvisioner, VolumeSet

logger = get_logger(__name__)


class DeploymentRunner:
    """Orchestrates one NiFi deployment.

    Parameters
    ----------
    config
        Config with its resource/TLS part built; deploy values may be empty.
    source
        Input adapter chain answering the collector and the reconciler.
    containers
        Docker wrapper (a dry-run one is created from ``config.dry_run``
        when omitted).
    proxy_host_policy
        Server proxy host validator: ``address`` or ``alnum``.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        source: InputSource,
        containers: ContainerManager | None = None,
        proxy_host_policy: str = "address",
    ) -> None:
        self.config = config
        self.source = source
        self.containers = containers or ContainerManager(dry_run=config.dry_run)
        self.volumes = VolumeSet.for_prefix(config.names.volume_prefix, config.names.certs_volume)
        self.collector = ConfigCollector(config, source, proxy_host_policy)
        self.reconciler = ContainerReconciler(self.containers, source, force=config.force)

    def run(self) -> DeploymentResult:
        """Execute the deployment; errors are recorded, not raised."""
        result = DeploymentResult(run_id=self.config.run_id, dry_run=self.config.dry_run)
        bind_context(run_id=self.config.run_id)
        logger.info("deploy.started", dry_run=self.config.dry_run)

        try:
            self._execute(result)
        except NifiDeployError as exc:
            exc.with_context(run_id=self.config.run_id)
            result.error = exc.message
            result.error_type = type(exc).__name__
            logger.error("deploy.failed", **exc.to_dict())

        result.mark_complete()
        logger.info("deploy.finished", status=result.overall_status.value, summary=result.summary)
        clear_context()
        return result

    def _execute(self, result: DeploymentResult) -> None:
        with self._step(result, "volumes") as step:
            step.detail["volumes"] = VolumeProvisioner(self.containers, self.volumes).provision()

        with self._step(result, "reconcile") as step:
            step.detail["removed"] = self.reconciler.reconcile(self.config.names.containers)

        with self._step(result, "destination") as step:
            destination = self.collector.collect_destination()
            step.detail["destination"] = destination.value
        result.destination = destination.value

        if destination is DeployDestination.SERVER:
            with self._step(result, "certificates") as step:
                step.detail["files"] = [p.name for p in check_certificate_files(self.config)]

        with self._step(result, "collect") as step:
            self.collector.collect_launch_values()
            step.detail.update(http_port=self.config.http_port, proxy_host=self.config.proxy_host)

        launcher = launcher_for(destination, self.containers, self.volumes)
        result.container_name = self.config.names.container_for(destination)
        result.image = self.config.names.image_for(destination)
        with self._step(result, "launch") as step:
            result.container_id = launcher.launch(self.config) or None
            step.detail["container"] = result.container_name

    @contextmanager
    def _step(self, result: DeploymentResult, name: str) -> Iterator[StepResult]:
        step = StepResult(name=name, status=OverallStatus.RUNNING)
        result.steps.append(step)
        started = time.monotonic()
        try:
            yield step
        except NifiDeployError as exc:
            step.status = OverallStatus.FAILED
            step.error = exc.message
            if exc.context.step is None:
                exc.with_context(step=name)
            raise
        finally:
            step.duration_seconds = time.monotonic() - started
        step.status = OverallStatus.PASSED
