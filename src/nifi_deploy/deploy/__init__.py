"""NiFi container deployment.

Creates the NiFi volumes, reconciles an existing container, then launches
NiFi either from the upstream image (``localhost``) or from a locally built
image carrying TLS stores (``server``).

Architecture::

    ┌──────────────────────────────────────────────────────────────┐
    │                    DeploymentRunner                           │
    ├────────────┬─────────────┬──────────────┬────────────────────┤
    │  Volume    │  Container  │   Config     │   Launchers        │
    │  Provisioner│ Reconciler │   Collector  │   Http / Https     │
    ├────────────┴─────────────┴──────────────┴────────────────────┤
    │            ContainerManager (docker CLI subprocess)           │
    ├──────────────────────────────────────────────────────────────┤
    │   Input adapters │ Validators │ Dockerfile │ Result models    │
    └──────────────────────────────────────────────────────────────┘

Related Modules:
    - :mod:`nifi_deploy.deploy.config`: DeploymentConfig, ResourceNames, TlsConfig
    - :mod:`nifi_deploy.deploy.validation`: Input validators
    - :mod:`nifi_deploy.deploy.inputs`: Prompt / preset / secret input adapters
    - :mod:`nifi_deploy.deploy.collector`: Ordered, validated value collection
    - :mod:`nifi_deploy.deploy.volumes`: VolumeSet and VolumeProvisioner
    - :mod:`nifi_deploy.deploy.container`: Docker CLI wrapper
    - :mod:`nifi_deploy.deploy.reconciler`: Existing-container handling
    - :mod:`nifi_deploy.deploy.dockerfile`: TLS image Dockerfile
    - :mod:`nifi_deploy.deploy.launchers`: HTTP and HTTPS launchers
    - :mod:`nifi_deploy.deploy.workflow`: DeploymentRunner
    - :mod:`nifi_deploy.cli.deploy`: CLI commands
"""

from __future__ import annotations

from nifi_deploy.deploy.config import DeployDestination, DeploymentConfig, ResourceNames, TlsConfig
from nifi_deploy.deploy.results import DeploymentResult, OverallStatus, StepResult
from nifi_deploy.deploy.workflow import DeploymentRunner

__all__ = [
    "DeployDestination",
    "DeploymentConfig",
    "DeploymentResult",
    "DeploymentRunner",
    "OverallStatus",
    "ResourceNames",
    "StepResult",
    "TlsConfig",
]
