"""
nifi-deploy - Apache NiFi container deployment.

- nifi_deploy.core: errors, logging, secrets, settings
- nifi_deploy.deploy: volumes, reconciliation, launchers, workflow
- nifi_deploy.cli: ``nifi-deploy`` command line
"""

__version__ = "0.1.0"
