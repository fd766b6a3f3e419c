"""Allow ``python -m nifi_deploy``."""

from nifi_deploy.cli.app import app

app(prog_name="nifi-deploy")
