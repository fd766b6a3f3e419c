"""Incremental, validated construction of a ``DeploymentConfig``.

``ConfigCollector`` owns the order in which values are gathered and the
validator applied to each. The runner calls it in steps so that the
certificate check of the server path happens after the destination is
known but before any port, host or credential is asked for.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import SecretStr

from nifi_deploy.core.errors import ValidationError
from nifi_deploy.core.logging import get_logger
from nifi_deploy.deploy.config import DEFAULT_HTTP_PORT, DeployDestination, DeploymentConfig
from nifi_deploy.deploy.inputs import InputSource
from nifi_deploy.deploy.validation import (
    proxy_host_validator,
    validate_destination,
    validate_local_host,
    validate_non_empty,
    validate_port,
)

logger = get_logger(__name__)

PROMPTS = {
    "destination": "Deploy Destination: (localhost) or (server)",
    "http_port": f"Enter the HTTPS port for NiFi (default is {DEFAULT_HTTP_PORT})",
    "local_host": "Enter the NiFi web proxy host (e.g., localhost or 0.0.0.0)",
    "proxy_host": "Enter the NiFi web proxy host (e.g., nifi.example.com:8443)",
    "username": "SINGLE_USER_CREDENTIALS_USERNAME",
    "password": "SINGLE_USER_CREDENTIALS_PASSWORD",
    "store_password": "Keystore/truststore password",
}


class ConfigCollector:
    """Fills the deploy values of a config from an input source.

    Parameters
    ----------
    config
        Config whose resource/TLS part is already built.
    source
        Where answers come from (usually a ``ChainedInput``).
    proxy_host_policy
        ``address`` or ``alnum`` - validator used for the server proxy host.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        source: InputSource,
        proxy_host_policy: str = "address",
    ) -> None:
        self.config = config
        self.source = source
        self.validate_proxy = proxy_host_validator(proxy_host_policy)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def collect_destination(self) -> DeployDestination:
        raw = self._ask_required("destination", PROMPTS["destination"])
        destination = validate_destination(raw)
        self.config.destination = destination
        logger.info("config.destination", destination=destination.value)
        return destination

    def collect_launch_values(self) -> DeploymentConfig:
        """Port, proxy host and credentials for the chosen destination."""
        if self.config.destination is None:
            raise ValidationError("Deploy destination must be chosen first.", field="destination")

        self.config.http_port = self.collect_port()

        if self.config.destination is DeployDestination.SERVER:
            self.config.proxy_host = self._collect("proxy_host", PROMPTS["proxy_host"], self.validate_proxy)
        else:
            self.config.proxy_host = self._collect("proxy_host", PROMPTS["local_host"], validate_local_host)

        self.config.username = self._collect("username", PROMPTS["username"], validate_non_empty)
        self.config.password = SecretStr(
            self._collect("password", PROMPTS["password"], validate_non_empty, secret=True)
        )

        if self.config.tls_enabled and self.config.tls.store_password is None:
            self.config.tls.store_password = SecretStr(
                self._collect("store_password", PROMPTS["store_password"], validate_non_empty, secret=True)
            )

        logger.info(
            "config.collected",
            destination=self.config.destination.value,
            http_port=self.config.http_port,
            proxy_host=self.config.proxy_host,
            username=self.config.username,
        )
        return self.config

    def collect_port(self) -> int:
        """Blank (or absent) port means the default."""
        raw = self.source.ask("http_port", PROMPTS["http_port"])
        if raw is None or raw == "":
            return DEFAULT_HTTP_PORT
        return int(validate_port(raw))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collect(
        self,
        field: str,
        prompt: str,
        validator: Callable[..., str],
        *,
        secret: bool = False,
    ) -> str:
        raw = self._ask_required(field, prompt, secret=secret)
        return validator(raw, field=field)

    def _ask_required(self, field: str, prompt: str, *, secret: bool = False) -> str:
        raw = self.source.ask(field, prompt, secret=secret)
        if raw is None:
            raise ValidationError(
                f"No value supplied for {field} and prompting is disabled.",
                field=field,
                constraint="required",
            )
        return raw
