"""Unit tests for nifi_deploy.deploy.config.

Config models, resource naming, settings/config-file layering and the YAML
loader.
"""

from __future__ import annotations

from pathlib import Path

import pytest


# ===========================================================================
# Models
# ===========================================================================


class TestResourceNames:
    def test_defaults(self):
        from nifi_deploy.deploy.config import DeployDestination, ResourceNames

        names = ResourceNames()
        assert names.container_for(DeployDestination.LOCALHOST) == "nifi"
        assert names.container_for(DeployDestination.SERVER) == "nifi-v0.1"
        assert names.image_for(DeployDestination.LOCALHOST) == "apache/nifi:latest"
        assert names.image_for(DeployDestination.SERVER) == "nifi"

    def test_containers_deduplicated(self):
        from nifi_deploy.deploy.config import ResourceNames

        assert ResourceNames().containers == ["nifi", "nifi-v0.1"]
        assert ResourceNames(https_container="nifi").containers == ["nifi"]


class TestTlsConfig:
    def test_defaults(self):
        from nifi_deploy.deploy.config import TlsConfig

        tls = TlsConfig()
        assert tls.store_files == ["truststore.pkcs12", "keystore.pkcs12"]
        assert tls.store_type == "PKCS12"
        assert tls.store_password is None
        assert tls.image_path("keystore.pkcs12") == "/opt/certs/keystore.pkcs12"

    def test_image_path_trailing_slash(self):
        from nifi_deploy.deploy.config import TlsConfig

        assert TlsConfig(cert_dir="/certs/").image_path("a.p12") == "/certs/a.p12"


class TestDeploymentConfig:
    def test_defaults(self):
        from nifi_deploy.deploy.config import DeploymentConfig

        config = DeploymentConfig()
        assert config.destination is None
        assert config.http_port is None
        assert config.interactive is True
        assert config.force is False
        assert config.run_id  # auto-generated
        assert len(config.run_id) == 12
        assert config.container_name is None
        assert config.tls_enabled is False

    def test_unique_run_ids(self):
        from nifi_deploy.deploy.config import DeploymentConfig

        assert DeploymentConfig().run_id != DeploymentConfig().run_id

    def test_server_properties(self, tmp_path):
        from nifi_deploy.deploy.config import DeploymentConfig

        config = DeploymentConfig(destination="server", password="pw", work_dir=tmp_path)
        assert config.tls_enabled is True
        assert config.container_name == "nifi-v0.1"
        assert config.dockerfile_path == tmp_path / "Dockerfile"
        assert "pw" not in repr(config)


# ===========================================================================
# Layering
# ===========================================================================


class TestFromSources:
    def test_settings_layer(self, tmp_path):
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        settings = NifiDeploySettings(work_dir=tmp_path, https_container="nifi-tls", store_password="sp")
        config = DeploymentConfig.from_sources(settings)
        assert config.work_dir == tmp_path
        assert config.names.https_container == "nifi-tls"
        assert config.tls.store_password.get_secret_value() == "sp"

    def test_file_overrides_settings(self, tmp_path):
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        settings = NifiDeploySettings(image_tag="from-env")
        file_data = {
            "names": {"image_tag": "from-file"},
            "tls": {"keystore": "ks.p12"},
            "work_dir": str(tmp_path),
        }
        config = DeploymentConfig.from_sources(settings, file_data)
        assert config.names.image_tag == "from-file"
        assert config.tls.keystore == "ks.p12"
        assert config.work_dir == tmp_path

    def test_overrides_win_and_none_ignored(self, tmp_path):
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        settings = NifiDeploySettings(work_dir=tmp_path)
        config = DeploymentConfig.from_sources(settings, {}, work_dir=None, force=True, dry_run=True)
        assert config.work_dir == tmp_path
        assert config.force is True
        assert config.dry_run is True

    def test_deploy_values_not_taken_from_settings(self):
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        config = DeploymentConfig.from_sources(NifiDeploySettings(destination="server", username="admin"))
        assert config.destination is None
        assert config.username is None

    def test_invalid_section_raises_config_error(self):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        with pytest.raises(ConfigError):
            DeploymentConfig.from_sources(NifiDeploySettings(), {"names": {"image_tag": ["not", "a", "str"]}})

    @pytest.mark.parametrize(
        "file_data",
        [{"names": {"https_containr": "nifi-staging"}}, {"tls": {"keystor": "staging.pkcs12"}}],
    )
    def test_unknown_section_keys_rejected(self, file_data):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.core.settings import NifiDeploySettings
        from nifi_deploy.deploy.config import DeploymentConfig

        with pytest.raises(ConfigError, match="Extra inputs are not permitted"):
            DeploymentConfig.from_sources(NifiDeploySettings(), file_data)


# ===========================================================================
# YAML loader
# ===========================================================================


class TestLoadConfigFile:
    def test_reads_mapping(self, tmp_path: Path):
        from nifi_deploy.deploy.config import load_config_file

        path = tmp_path / "deploy.yaml"
        path.write_text(
            "destination: server\n"
            "http_port: 9443\n"
            "names:\n"
            "  https_container: nifi-staging\n"
        )
        data = load_config_file(path)
        assert data["destination"] == "server"
        assert data["http_port"] == 9443
        assert data["names"] == {"https_container": "nifi-staging"}

    def test_empty_file(self, tmp_path: Path):
        from nifi_deploy.deploy.config import load_config_file

        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path: Path):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.deploy.config import load_config_file

        with pytest.raises(ConfigError, match="Cannot read"):
            load_config_file(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.deploy.config import load_config_file

        path = tmp_path / "bad.yaml"
        path.write_text("destination: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config_file(path)

    def test_non_mapping(self, tmp_path: Path):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.deploy.config import load_config_file

        path = tmp_path / "list.yaml"
        path.write_text("- server\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_unknown_keys(self, tmp_path: Path):
        from nifi_deploy.core.errors import ConfigError
        from nifi_deploy.deploy.config import load_config_file

        path = tmp_path / "typo.yaml"
        path.write_text("destinaton: server\n")
        with pytest.raises(ConfigError, match="destinaton"):
            load_config_file(path)
