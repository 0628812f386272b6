"""Tests for configuration loading, environment overrides and validation."""
import json

import pytest

from scopekeeper.config import AppConfig, ConfigurationLoader, ConfigurationManager, validate_config
from scopekeeper.config.loader import expand_env_vars
from scopekeeper.domain.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host SCOPEKEEPER_* variables out of the tests."""
    import os
    for key in list(os.environ):
        if key.startswith("SCOPEKEEPER_"):
            monkeypatch.delenv(key)


@pytest.mark.unit
class TestConfigurationManager:

    def test_defaults_without_file(self):
        config = ConfigurationManager().app_config

        assert config.aws.region == "us-east-1"
        assert config.network.subnet_prefix_length == 24
        assert config.orchestrator.lookup_attempts == 3
        assert config.logging.level == "INFO"

    def test_yaml_file(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(
            "environment: staging\n"
            "aws:\n  region: eu-west-1\n"
            "dns:\n  hosted_zone_name: example.com\n"
            "cluster:\n  cluster_name: previews\n"
        )

        manager = ConfigurationManager(str(config_file))

        assert manager.app_config.environment == "staging"
        assert manager.get_aws_config().region == "eu-west-1"
        assert manager.get_dns_config().hosted_zone_name == "example.com"
        assert manager.get_cluster_config().cluster_name == "previews"

    def test_json_file_from_environment(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"orchestrator": {"lookup_attempts": 5}}))
        monkeypatch.setenv("SCOPEKEEPER_CONFIG_FILE", str(config_file))

        assert ConfigurationManager().get_orchestrator_config().lookup_attempts == 5

    def test_environment_overrides(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yml"
        config_file.write_text("aws:\n  region: eu-west-1\n")
        monkeypatch.setenv("SCOPEKEEPER_AWS__REGION", "ap-southeast-2")
        monkeypatch.setenv("SCOPEKEEPER_ORCHESTRATOR__LOOKUP_DELAY", "0.5")
        monkeypatch.setenv("SCOPEKEEPER_CLUSTER__ASSIGN_PUBLIC_IP", "false")
        monkeypatch.setenv("SCOPEKEEPER_ENVIRONMENT", "testing")

        config = ConfigurationManager(str(config_file)).app_config

        assert config.aws.region == "ap-southeast-2"
        assert config.orchestrator.lookup_delay == 0.5
        assert config.cluster.assign_public_ip is False
        assert config.environment == "testing"

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("SCOPEKEEPER_LOGGING__LEVEL", "WARNING")

        manager = ConfigurationManager(overrides={"logging": {"level": "debug"}})

        assert manager.get_logging_config().level == "DEBUG"

    def test_config_is_cached_until_reload(self, monkeypatch):
        manager = ConfigurationManager()
        first = manager.app_config

        monkeypatch.setenv("SCOPEKEEPER_AWS__REGION", "eu-central-1")

        assert manager.app_config is first
        assert manager.reload().aws.region == "eu-central-1"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigurationManager(str(tmp_path / "missing.yml")).app_config

    def test_unparseable_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{broken")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(config_file)).app_config

    @pytest.mark.parametrize("document", [
        {"environment": "qa"},
        {"network": {"subnet_prefix_length": 30}},
        {"orchestrator": {"lookup_attempts": 0}},
        {"logging": {"destination": "syslog"}},
        {"cluster": {"launch_type": "EXTERNAL"}},
        {"dns": {"record_ttl": -1}},
    ])
    def test_invalid_values(self, tmp_path, document):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(document))

        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(config_file)).app_config

    def test_production_requires_hosted_zone(self):
        with pytest.raises(ConfigurationError):
            ConfigurationManager(overrides={"environment": "production"}).app_config


@pytest.mark.unit
class TestConfigurationLoader:

    def test_expand_env_vars(self, monkeypatch):
        monkeypatch.setenv("ZONE", "example.com")

        assert expand_env_vars({"dns": {"hosted_zone_name": "${ZONE}"}, "list": ["$ZONE", 1]}) == {
            "dns": {"hosted_zone_name": "example.com"},
            "list": ["example.com", 1],
        }
        assert expand_env_vars("zone-${ZONE}.") == "zone-example.com."
        assert expand_env_vars("$UNSET_SCOPEKEEPER_VARIABLE") == "$UNSET_SCOPEKEEPER_VARIABLE"

    def test_overrides_ignore_other_variables(self):
        loader = ConfigurationLoader()

        result = loader.apply_environment_overrides(
            {"aws": {"region": "us-east-1"}},
            environ={"OTHER_AWS__REGION": "x", "SCOPEKEEPER_CONFIG_FILE": "c.yml",
                     "SCOPEKEEPER_NETWORK__SUBNET_PREFIX_LENGTH": "26"},
        )

        assert result == {"aws": {"region": "us-east-1"}, "network": {"subnet_prefix_length": 26}}

    def test_validate_config(self):
        assert isinstance(validate_config({"environment": "testing"}), AppConfig)
