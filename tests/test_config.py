"""Tests for controller options and provider configuration."""

import os
from unittest.mock import patch

import pytest
import yaml

from ingress_monitor.config import (
    DEFAULT_NAME_TEMPLATE,
    PROVIDER_NULL,
    PROVIDER_SITE24X7,
    Options,
    ProviderConfig,
    Site24x7Config,
    Site24x7MonitorDefaults,
    read_provider_config,
)
from ingress_monitor.errors import ConfigError


class TestSite24x7MonitorDefaults:
    """Tests for the Site24x7 monitor defaults."""

    def test_defaults(self):
        defaults = Site24x7MonitorDefaults()

        assert defaults.auto_location_profile is True
        assert defaults.auto_notification_profile is True
        assert defaults.auto_threshold_profile is True
        assert defaults.auto_monitor_group is True
        assert defaults.auto_user_group is True
        assert defaults.check_frequency == "1"
        assert defaults.http_method == "G"
        assert defaults.timeout == 10
        assert defaults.use_name_server is True
        assert defaults.custom_headers == []
        assert defaults.actions == []

    def test_camel_case_keys(self):
        defaults = Site24x7MonitorDefaults.model_validate({
            "checkFrequency": "5",
            "autoUserGroup": False,
            "customHeaders": [{"name": "Accept", "value": "*/*"}],
            "actions": [{"actionID": "123", "alertType": 1}],
        })

        assert defaults.check_frequency == "5"
        assert defaults.auto_user_group is False
        assert defaults.custom_headers[0].name == "Accept"
        assert defaults.actions[0].action_id == "123"

    def test_timeout_range(self):
        with pytest.raises(ValueError):
            Site24x7MonitorDefaults(timeout=60)


class TestSite24x7Config:
    """Tests for the Site24x7 provider config."""

    def test_credentials_from_env(self):
        env = {
            "SITE24X7_CLIENT_ID": "id",
            "SITE24X7_CLIENT_SECRET": "secret",
            "SITE24X7_REFRESH_TOKEN": "token",
        }
        with patch.dict(os.environ, env):
            config = Site24x7Config()

        assert config.client_id == "id"
        assert config.client_secret == "secret"
        assert config.refresh_token == "token"

    def test_empty_credentials_fall_back_to_env(self):
        env = {
            "SITE24X7_CLIENT_ID": "envid",
            "SITE24X7_CLIENT_SECRET": "envsecret",
            "SITE24X7_REFRESH_TOKEN": "envtoken",
        }
        with patch.dict(os.environ, env):
            config = Site24x7Config.model_validate({"clientID": "", "clientSecret": None, "refreshToken": ""})

        assert config.client_id == "envid"
        assert config.client_secret == "envsecret"
        assert config.refresh_token == "envtoken"

    def test_explicit_credentials_win(self):
        with patch.dict(os.environ, {"SITE24X7_CLIENT_ID": "env-id"}):
            config = Site24x7Config(clientID="file-id")

        assert config.client_id == "file-id"


class TestOptions:
    """Tests for controller options."""

    def test_defaults(self):
        options = Options()

        assert options.provider_name == PROVIDER_SITE24X7
        assert options.name_template == DEFAULT_NAME_TEMPLATE
        assert options.no_delete is False
        assert options.creation_delay == 0.0
        options.validate_options()

    def test_null_provider(self):
        Options(provider_name=PROVIDER_NULL).validate_options()

    def test_unsupported_provider(self):
        with pytest.raises(ConfigError, match="unsupported provider 'pingdom'"):
            Options(provider_name="pingdom").validate_options()

    def test_negative_creation_delay(self):
        with pytest.raises(ConfigError):
            Options(creation_delay=-1).validate_options()


class TestReadProviderConfig:
    """Tests for loading provider config files."""

    def test_file_values_override_defaults(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text(yaml.dump({
            "site24x7": {
                "clientID": "id",
                "locationIPs": {"1": ["1.2.3.4"]},
                "monitorDefaults": {
                    "checkFrequency": "15",
                    "autoLocationProfile": False,
                    "locationProfileID": "456",
                },
            },
        }))

        config = read_provider_config(config_file)
        defaults = config.site24x7.monitor_defaults

        assert config.site24x7.client_id == "id"
        assert config.site24x7.location_ips == {"1": ["1.2.3.4"]}
        assert defaults.check_frequency == "15"
        assert defaults.auto_location_profile is False
        assert defaults.location_profile_id == "456"
        # not in the file
        assert defaults.http_method == "G"
        assert defaults.auto_threshold_profile is True

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text("")

        assert read_provider_config(config_file) == ProviderConfig()

    def test_not_a_mapping(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text("- foo\n- bar\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            read_provider_config(config_file)

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / "provider.yaml"
        config_file.write_text(yaml.dump({"site24x7": {"monitorDefaults": {"timeout": "never"}}}))

        with pytest.raises(ConfigError, match="invalid provider config"):
            read_provider_config(config_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            read_provider_config(tmp_path / "missing.yaml")
