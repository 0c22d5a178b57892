"""Tests for the Site24x7 monitor provider."""

from unittest.mock import MagicMock

import pytest
from cachetools import TTLCache

from ingress_monitor.annotations import (
    ANNOTATION_SITE24X7_ACTIONS,
    ANNOTATION_SITE24X7_CHECK_FREQUENCY,
    ANNOTATION_SITE24X7_CUSTOM_HEADERS,
    ANNOTATION_SITE24X7_LOCATION_PROFILE_ID,
    ANNOTATION_SITE24X7_MONITOR_GROUP_IDS,
    ANNOTATION_SITE24X7_TIMEOUT,
    ANNOTATION_SITE24X7_USE_NAME_SERVER,
)
from ingress_monitor.config import Site24x7Config, Site24x7MonitorDefaults
from ingress_monitor.errors import InvalidAnnotationJSONError, MonitorNotFoundError, NoProfilesConfiguredError
from ingress_monitor.models import Monitor
from ingress_monitor.providers.site24x7.builder import FINALIZERS, MonitorBuilder
from ingress_monitor.providers.site24x7.client import Site24x7Client
from ingress_monitor.providers.site24x7.location import (
    ProfileIPProvider,
    StaticIPSource,
    TemplateIPSource,
)
from ingress_monitor.providers.site24x7.models import (
    Header,
    Location,
    LocationProfile,
    MonitorGroup,
    NotificationProfile,
    Site24x7Monitor,
    ThresholdProfile,
    UserGroup,
)
from ingress_monitor.providers.site24x7.provider import SOURCE_RANGE_CACHE_TTL, Site24x7Provider


@pytest.fixture
def mock_client():
    """Create a Site24x7 client mock with one candidate of every kind."""
    client = MagicMock(spec=Site24x7Client)
    client.list_location_profiles.return_value = [
        LocationProfile(profile_id="456", profile_name="Europe"),
        LocationProfile(profile_id="457", profile_name="US"),
    ]
    client.list_notification_profiles.return_value = [NotificationProfile(profile_id="789")]
    client.list_threshold_profiles.return_value = [ThresholdProfile(profile_id="012", type="URL")]
    client.list_monitor_groups.return_value = [MonitorGroup(group_id="345")]
    client.list_user_groups.return_value = [UserGroup(user_group_id="678")]
    client.list_monitors.return_value = []
    return client


@pytest.fixture
def monitor():
    return Monitor(name="kube-system-foo", url="http://foo.bar.baz")


class TestMonitorBuilder:
    """Tests for resolving Site24x7 monitors from monitor models."""

    def test_defaults_and_auto_discovery(self, mock_client, monitor):
        builder = MonitorBuilder(mock_client, Site24x7MonitorDefaults())

        result = builder.from_model(monitor)

        assert result.display_name == "kube-system-foo"
        assert result.website == "http://foo.bar.baz"
        assert result.type == "URL"
        assert result.check_frequency == "1"
        assert result.http_method == "G"
        assert result.timeout == 10
        assert result.use_name_server is True
        assert result.location_profile_id == "456"
        assert result.notification_profile_id == "789"
        assert result.threshold_profile_id == "012"
        assert result.monitor_groups == ["345"]
        assert result.user_group_ids == ["678"]

    def test_annotations_override_defaults(self, mock_client, monitor):
        defaults = Site24x7MonitorDefaults(
            check_frequency="5",
            timeout=20,
            custom_headers=[Header(name="Accept", value="*/*")],
        )
        monitor.annotations = {
            ANNOTATION_SITE24X7_CHECK_FREQUENCY: "15",
            ANNOTATION_SITE24X7_TIMEOUT: "30",
            ANNOTATION_SITE24X7_USE_NAME_SERVER: "false",
            ANNOTATION_SITE24X7_CUSTOM_HEADERS: '[{"name": "Cache-Control", "value": "no-cache"}]',
            ANNOTATION_SITE24X7_ACTIONS: '[{"action_id": "123", "alert_type": 1}]',
        }

        result = MonitorBuilder(mock_client, defaults).from_model(monitor)

        assert result.check_frequency == "15"
        assert result.timeout == 30
        assert result.use_name_server is False
        assert result.custom_headers == [Header(name="Cache-Control", value="no-cache")]
        assert [(a.action_id, a.alert_type) for a in result.action_ids] == [("123", 1)]

    def test_default_lists_are_copied(self, mock_client, monitor):
        defaults = Site24x7MonitorDefaults(custom_headers=[Header(name="Accept", value="*/*")])

        result = MonitorBuilder(mock_client, defaults).from_model(monitor)
        result.custom_headers[0].value = "text/html"

        assert defaults.custom_headers[0].value == "*/*"

    def test_explicit_ids_skip_discovery(self, mock_client, monitor):
        defaults = Site24x7MonitorDefaults(notification_profile_id="111", user_group_ids=["222"])
        monitor.annotations = {
            ANNOTATION_SITE24X7_LOCATION_PROFILE_ID: "333",
            ANNOTATION_SITE24X7_MONITOR_GROUP_IDS: "444,555",
        }

        result = MonitorBuilder(mock_client, defaults).from_model(monitor)

        assert result.location_profile_id == "333"
        assert result.notification_profile_id == "111"
        assert result.monitor_groups == ["444", "555"]
        assert result.user_group_ids == ["222"]
        mock_client.list_location_profiles.assert_not_called()
        mock_client.list_notification_profiles.assert_not_called()
        mock_client.list_monitor_groups.assert_not_called()
        mock_client.list_user_groups.assert_not_called()
        mock_client.list_threshold_profiles.assert_called_once()

    def test_auto_discovery_disabled(self, mock_client, monitor):
        defaults = Site24x7MonitorDefaults(auto_location_profile=False, auto_user_group=False)

        result = MonitorBuilder(mock_client, defaults).from_model(monitor)

        assert result.location_profile_id == ""
        assert result.user_group_ids == []
        mock_client.list_location_profiles.assert_not_called()

    def test_no_location_profiles(self, mock_client, monitor):
        mock_client.list_location_profiles.return_value = []

        with pytest.raises(NoProfilesConfiguredError, match="no location profiles configured"):
            MonitorBuilder(mock_client, Site24x7MonitorDefaults()).from_model(monitor)

    def test_no_user_groups(self, mock_client, monitor):
        mock_client.list_user_groups.return_value = []

        with pytest.raises(NoProfilesConfiguredError, match="no user groups configured"):
            MonitorBuilder(mock_client, Site24x7MonitorDefaults()).from_model(monitor)

    def test_invalid_actions_json(self, mock_client, monitor):
        monitor.annotations = {ANNOTATION_SITE24X7_ACTIONS: "{invalidjson"}

        with pytest.raises(InvalidAnnotationJSONError):
            MonitorBuilder(mock_client, Site24x7MonitorDefaults()).from_model(monitor)

    def test_custom_headers_must_be_a_list(self, mock_client, monitor):
        monitor.annotations = {ANNOTATION_SITE24X7_CUSTOM_HEADERS: '{"name": "Accept", "value": "*/*"}'}

        with pytest.raises(InvalidAnnotationJSONError):
            MonitorBuilder(mock_client, Site24x7MonitorDefaults()).from_model(monitor)

    def test_custom_finalizers(self, mock_client, monitor):
        calls = []

        def finalize(client, site24x7_monitor, defaults):
            calls.append(site24x7_monitor.display_name)

        MonitorBuilder(mock_client, Site24x7MonitorDefaults(), finalizers=[finalize]).from_model(monitor)

        assert calls == ["kube-system-foo"]
        mock_client.list_location_profiles.assert_not_called()

    def test_finalizer_order(self):
        assert [f.__name__ for f in FINALIZERS] == [
            "finalize_location_profile",
            "finalize_notification_profile",
            "finalize_threshold_profile",
            "finalize_monitor_group",
            "finalize_user_group",
        ]


class TestProfileIPProvider:
    """Tests for resolving location profiles to IPs."""

    def test_primary_before_secondary(self):
        ip_source = StaticIPSource({"1": ["1.1.1.1"], "2": ["2.2.2.2", "2.2.2.3"], "3": ["3.3.3.3"]})
        provider = ProfileIPProvider(ip_source, [])
        profile = LocationProfile(profile_id="456", primary_location="2", secondary_locations=["3", "1"])

        assert provider.get_location_ips(profile) == ["2.2.2.2", "2.2.2.3", "3.3.3.3", "1.1.1.1"]

    def test_locations_without_ips_are_skipped(self):
        provider = ProfileIPProvider(StaticIPSource({"2": ["2.2.2.2"]}), [])
        profile = LocationProfile(profile_id="456", primary_location="1", secondary_locations=["2", ""])

        assert provider.get_location_ips(profile) == ["2.2.2.2"]

    def test_template_ip_source(self):
        locations = [
            Location(location_id="1", display_name="Frankfurt", ip_address="1.1.1.1, 1.1.1.2"),
            Location(location_id="2", display_name="London"),
        ]
        provider = ProfileIPProvider(TemplateIPSource(), locations)
        profile = LocationProfile(profile_id="456", primary_location="1", secondary_locations=["2"])

        assert provider.get_location_ips(profile) == ["1.1.1.1", "1.1.1.2"]


class TestSite24x7Provider:
    """Tests for Site24x7Provider."""

    @pytest.fixture
    def config(self):
        return Site24x7Config(
            client_id="id",
            client_secret="secret",
            refresh_token="token",
            location_ips={"1": ["1.1.1.1"], "2": ["2.2.2.2"]},
        )

    @pytest.fixture
    def provider(self, mock_client, config):
        return Site24x7Provider(mock_client, config)

    def test_create(self, provider, mock_client, monitor):
        provider.create(monitor)

        mock_client.create_monitor.assert_called_once()
        created = mock_client.create_monitor.call_args[0][0]
        assert isinstance(created, Site24x7Monitor)
        assert created.display_name == "kube-system-foo"
        assert created.location_profile_id == "456"

    def test_create_fails_without_profiles(self, provider, mock_client, monitor):
        mock_client.list_location_profiles.return_value = []

        with pytest.raises(NoProfilesConfiguredError):
            provider.create(monitor)

        mock_client.create_monitor.assert_not_called()

    def test_get(self, provider, mock_client):
        mock_client.list_monitors.return_value = [
            Site24x7Monitor(monitor_id="1", display_name="other", website="http://other"),
            Site24x7Monitor(monitor_id="2", display_name="kube-system-foo", website="http://foo.bar.baz"),
        ]

        result = provider.get("kube-system-foo")

        assert result == Monitor(id="2", name="kube-system-foo", url="http://foo.bar.baz")

    def test_get_not_found(self, provider):
        with pytest.raises(MonitorNotFoundError):
            provider.get("kube-system-foo")

    def test_update(self, provider, mock_client, monitor):
        monitor.id = "2"

        provider.update(monitor)

        updated = mock_client.update_monitor.call_args[0][0]
        assert updated.monitor_id == "2"
        assert updated.website == "http://foo.bar.baz"

    def test_delete(self, provider, mock_client):
        mock_client.list_monitors.return_value = [
            Site24x7Monitor(monitor_id="2", display_name="kube-system-foo", website="http://foo.bar.baz"),
        ]

        provider.delete("kube-system-foo")

        mock_client.delete_monitor.assert_called_once_with("2")

    def test_delete_not_found(self, provider, mock_client):
        with pytest.raises(MonitorNotFoundError):
            provider.delete("kube-system-foo")

        mock_client.delete_monitor.assert_not_called()

    def test_get_ip_source_ranges(self, provider, mock_client, monitor):
        mock_client.get_location_profile.return_value = LocationProfile(
            profile_id="456", primary_location="1", secondary_locations=["2", "3"],
        )

        assert provider.get_ip_source_ranges(monitor) == ["1.1.1.1/32", "2.2.2.2/32"]
        mock_client.get_location_profile.assert_called_once_with("456")
        mock_client.get_location_template.assert_not_called()

    def test_get_ip_source_ranges_cached(self, provider, mock_client, monitor):
        mock_client.get_location_profile.return_value = LocationProfile(profile_id="456", primary_location="1")

        first = provider.get_ip_source_ranges(monitor)
        first.append("9.9.9.9/32")
        second = provider.get_ip_source_ranges(monitor)

        assert second == ["1.1.1.1/32"]
        mock_client.get_location_profile.assert_called_once()

    def test_get_ip_source_ranges_cache_expires(self, mock_client, config, monitor):
        now = [0.0]
        cache = TTLCache(maxsize=16, ttl=SOURCE_RANGE_CACHE_TTL, timer=lambda: now[0])
        provider = Site24x7Provider(mock_client, config, source_range_cache=cache)
        mock_client.get_location_profile.return_value = LocationProfile(profile_id="456", primary_location="1")

        provider.get_ip_source_ranges(monitor)
        now[0] = SOURCE_RANGE_CACHE_TTL - 1
        provider.get_ip_source_ranges(monitor)
        assert mock_client.get_location_profile.call_count == 1

        now[0] = SOURCE_RANGE_CACHE_TTL + 1
        provider.get_ip_source_ranges(monitor)
        assert mock_client.get_location_profile.call_count == 2

    def test_get_ip_source_ranges_from_location_template(self, mock_client, monitor):
        mock_client.get_location_template.return_value = [
            Location(location_id="1", ip_address="1.1.1.1"),
        ]
        mock_client.get_location_profile.return_value = LocationProfile(profile_id="456", primary_location="1")
        provider = Site24x7Provider(mock_client, Site24x7Config(client_id="id"))

        assert provider.get_ip_source_ranges(monitor) == ["1.1.1.1/32"]
        mock_client.get_location_template.assert_called_once()

    def test_from_config(self, config):
        provider = Site24x7Provider.from_config(config)

        assert isinstance(provider.client, Site24x7Client)
        assert provider.client.client_id == "id"
        assert provider.builder.defaults == config.monitor_defaults
