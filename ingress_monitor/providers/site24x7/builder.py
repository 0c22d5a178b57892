"""Resolution of Site24x7 monitor configuration from monitor models."""

from typing import Callable, List, Optional

from ...annotations import (
    ANNOTATION_SITE24X7_ACTIONS,
    ANNOTATION_SITE24X7_AUTH_PASS,
    ANNOTATION_SITE24X7_AUTH_USER,
    ANNOTATION_SITE24X7_CHECK_FREQUENCY,
    ANNOTATION_SITE24X7_CUSTOM_HEADERS,
    ANNOTATION_SITE24X7_HTTP_METHOD,
    ANNOTATION_SITE24X7_LOCATION_PROFILE_ID,
    ANNOTATION_SITE24X7_MATCH_CASE,
    ANNOTATION_SITE24X7_MONITOR_GROUP_IDS,
    ANNOTATION_SITE24X7_NOTIFICATION_PROFILE_ID,
    ANNOTATION_SITE24X7_THRESHOLD_PROFILE_ID,
    ANNOTATION_SITE24X7_TIMEOUT,
    ANNOTATION_SITE24X7_USE_NAME_SERVER,
    ANNOTATION_SITE24X7_USER_AGENT,
    ANNOTATION_SITE24X7_USER_GROUP_IDS,
    Annotations,
)
from ...config import Site24x7MonitorDefaults
from ...errors import InvalidAnnotationJSONError, NoProfilesConfiguredError
from ...logging_config import get_logger
from ...models import Monitor
from .client import Site24x7Client
from .models import ActionRef, Header, Site24x7Monitor

logger = get_logger(__name__)

Finalizer = Callable[[Site24x7Client, Site24x7Monitor, Site24x7MonitorDefaults], None]


def finalize_location_profile(client: Site24x7Client, monitor: Site24x7Monitor, defaults: Site24x7MonitorDefaults) -> None:
    if monitor.location_profile_id or not defaults.auto_location_profile:
        return

    profiles = client.list_location_profiles()
    if not profiles:
        raise NoProfilesConfiguredError("location profiles")

    monitor.location_profile_id = profiles[0].profile_id
    logger.debug("Auto discovered location profile", monitor=monitor.display_name, profile_id=monitor.location_profile_id)


def finalize_notification_profile(client: Site24x7Client, monitor: Site24x7Monitor, defaults: Site24x7MonitorDefaults) -> None:
    if monitor.notification_profile_id or not defaults.auto_notification_profile:
        return

    profiles = client.list_notification_profiles()
    if not profiles:
        raise NoProfilesConfiguredError("notification profiles")

    monitor.notification_profile_id = profiles[0].profile_id
    logger.debug("Auto discovered notification profile", monitor=monitor.display_name, profile_id=monitor.notification_profile_id)


def finalize_threshold_profile(client: Site24x7Client, monitor: Site24x7Monitor, defaults: Site24x7MonitorDefaults) -> None:
    if monitor.threshold_profile_id or not defaults.auto_threshold_profile:
        return

    profiles = client.list_threshold_profiles()
    if not profiles:
        raise NoProfilesConfiguredError("threshold profiles")

    monitor.threshold_profile_id = profiles[0].profile_id
    logger.debug("Auto discovered threshold profile", monitor=monitor.display_name, profile_id=monitor.threshold_profile_id)


def finalize_monitor_group(client: Site24x7Client, monitor: Site24x7Monitor, defaults: Site24x7MonitorDefaults) -> None:
    if monitor.monitor_groups or not defaults.auto_monitor_group:
        return

    groups = client.list_monitor_groups()
    if not groups:
        raise NoProfilesConfiguredError("monitor groups")

    monitor.monitor_groups = [groups[0].group_id]
    logger.debug("Auto discovered monitor group", monitor=monitor.display_name, group_id=groups[0].group_id)


def finalize_user_group(client: Site24x7Client, monitor: Site24x7Monitor, defaults: Site24x7MonitorDefaults) -> None:
    if monitor.user_group_ids or not defaults.auto_user_group:
        return

    groups = client.list_user_groups()
    if not groups:
        raise NoProfilesConfiguredError("user groups")

    monitor.user_group_ids = [groups[0].user_group_id]
    logger.debug("Auto discovered user group", monitor=monitor.display_name, group_id=groups[0].user_group_id)


# Applied in order after direct field resolution.
FINALIZERS: List[Finalizer] = [
    finalize_location_profile,
    finalize_notification_profile,
    finalize_threshold_profile,
    finalize_monitor_group,
    finalize_user_group,
]


class MonitorBuilder:
    """Builds Site24x7 monitors from monitor models.

    Every field is taken from its annotation if present and from the monitor
    defaults otherwise. Afterwards the finalizers fill in profile and group
    IDs that are still unset by auto discovery, if enabled.
    """

    def __init__(self, client: Site24x7Client, defaults: Site24x7MonitorDefaults, finalizers: Optional[List[Finalizer]] = None):
        self.client = client
        self.defaults = defaults
        self.finalizers = list(FINALIZERS if finalizers is None else finalizers)

    def from_model(self, model: Monitor) -> Site24x7Monitor:
        """Resolve the Site24x7 monitor for a model.

        Raises:
            AnnotationError: if an annotation value is malformed
            NoProfilesConfiguredError: if auto discovery finds no candidates
        """
        anno = Annotations(model.annotations)
        defaults = self.defaults

        monitor = Site24x7Monitor(
            type="URL",
            monitor_id=model.id,
            display_name=model.name,
            website=model.url,
            check_frequency=anno.string_value(ANNOTATION_SITE24X7_CHECK_FREQUENCY, defaults.check_frequency),
            http_method=anno.string_value(ANNOTATION_SITE24X7_HTTP_METHOD, defaults.http_method),
            auth_user=anno.string_value(ANNOTATION_SITE24X7_AUTH_USER, defaults.auth_user),
            auth_pass=anno.string_value(ANNOTATION_SITE24X7_AUTH_PASS, defaults.auth_pass),
            match_case=anno.bool_value(ANNOTATION_SITE24X7_MATCH_CASE, defaults.match_case),
            user_agent=anno.string_value(ANNOTATION_SITE24X7_USER_AGENT, defaults.user_agent),
            timeout=anno.int_value(ANNOTATION_SITE24X7_TIMEOUT, defaults.timeout),
            use_name_server=anno.bool_value(ANNOTATION_SITE24X7_USE_NAME_SERVER, defaults.use_name_server),
            user_group_ids=anno.string_list_value(ANNOTATION_SITE24X7_USER_GROUP_IDS, defaults.user_group_ids),
            monitor_groups=anno.string_list_value(ANNOTATION_SITE24X7_MONITOR_GROUP_IDS, defaults.monitor_group_ids),
            location_profile_id=anno.string_value(ANNOTATION_SITE24X7_LOCATION_PROFILE_ID, defaults.location_profile_id),
            notification_profile_id=anno.string_value(
                ANNOTATION_SITE24X7_NOTIFICATION_PROFILE_ID, defaults.notification_profile_id
            ),
            threshold_profile_id=anno.string_value(ANNOTATION_SITE24X7_THRESHOLD_PROFILE_ID, defaults.threshold_profile_id),
        )

        monitor.custom_headers = _parse_list(anno, ANNOTATION_SITE24X7_CUSTOM_HEADERS, Header, defaults.custom_headers)
        monitor.action_ids = _parse_list(anno, ANNOTATION_SITE24X7_ACTIONS, ActionRef, defaults.actions)

        for finalize in self.finalizers:
            finalize(self.client, monitor, defaults)

        return monitor


def _parse_list(anno: Annotations, key: str, model_cls, default: list) -> list:
    """Parse a JSON list annotation into models, falling back to a copy of default."""
    raw = anno.json_value(key)
    if raw is None:
        return [item.model_copy() for item in default]

    if not isinstance(raw, list):
        raise InvalidAnnotationJSONError(key, anno[key], TypeError(f"expected a list, got {type(raw).__name__}"))

    try:
        return [model_cls.model_validate(item) for item in raw]
    except ValueError as e:
        raise InvalidAnnotationJSONError(key, anno[key], e) from e
