"""
Condition Configuration Schema

Declares the user-configurable fields of the condition, the host's default
condition fields, and turns a raw parameter map into validated parameters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from conditional_count.app.config import Settings, get_settings
from conditional_count.core.alerts.models import AlertConditionParameters, ThresholdType
from conditional_count.core.exceptions import ConfigurationError, ErrorCode, MissingParameterError


# Parameter keys as stored by the host
QUERY = "query"
TIME = "time"
THRESHOLD_TYPE = "threshold_type"
THRESHOLD = "threshold"
GRACE = "grace"
BACKLOG = "backlog"
REPEAT_NOTIFICATIONS = "repeat_notifications"

# Model attribute -> host parameter key, where they differ
_PARAMETER_KEYS = {"window_minutes": TIME}


# ============================================
# Field Descriptors
# ============================================

@dataclass
class ConfigurationField:
    """A single configurable field as rendered by the host UI."""
    name: str
    human_name: str
    default_value: Any
    description: str
    optional: bool = False
    field_type: str = field(default="text", init=False)

    def additional_info(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "human_name": self.human_name,
            "type": self.field_type,
            "default_value": self.default_value,
            "description": self.description,
            "is_optional": self.optional,
            "additional_info": self.additional_info(),
        }


@dataclass
class TextField(ConfigurationField):
    field_type: str = field(default="text", init=False)


@dataclass
class NumberField(ConfigurationField):
    field_type: str = field(default="number", init=False)


@dataclass
class BooleanField(ConfigurationField):
    field_type: str = field(default="boolean", init=False)


@dataclass
class DropdownField(ConfigurationField):
    values: Dict[str, str] = field(default_factory=dict)
    field_type: str = field(default="dropdown", init=False)

    def additional_info(self) -> Dict[str, Any]:
        return {"values": dict(self.values)}


class ConfigurationRequest:
    """Ordered collection of configuration fields."""

    def __init__(self, fields: Optional[List[ConfigurationField]] = None):
        self._fields: Dict[str, ConfigurationField] = {}
        self.add_fields(fields or [])

    def add_field(self, config_field: ConfigurationField) -> None:
        self._fields[config_field.name] = config_field

    def add_fields(self, fields: List[ConfigurationField]) -> None:
        for config_field in fields:
            self.add_field(config_field)

    def get_field(self, name: str) -> Optional[ConfigurationField]:
        return self._fields.get(name)

    @property
    def fields(self) -> List[ConfigurationField]:
        return list(self._fields.values())

    def as_list(self) -> List[Dict[str, Any]]:
        return [f.to_dict() for f in self._fields.values()]

    def check(self, parameters: Mapping[str, Any]) -> None:
        """
        Verify that every required field is present and non-blank.

        Raises:
            MissingParameterError: a required field is absent
        """
        for config_field in self._fields.values():
            if config_field.optional:
                continue
            value = parameters.get(config_field.name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingParameterError(config_field.name)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: str) -> bool:
        return name in self._fields


@dataclass(frozen=True)
class Descriptor:
    """Plugin metadata shown by the host."""
    name: str
    link: str
    description: str


PLUGIN_LINK = "https://github.com/alcampos/graylog-plugin-alert-conditional-count"

CONDITION_DESCRIPTOR = Descriptor(
    name="Conditional Message Count Alert Condition",
    link=PLUGIN_LINK,
    description=(
        "This condition is triggered when the number of messages matching a search "
        "query is higher or lower than a defined threshold in a given time range."
    ),
)


def get_default_configuration_fields() -> List[ConfigurationField]:
    """Fields every alert condition carries, owned by the host."""
    return [
        NumberField(
            GRACE, "Grace Period", 0,
            "Number of minutes to wait after an alert is resolved, to trigger another alert",
            optional=True,
        ),
        NumberField(
            BACKLOG, "Message Backlog", 0,
            "The number of messages to be included in alert notifications",
            optional=True,
        ),
        BooleanField(
            REPEAT_NOTIFICATIONS, "Repeat notifications", False,
            "Check this box to send notifications every time the alert condition is evaluated and satisfied",
            optional=True,
        ),
    ]


class ConditionalCountConfig:
    """Requested configuration of the conditional count condition."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def get_requested_configuration(self) -> ConfigurationRequest:
        request = ConfigurationRequest([
            TextField(QUERY, "Search Query", "", "Query string the messages must match"),
            NumberField(
                TIME, "Time Range", self.settings.default_window_minutes,
                "Evaluate the condition for all messages received in the given number of minutes",
            ),
            DropdownField(
                THRESHOLD_TYPE, "Threshold Type", ThresholdType.MORE.value,
                "Select condition to trigger alert: when there are more or less messages than the threshold",
                values={t.value: t.description for t in ThresholdType},
            ),
            NumberField(
                THRESHOLD, "Threshold", self.settings.default_threshold,
                "Value which triggers an alert if crossed",
            ),
        ])
        request.add_fields(get_default_configuration_fields())
        return request


def describe(settings: Optional[Settings] = None) -> List[Dict[str, Any]]:
    """Field descriptors for the condition, in display order."""
    return ConditionalCountConfig(settings).get_requested_configuration().as_list()


# ============================================
# Parameter Parsing
# ============================================

def get_number(parameters: Mapping[str, Any], key: str, default: int) -> int:
    """
    Read an integer parameter. Missing values take the default; numbers
    are truncated; numeric strings are accepted.

    Raises:
        ConfigurationError: value present but not a finite number
    """
    value = parameters.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigurationError(
            f"Parameter '{key}' must be a number, got {value!r}",
            context={"field": key}
        )
    try:
        if isinstance(value, (int, float)):
            return int(value)
        return int(float(str(value)))
    except (ValueError, OverflowError):
        raise ConfigurationError(
            f"Parameter '{key}' must be a number, got {value!r}",
            context={"field": key}
        ) from None


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0", ""}


def get_boolean(parameters: Mapping[str, Any], key: str, default: bool) -> bool:
    """
    Read a boolean parameter. Accepts booleans, 0/1 and the usual string
    spellings (true/false, yes/no, on/off).

    Raises:
        ConfigurationError: value present but not a boolean
    """
    value = parameters.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ConfigurationError(
        f"Parameter '{key}' must be a boolean, got {value!r}",
        context={"field": key}
    )


def parse_parameters(
    parameters: Mapping[str, Any],
    stream_id: str,
    settings: Optional[Settings] = None
) -> Tuple[AlertConditionParameters, Dict[str, Any]]:
    """
    Validate a raw parameter map.

    Returns:
        Tuple of (validated parameters, parameter map to persist). The map
        equals the input unless the threshold type was not canonical, in
        which case it carries the canonical value.

    Raises:
        ConfigurationError: any parameter is missing or invalid
    """
    settings = settings or get_settings()
    ConditionalCountConfig(settings).get_requested_configuration().check(
        {TIME: 0, THRESHOLD: 0, **parameters}
    )

    raw_threshold_type = parameters[THRESHOLD_TYPE]
    threshold_type = ThresholdType.parse(raw_threshold_type)

    persisted = dict(parameters)
    if raw_threshold_type != threshold_type.value:
        persisted[THRESHOLD_TYPE] = threshold_type.value

    try:
        params = AlertConditionParameters(
            query=parameters[QUERY],
            window_minutes=get_number(parameters, TIME, settings.default_window_minutes),
            threshold_type=threshold_type,
            threshold=get_number(parameters, THRESHOLD, settings.default_threshold),
            stream_id=stream_id,
            backlog=get_number(parameters, BACKLOG, 0),
            grace=get_number(parameters, GRACE, 0),
            repeat_notifications=get_boolean(parameters, REPEAT_NOTIFICATIONS, False),
        )
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        location = _PARAMETER_KEYS.get(location, location)
        raise ConfigurationError(
            f"Invalid parameter '{location}': {first['msg']}",
            error_code=ErrorCode.INVALID_PARAMETER,
            context={"field": location},
            original_error=e
        ) from e

    return params, persisted
