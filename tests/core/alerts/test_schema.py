"""
Configuration Schema Tests

Tests cover:
- Requested configuration fields, defaults and dropdown values
- Host default fields (grace, backlog, repeat notifications)
- Parameter parsing and threshold type normalization
- Configuration errors for missing and invalid parameters
"""

import pytest

from conditional_count.core.alerts.models import ThresholdType
from conditional_count.core.alerts.schema import (
    CONDITION_DESCRIPTOR,
    ConditionalCountConfig,
    ConfigurationRequest,
    NumberField,
    TextField,
    describe,
    get_boolean,
    get_number,
    parse_parameters,
)
from conditional_count.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    InvalidThresholdTypeError,
    MissingParameterError,
)


class TestRequestedConfiguration:

    def test_condition_fields(self, settings):
        fields = {f["name"]: f for f in describe(settings)}

        assert list(fields)[:4] == ["query", "time", "threshold_type", "threshold"]
        for name in ("query", "time", "threshold_type", "threshold"):
            assert fields[name]["is_optional"] is False

        assert fields["query"]["type"] == "text"
        assert fields["time"]["type"] == "number"
        assert fields["time"]["default_value"] == 5
        assert fields["threshold_type"]["type"] == "dropdown"
        assert fields["threshold_type"]["default_value"] == "MORE"
        assert fields["threshold_type"]["additional_info"]["values"] == {
            "MORE": "more than",
            "LESS": "less than",
        }
        assert fields["threshold"]["default_value"] == 0

    def test_default_condition_fields(self, settings):
        fields = {f["name"]: f for f in describe(settings)}

        assert fields["grace"]["is_optional"] is True
        assert fields["backlog"]["is_optional"] is True
        assert fields["repeat_notifications"]["type"] == "boolean"
        assert len(fields) == 7

    def test_defaults_follow_settings(self, settings):
        custom = settings.model_copy(update={"default_window_minutes": 15, "default_threshold": 3})
        request = ConditionalCountConfig(custom).get_requested_configuration()

        assert request.get_field("time").default_value == 15
        assert request.get_field("threshold").default_value == 3

    def test_descriptor(self):
        assert CONDITION_DESCRIPTOR.name == "Conditional Message Count Alert Condition"
        assert CONDITION_DESCRIPTOR.link.startswith("https://")


class TestConfigurationRequestCheck:

    def test_required_fields_must_be_present(self):
        request = ConfigurationRequest([
            TextField("query", "Query", "", "q"),
            NumberField("limit", "Limit", 1, "l", optional=True),
        ])

        request.check({"query": "x"})
        with pytest.raises(MissingParameterError) as exc_info:
            request.check({"limit": 3})

        assert exc_info.value.context["field"] == "query"
        assert exc_info.value.error_code == ErrorCode.MISSING_PARAMETER

    def test_blank_text_counts_as_missing(self):
        request = ConfigurationRequest([TextField("query", "Query", "", "q")])

        with pytest.raises(MissingParameterError):
            request.check({"query": "   "})

    def test_membership_and_length(self):
        request = ConfigurationRequest([TextField("query", "Query", "", "q")])

        assert "query" in request
        assert len(request) == 1
        assert ConfigurationRequest().as_list() == []


class TestParseParameters:

    def test_parses_full_parameter_map(self, base_parameters, stream_id, settings):
        params, persisted = parse_parameters(base_parameters, stream_id, settings)

        assert params.query == "error"
        assert params.window_minutes == 5
        assert params.threshold_type == ThresholdType.MORE
        assert params.threshold == 10
        assert params.grace == 2
        assert params.backlog == 0
        assert params.stream_id == stream_id
        assert persisted == base_parameters

    @pytest.mark.parametrize("raw,canonical", [("more", "MORE"), ("Less", "LESS"), ("LESS", "LESS")])
    def test_threshold_type_is_canonicalized(self, base_parameters, stream_id, settings, raw, canonical):
        params, persisted = parse_parameters({**base_parameters, "threshold_type": raw}, stream_id, settings)

        assert params.threshold_type.value == canonical
        assert persisted["threshold_type"] == canonical

    def test_missing_numbers_take_defaults(self, stream_id, settings):
        params, _ = parse_parameters({"query": "x", "threshold_type": "MORE"}, stream_id, settings)

        assert params.window_minutes == 5
        assert params.threshold == 0
        assert params.backlog == 0
        assert params.repeat_notifications is False

    def test_float_and_string_numbers(self, base_parameters, stream_id, settings):
        params, _ = parse_parameters(
            {**base_parameters, "time": "10", "threshold": 2.9, "backlog": "3.0"}, stream_id, settings
        )

        assert params.window_minutes == 10
        assert params.threshold == 2
        assert params.backlog == 3

    def test_negative_threshold_is_allowed(self, base_parameters, stream_id, settings):
        params, _ = parse_parameters({**base_parameters, "threshold": -4}, stream_id, settings)

        assert params.threshold == -4

    @pytest.mark.parametrize("missing", ["query", "threshold_type"])
    def test_missing_required_parameter(self, base_parameters, stream_id, settings, missing):
        parameters = dict(base_parameters)
        del parameters[missing]

        with pytest.raises(MissingParameterError) as exc_info:
            parse_parameters(parameters, stream_id, settings)

        assert exc_info.value.context["field"] == missing

    def test_empty_query(self, base_parameters, stream_id, settings):
        with pytest.raises(ConfigurationError):
            parse_parameters({**base_parameters, "query": ""}, stream_id, settings)

    def test_unknown_threshold_type(self, base_parameters, stream_id, settings):
        with pytest.raises(InvalidThresholdTypeError):
            parse_parameters({**base_parameters, "threshold_type": "equal"}, stream_id, settings)

    @pytest.mark.parametrize("window", [0, -5])
    def test_window_must_be_positive(self, base_parameters, stream_id, settings, window):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_parameters({**base_parameters, "time": window}, stream_id, settings)

        assert exc_info.value.context["field"] == "time"

    @pytest.mark.parametrize("key", ["backlog", "grace"])
    def test_negative_host_fields_are_invalid(self, base_parameters, stream_id, settings, key):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_parameters({**base_parameters, key: -1}, stream_id, settings)

        assert exc_info.value.context["field"] == key

    def test_non_numeric_threshold(self, base_parameters, stream_id, settings):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_parameters({**base_parameters, "threshold": "ten"}, stream_id, settings)

        assert exc_info.value.context["field"] == "threshold"


class TestGetNumber:

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ConfigurationError):
            get_number({"time": True}, "time", 5)

    def test_default_when_absent(self):
        assert get_number({}, "time", 5) == 5

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "inf", "1e400", "nan"])
    def test_non_finite_numbers_are_rejected(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            get_number({"threshold": value}, "threshold", 0)

        assert exc_info.value.context["field"] == "threshold"

    def test_infinite_threshold_fails_parsing(self, base_parameters, stream_id, settings):
        with pytest.raises(ConfigurationError):
            parse_parameters({**base_parameters, "threshold": float("inf")}, stream_id, settings)


class TestGetBoolean:

    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False), (1, True), (0, False),
        ("true", True), ("False", False), ("yes", True), ("no", False),
        ("on", True), ("off", False), ("1", True), ("0", False), ("", False),
    ])
    def test_accepted_spellings(self, value, expected):
        assert get_boolean({"repeat_notifications": value}, "repeat_notifications", False) is expected

    def test_default_when_absent(self):
        assert get_boolean({}, "repeat_notifications", True) is True

    @pytest.mark.parametrize("value", ["maybe", 2, 1.5, ["true"]])
    def test_other_values_are_rejected(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            get_boolean({"repeat_notifications": value}, "repeat_notifications", False)

        assert exc_info.value.context["field"] == "repeat_notifications"

    def test_string_false_disables_repeat_notifications(self, base_parameters, stream_id, settings):
        params, _ = parse_parameters({**base_parameters, "repeat_notifications": "false"}, stream_id, settings)

        assert params.repeat_notifications is False
