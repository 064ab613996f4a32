"""
Search Response Decorator Tests
"""

from conditional_count.core.alerts.schema import PLUGIN_LINK
from conditional_count.core.decorators import ConditionalCountDecorator


class TestConditionalCountDecorator:

    def test_apply_returns_input_unchanged(self):
        response = {"query": "error", "messages": [{"_id": "a", "message": "boom"}], "total_results": 1}
        snapshot = {"query": "error", "messages": [{"_id": "a", "message": "boom"}], "total_results": 1}

        decorated = ConditionalCountDecorator().apply(response)

        assert decorated is response
        assert decorated == snapshot

    def test_apply_accepts_any_response(self):
        decorator = ConditionalCountDecorator(decorator={"type": "conditional-count"})

        assert decorator.apply(None) is None
        assert decorator.decorator == {"type": "conditional-count"}

    def test_requests_no_configuration(self):
        request = ConditionalCountDecorator.Config().get_requested_configuration()

        assert len(request) == 0
        assert request.as_list() == []

    def test_descriptor(self):
        descriptor = ConditionalCountDecorator.DESCRIPTOR

        assert descriptor.name == "Conditional Message Count Decorator"
        assert descriptor.link == PLUGIN_LINK
