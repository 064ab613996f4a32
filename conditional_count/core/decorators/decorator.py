"""
Conditional Count Search Response Decorator

The host requires plugins that ship an alert condition to also register a
search response decorator. This one returns responses unchanged.
"""

from typing import Any, Optional, TypeVar

from conditional_count.core.alerts.schema import ConfigurationRequest, Descriptor, PLUGIN_LINK

T = TypeVar("T")


class ConditionalCountDecorator:
    """Identity search response decorator."""

    class Config:
        def get_requested_configuration(self) -> ConfigurationRequest:
            return ConfigurationRequest()

    DESCRIPTOR = Descriptor(
        name="Conditional Message Count Decorator",
        link=PLUGIN_LINK,
        description="Leaves search responses unchanged.",
    )

    def __init__(self, decorator: Optional[Any] = None):
        # Decorator definition from the host; carries no settings for this decorator
        self.decorator = decorator

    def apply(self, search_response: T) -> T:
        return search_response
