from .decorator import ConditionalCountDecorator

__all__ = ["ConditionalCountDecorator"]
