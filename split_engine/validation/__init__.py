"""Request validation package."""

from split_engine.validation.validator import SplitRequestValidator

__all__ = ["SplitRequestValidator"]
