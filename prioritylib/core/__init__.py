"""Core building blocks: base models, errors, validation, settings and the container."""

from prioritylib.core.models import StrictBaseModel

__all__ = [
    "StrictBaseModel",
]
