"""
Fields Module
=============

Custom field base class, validation, translation keys, registry, and the
built-in field types.

Components:
- base: Field template class and lifecycle events
- validation: Cerberus rules for field settings
- translation: Translation key computation
- registry: In-memory field and group store
- types: Built-in field types
"""

from .base import Field, FieldError, NotSupportedError
from .registry import FieldGroup, FieldRegistry
from .types import Lightswitch, Number, PlainText, Table

__all__ = [
    "Field",
    "FieldError",
    "FieldGroup",
    "FieldRegistry",
    "Lightswitch",
    "NotSupportedError",
    "Number",
    "PlainText",
    "Table",
]
