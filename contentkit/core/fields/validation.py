"""
Field Validation
================

Cerberus validator with the custom rules field attributes need: handle
syntax, reserved words, and per-context handle uniqueness.
"""

import re
from typing import Any, Dict, List

from cerberus import Validator  # type: ignore[import-untyped]

HANDLE_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")

# Words no handle may use, regardless of the component
BASE_RESERVED_WORDS = [
    "attribute",
    "attributeLabels",
    "attributeNames",
    "attributes",
    "dateCreated",
    "dateUpdated",
    "errors",
    "false",
    "fields",
    "handle",
    "id",
    "n",
    "name",
    "no",
    "rules",
    "this",
    "true",
    "uid",
    "y",
    "yes",
]


class FieldValidator(Validator):
    """Validator for field settings.

    Accepts a ``registry`` and a ``field`` keyword so the ``unique_handle``
    rule can look up other fields in the same context.
    """

    def _check_with_handle(self, field: str, value: Any) -> None:
        if isinstance(value, str) and not HANDLE_PATTERN.match(value):
            self._error(field, f'"{value}" isn\'t a valid handle.')

    def _validate_reserved(self, reserved: List[str], field: str, value: Any) -> None:
        """Reject values that match a reserved word, ignoring case.

        The rule's arguments are validated against this schema:
        {'type': 'list'}
        """
        if not isinstance(value, str):
            return
        lowered = {word.lower() for word in BASE_RESERVED_WORDS + list(reserved)}
        if value.lower() in lowered:
            self._error(field, f'"{value}" is a reserved word.')

    def _validate_unique_handle(self, unique: bool, field: str, value: Any) -> None:
        """Reject handles already used by another field in the same context.

        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        registry = self._config.get("registry")
        subject = self._config.get("field")
        if not unique or registry is None or subject is None or not isinstance(value, str):
            return
        if registry.handle_taken(value, subject.context, exclude_id=subject.id):
            label = field.replace("_", " ").capitalize()
            self._error(field, f'{label} "{value}" has already been taken.')


def collect_errors(validator: Validator) -> Dict[str, List[str]]:
    """Flatten cerberus errors into attribute -> messages."""
    errors: Dict[str, List[str]] = {}
    for attribute, messages in validator.errors.items():
        for message in messages:
            if isinstance(message, dict):
                for nested in message.values():
                    errors.setdefault(attribute, []).extend(str(m) for m in nested)
            else:
                errors.setdefault(attribute, []).append(str(message))
    return errors
