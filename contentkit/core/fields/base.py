"""
Field Base Class
================

Field is the base class for custom content field types. Concrete types
override the template hooks (``input_html``, ``search_keywords``,
``normalize_value`` ...) and inherit validation rules, translation handling,
GraphQL descriptors, and element lifecycle events.
"""

import re
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from markupsafe import escape
from pydantic import BaseModel

from contentkit.config.logging import get_logger
from contentkit.config.settings import get_settings
from contentkit.core.events import (
    Component,
    DefineFieldHtmlEvent,
    DefineFieldKeywordsEvent,
    FieldElementEvent,
)
from contentkit.core.fields.translation import translation_description, translation_key
from contentkit.core.fields.validation import FieldValidator, collect_errors
from contentkit.models.schemas import TranslationMethod

logger = get_logger(__name__)


class FieldError(Exception):
    """Base exception for field errors."""

    pass


class NotSupportedError(FieldError):
    """Raised when a field type does not support an operation."""

    pass


# Element lifecycle events. Listeners may set ``is_valid = False`` on the
# before* events to stop the operation.
EVENT_BEFORE_ELEMENT_SAVE = "beforeElementSave"
EVENT_AFTER_ELEMENT_SAVE = "afterElementSave"
EVENT_AFTER_ELEMENT_PROPAGATE = "afterElementPropagate"
EVENT_BEFORE_ELEMENT_DELETE = "beforeElementDelete"
EVENT_AFTER_ELEMENT_DELETE = "afterElementDelete"
EVENT_BEFORE_ELEMENT_RESTORE = "beforeElementRestore"
EVENT_AFTER_ELEMENT_RESTORE = "afterElementRestore"
EVENT_DEFINE_KEYWORDS = "defineKeywords"
EVENT_DEFINE_INPUT_HTML = "defineInputHtml"

STATUS_MODIFIED = "modified"
STATUS_OUTDATED = "outdated"

RESERVED_HANDLES = [
    "ancestors",
    "archived",
    "attributeLabel",
    "attributes",
    "behavior",
    "behaviors",
    "children",
    "contentTable",
    "dateCreated",
    "dateUpdated",
    "descendants",
    "enabled",
    "enabledForSite",
    "error",
    "errors",
    "errorSummary",
    "fieldValue",
    "fieldValues",
    "id",
    "language",
    "level",
    "localized",
    "lft",
    "link",
    "name",  # global set-specific
    "next",
    "nextSibling",
    "owner",
    "parent",
    "parents",
    "postDate",  # entry-specific
    "prev",
    "prevSibling",
    "ref",
    "rgt",
    "root",
    "scenario",
    "searchScore",
    "siblings",
    "site",
    "slug",
    "sortOrder",
    "status",
    "title",
    "uid",
    "uri",
    "url",
    "username",  # user-specific
]

_FORM_TAG = re.compile(r"<(?:input|textarea|select)\s[^>]*?(?=\s*/?>)", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")
_ISO_8601 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:?\d{2})$"
)
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def value_to_string(value: Any, glue: str = " ") -> str:
    """Flatten a field value into a string, joining sequences with ``glue``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, dict):
        value = list(value.values())
    if isinstance(value, (list, tuple, set)):
        parts = (value_to_string(v, glue) for v in value)
        return glue.join(p for p in parts if p != "")
    return str(value)


def _parse_iso_8601(value: str) -> datetime:
    # fromisoformat only takes six-digit fractions and colon offsets before 3.11
    match = _ISO_8601.match(value)
    if match is None:
        return datetime.fromisoformat(value)
    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset == "Z":
        offset = "+00:00"
    elif ":" not in offset:
        offset = f"{offset[:3]}:{offset[3:]}"
    return datetime.fromisoformat(f"{match.group('base')}.{fraction}{offset}")


def format_date_for_db(value: Any) -> Optional[str]:
    """Convert a datetime or ISO-8601 string to a UTC ``Y-m-d H:i:s`` string."""
    if isinstance(value, str):
        value = _parse_iso_8601(value)
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def is_iso_8601(value: Any) -> bool:
    return isinstance(value, str) and bool(_ISO_8601.match(value))


class Field(Component):
    """
    Base class for custom field types.

    Args:
        name: Human-facing field name
        handle: Identifier used in templates, queries, and content columns
        translation_method: One of the ``TranslationMethod`` values
        translation_key_format: Key template, only kept for custom translation
    """

    eager_loading = False

    def __init__(
        self,
        name: Optional[str] = None,
        handle: Optional[str] = None,
        id: Optional[int] = None,
        group_id: Optional[int] = None,
        context: Optional[str] = None,
        instructions: Optional[str] = None,
        translation_method: str = TranslationMethod.NONE.value,
        translation_key_format: Optional[str] = None,
        column_suffix: Optional[str] = None,
        searchable: bool = True,
        uid: Optional[str] = None,
    ) -> None:
        self.id = id
        self.group_id = group_id
        self.name = name
        self.handle = handle
        self.context = context
        self.instructions = instructions
        self.translation_method = (
            translation_method.value
            if isinstance(translation_method, TranslationMethod)
            else translation_method
        )
        self.translation_key_format = translation_key_format
        self.column_suffix = column_suffix
        self.searchable = searchable
        self.uid = uid
        self.registry: Any = None
        self.errors: Dict[str, List[str]] = {}
        self._is_fresh: Optional[bool] = None
        self.init()

    # Class-level hooks
    # -------------------------------------------------------------------------

    @classmethod
    def display_name(cls) -> str:
        return _CAMEL_BOUNDARY.sub(" ", cls.__name__)

    @classmethod
    def has_content_column(cls) -> bool:
        return True

    @classmethod
    def supported_translation_methods(cls) -> List[str]:
        if not cls.has_content_column():
            return [TranslationMethod.NONE.value]
        return [method.value for method in TranslationMethod]

    @classmethod
    def value_type(cls) -> str:
        return "mixed"

    def __str__(self) -> str:
        return self.name or type(self).__name__

    def __repr__(self) -> str:
        return f"<{type(self).__name__} handle={self.handle!r} id={self.id!r}>"

    def init(self) -> None:
        supported = type(self).supported_translation_methods() or [TranslationMethod.NONE.value]
        if self.translation_method not in supported:
            self.translation_method = supported[0]

        if self.translation_method != TranslationMethod.CUSTOM.value:
            self.translation_key_format = None

    @property
    def is_new(self) -> bool:
        return self.id is None

    # Validation
    # -------------------------------------------------------------------------

    def ensure_column_suffix(self) -> None:
        if type(self).has_content_column() and not self.column_suffix:
            alphabet = string.ascii_lowercase + string.digits
            self.column_suffix = "".join(secrets.choice(alphabet) for _ in range(8))

    def max_handle_length(self) -> int:
        """Longest handle that still fits the database's object name limit."""
        settings = get_settings()
        length = settings.max_object_name_length

        if type(self).has_content_column():
            length -= len(settings.field_column_prefix)
            self.ensure_column_suffix()
            if self.column_suffix:
                length -= len(self.column_suffix) + 1

        return length

    def define_rules(self) -> Dict[str, Dict[str, Any]]:
        """Return the cerberus schema for this field's settings."""
        rules: Dict[str, Dict[str, Any]] = {
            "name": {
                "type": "string",
                "nullable": False,
                "empty": False,
                "maxlength": 255,
            },
            "handle": {
                "type": "string",
                "nullable": False,
                "empty": False,
                "maxlength": self.max_handle_length(),
                "check_with": "handle",
                "reserved": RESERVED_HANDLES,
                "unique_handle": True,
            },
            "translation_method": {
                "type": "string",
                "nullable": False,
                "empty": False,
                "allowed": [method.value for method in TranslationMethod],
            },
            "group_id": {"type": "integer", "nullable": True},
            "id": {"type": "integer", "nullable": self.is_new},
            "translation_key_format": {"type": "string", "nullable": True},
        }

        if self.translation_method == TranslationMethod.CUSTOM.value:
            rules["translation_key_format"] = {
                "type": "string",
                "nullable": False,
                "empty": False,
            }

        return rules

    def validate(self) -> bool:
        """Validate the field's settings, collecting messages in ``errors``."""
        rules = self.define_rules()
        document = {attribute: getattr(self, attribute) for attribute in rules}
        validator = FieldValidator(rules, registry=self.registry, field=self)
        valid = validator.validate(document)
        self.errors = {} if valid else collect_errors(validator)
        if not valid:
            logger.debug("Field failed validation", handle=self.handle, errors=self.errors)
        return bool(valid)

    def has_errors(self) -> bool:
        return bool(self.errors)

    # Content
    # -------------------------------------------------------------------------

    def get_content_column_type(self) -> str:
        return "string"

    def content_column_name(self) -> Optional[str]:
        if not type(self).has_content_column() or not self.handle:
            return None
        column = f"{get_settings().field_column_prefix}{self.handle}"
        if self.column_suffix:
            column = f"{column}_{self.column_suffix}"
        return column

    # Translation
    # -------------------------------------------------------------------------

    def is_translatable(self, element: Any = None) -> bool:
        if self.translation_method == TranslationMethod.CUSTOM.value:
            return element is None or self.get_translation_key(element) != ""
        return self.translation_method != TranslationMethod.NONE.value

    def get_translation_description(self, element: Any = None) -> Optional[str]:
        if not self.is_translatable(element):
            return None
        return translation_description(self.translation_method)

    def get_translation_key(self, element: Any) -> str:
        return translation_key(element, self.translation_method, self.translation_key_format)

    def get_status(self, element: Any) -> Optional[Tuple[str, str]]:
        if element.is_field_modified(self.handle):
            return STATUS_MODIFIED, "This field has been modified."
        if element.is_field_outdated(self.handle):
            return STATUS_OUTDATED, "This field was updated in the Current revision."
        return None

    # Input
    # -------------------------------------------------------------------------

    def use_fieldset(self) -> bool:
        return False

    def normalize_value(self, value: Any, element: Any = None) -> Any:
        return value

    def get_input_html(self, value: Any, element: Any = None) -> str:
        html = self.input_html(value, element)

        # Give listeners a chance to modify it
        event = DefineFieldHtmlEvent(value=value, element=element, html=html)
        self.trigger(EVENT_DEFINE_INPUT_HTML, event)
        return event.html

    def input_html(self, value: Any, element: Any = None) -> str:
        """
        Returns the field's input HTML.

        Args:
            value: The normalized value, raw submitted data, or None
            element: The element the field is associated with, if there is one
        """
        content = "" if value is None else value
        return f'<textarea name="{escape(self.handle or "")}">{escape(content)}</textarea>'

    def get_static_html(self, value: Any, element: Any) -> str:
        """Input HTML with every form control disabled."""
        return _FORM_TAG.sub(lambda m: m.group(0) + " disabled", self.get_input_html(value, element))

    def get_element_validation_rules(self) -> List[Any]:
        return []

    def is_value_empty(self, value: Any, element: Any) -> bool:
        return value is None or value == [] or value == ""

    # Search
    # -------------------------------------------------------------------------

    def get_search_keywords(self, value: Any, element: Any) -> str:
        if self.has_event_handlers(EVENT_DEFINE_KEYWORDS):
            event = DefineFieldKeywordsEvent(value=value, element=element)
            self.trigger(EVENT_DEFINE_KEYWORDS, event)
            if event.handled:
                return event.keywords
        return self.search_keywords(value, element)

    def search_keywords(self, value: Any, element: Any) -> str:
        """
        Returns the search keywords associated with this field.

        Keywords may be separated by commas and/or whitespace; the search
        index normalizes them.
        """
        return value_to_string(value, " ")

    # Element index
    # -------------------------------------------------------------------------

    def get_table_attribute_html(self, value: Any, element: Any) -> str:
        text = "" if value is None else str(value)
        return str(escape(_HTML_TAG.sub("", text)))

    def get_sort_option(self) -> Dict[str, Any]:
        column = self.content_column_name()

        if column is None:
            raise NotSupportedError(f"get_sort_option() not supported by {self.name}")

        return {
            "label": str(self),
            "order_by": [column, "elements.id"],
            "attribute": f"field:{self.id}",
        }

    # Storage
    # -------------------------------------------------------------------------

    def serialize_value(self, value: Any, element: Any = None) -> Any:
        if callable(getattr(value, "serialize", None)):
            return value.serialize()

        if callable(getattr(value, "to_dict", None)):
            return value.to_dict()

        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")

        # Only datetimes and ISO-8601 strings are treated as dates
        if isinstance(value, datetime) or is_iso_8601(value):
            return format_date_for_db(value)

        return value

    def copy_value(self, source: Any, target: Any) -> None:
        value = self.serialize_value(source.get_field_value(self.handle), source)
        target.set_field_value(self.handle, value)

    def modify_elements_query(self, query: Any, value: Any) -> Optional[bool]:
        if value is not None:
            column = self.content_column_name()

            # Fields without a content column must override this to support
            # custom query criteria
            if column is None:
                return False

            query.where(f"content.{column}", value)

        return None

    def modify_element_index_query(self, query: Any) -> None:
        if self.eager_loading:
            query.with_(self.handle)

    # Fresh content
    # -------------------------------------------------------------------------

    def set_is_fresh(self, is_fresh: Optional[bool] = None) -> None:
        self._is_fresh = is_fresh

    def is_fresh(self, element: Any = None) -> bool:
        if self._is_fresh is not None:
            return self._is_fresh
        if element is not None:
            return element.has_fresh_content
        return True

    def request_param_name(self, element: Any) -> Optional[str]:
        if element is None:
            return None
        namespace = element.field_param_namespace
        return f"{namespace}.{self.handle}" if namespace else self.handle

    def get_group(self) -> Any:
        if self.registry is None or self.group_id is None:
            return None
        return self.registry.get_group_by_id(self.group_id)

    # GraphQL
    # -------------------------------------------------------------------------

    def include_in_gql_schema(self, schema: Any) -> bool:
        return True

    def get_content_gql_type(self) -> Any:
        return "String"

    def get_content_gql_mutation_argument_type(self) -> Dict[str, Any]:
        return {
            "name": self.handle,
            "type": "String",
            "description": self.instructions,
        }

    def get_content_gql_query_argument_type(self) -> Dict[str, Any]:
        return {
            "name": self.handle,
            "type": "[QueryArgument]",
        }

    def get_eager_loading_gql_conditions(self) -> Any:
        # No restrictions
        return {}

    # Events
    # -------------------------------------------------------------------------

    def before_save(self, is_new: bool) -> bool:
        if not self.context:
            self.context = get_settings().field_context
        return True

    def after_save(self, is_new: bool) -> None:
        pass

    def before_delete(self) -> bool:
        return True

    def after_delete(self) -> None:
        pass

    def before_element_save(self, element: Any, is_new: bool) -> bool:
        event = FieldElementEvent(element=element, is_new=is_new)
        self.trigger(EVENT_BEFORE_ELEMENT_SAVE, event)
        return event.is_valid

    def after_element_save(self, element: Any, is_new: bool) -> None:
        if self.has_event_handlers(EVENT_AFTER_ELEMENT_SAVE):
            self.trigger(EVENT_AFTER_ELEMENT_SAVE, FieldElementEvent(element=element, is_new=is_new))

    def after_element_propagate(self, element: Any, is_new: bool) -> None:
        if self.has_event_handlers(EVENT_AFTER_ELEMENT_PROPAGATE):
            self.trigger(
                EVENT_AFTER_ELEMENT_PROPAGATE, FieldElementEvent(element=element, is_new=is_new)
            )

    def before_element_delete(self, element: Any) -> bool:
        event = FieldElementEvent(element=element)
        self.trigger(EVENT_BEFORE_ELEMENT_DELETE, event)
        return event.is_valid

    def after_element_delete(self, element: Any) -> None:
        if self.has_event_handlers(EVENT_AFTER_ELEMENT_DELETE):
            self.trigger(EVENT_AFTER_ELEMENT_DELETE, FieldElementEvent(element=element))

    def before_element_restore(self, element: Any) -> bool:
        event = FieldElementEvent(element=element)
        self.trigger(EVENT_BEFORE_ELEMENT_RESTORE, event)
        return event.is_valid

    def after_element_restore(self, element: Any) -> None:
        if self.has_event_handlers(EVENT_AFTER_ELEMENT_RESTORE):
            self.trigger(EVENT_AFTER_ELEMENT_RESTORE, FieldElementEvent(element=element))
