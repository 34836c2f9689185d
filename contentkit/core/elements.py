"""
Elements
========

Minimal element and site models that fields operate on, plus a query
object fields can add conditions to.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple


@dataclass
class Site:
    """A site an element belongs to."""

    handle: str
    language: str = "en-US"
    group_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class Element:
    """Content element holding custom field values keyed by handle."""

    site: Site
    id: Optional[int] = None
    title: Optional[str] = None
    field_param_namespace: Optional[str] = "fields"
    has_fresh_content: bool = False
    field_values: Dict[str, Any] = field(default_factory=dict)
    modified_fields: Set[str] = field(default_factory=set)
    outdated_fields: Set[str] = field(default_factory=set)

    def get_field_value(self, handle: str) -> Any:
        return self.field_values.get(handle)

    def set_field_value(self, handle: str, value: Any) -> None:
        self.field_values[handle] = value

    def is_field_modified(self, handle: str) -> bool:
        return handle in self.modified_fields

    def is_field_outdated(self, handle: str) -> bool:
        return handle in self.outdated_fields


@dataclass
class ElementQuery:
    """Accumulates content conditions and eager-load requests."""

    conditions: List[Tuple[str, Any]] = field(default_factory=list)
    eager_loads: List[str] = field(default_factory=list)

    def where(self, column: str, value: Any) -> "ElementQuery":
        self.conditions.append((column, value))
        return self

    def with_(self, handle: str) -> "ElementQuery":
        if handle not in self.eager_loads:
            self.eager_loads.append(handle)
        return self
