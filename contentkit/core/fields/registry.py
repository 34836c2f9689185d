"""
Field Registry
==============

In-memory store of fields and field groups. Assigns ids, enforces handle
uniqueness per context, and runs the save/delete lifecycle hooks.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
import itertools
import uuid

from contentkit.config.logging import get_logger
from contentkit.core.fields.base import Field

logger = get_logger(__name__)


@dataclass
class FieldGroup:
    """A named group fields are organized into."""

    name: str
    id: Optional[int] = None


class FieldRegistry:
    """Registry of saved fields, keyed by id."""

    def __init__(self) -> None:
        self.logger = logger.bind(component="field_registry")
        self._fields: Dict[int, Field] = {}
        self._groups: Dict[int, FieldGroup] = {}
        self._field_ids = itertools.count(1)
        self._group_ids = itertools.count(1)

    # Groups
    # -------------------------------------------------------------------------

    def save_group(self, group: FieldGroup) -> FieldGroup:
        if group.id is None:
            group.id = next(self._group_ids)
        self._groups[group.id] = group
        return group

    def get_group_by_id(self, group_id: int) -> Optional[FieldGroup]:
        return self._groups.get(group_id)

    def get_all_groups(self) -> List[FieldGroup]:
        return list(self._groups.values())

    # Fields
    # -------------------------------------------------------------------------

    def handle_taken(self, handle: str, context: Optional[str], exclude_id: Optional[int] = None) -> bool:
        lowered = handle.lower()
        for field in self._fields.values():
            if field.id == exclude_id:
                continue
            if field.context == context and (field.handle or "").lower() == lowered:
                return True
        return False

    def save_field(self, field: Field, run_validation: bool = True) -> bool:
        """
        Validate and store a field.

        Returns:
            False if validation failed or a before-save hook vetoed the save
        """
        is_new = field.is_new
        field.registry = self

        if not field.before_save(is_new):
            self.logger.info("Field save cancelled", handle=field.handle)
            return False

        if run_validation and not field.validate():
            self.logger.info("Field not saved due to validation errors", handle=field.handle, errors=field.errors)
            return False

        if is_new:
            field.id = next(self._field_ids)
            field.uid = field.uid or str(uuid.uuid4())

        self._fields[field.id] = field
        field.after_save(is_new)
        self.logger.info("Field saved", field_id=field.id, handle=field.handle, is_new=is_new)
        return True

    def get_field_by_id(self, field_id: int) -> Optional[Field]:
        return self._fields.get(field_id)

    def get_field_by_handle(self, handle: str, context: Optional[str] = None) -> Optional[Field]:
        for field in self._fields.values():
            if field.handle == handle and (context is None or field.context == context):
                return field
        return None

    def get_fields_by_group_id(self, group_id: int) -> List[Field]:
        return [field for field in self._fields.values() if field.group_id == group_id]

    def get_all_fields(self, context: Optional[str] = None) -> List[Field]:
        return [
            field
            for field in self._fields.values()
            if context is None or field.context == context
        ]

    def delete_field(self, field: Field) -> bool:
        if field.id not in self._fields or not field.before_delete():
            return False
        del self._fields[field.id]
        field.after_delete()
        self.logger.info("Field deleted", field_id=field.id, handle=field.handle)
        return True
