"""
Pydantic Models and Schemas
===========================

Data models for task records, control panel actions, notifications, and
update information.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from enum import Enum
import uuid

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class TaskStatus(str, Enum):
    """Task processing status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationType(str, Enum):
    """Control panel notification types."""
    NOTICE = "notice"
    ERROR = "error"


class TranslationMethod(str, Enum):
    """How a field's values are shared across sites."""
    NONE = "none"
    SITE = "site"
    SITE_GROUP = "siteGroup"
    LANGUAGE = "language"
    CUSTOM = "custom"


# Base Models
class BaseTimestamped(BaseModel):
    """Base model with timestamp fields."""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None


# Task Models
class TaskRecord(BaseTimestamped):
    """Persisted state of a single background task."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str = Field(..., description="Registered task type name")
    description: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    parent_id: Optional[str] = Field(None, description="Parent task, for sub-tasks")
    status: TaskStatus = TaskStatus.PENDING
    total_steps: int = Field(0, ge=0)
    current_step: int = Field(0, ge=0)
    error: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def progress(self) -> float:
        """Fraction of steps completed, between 0 and 1."""
        if self.total_steps == 0:
            return 1.0 if self.status == TaskStatus.COMPLETED else 0.0
        return min(self.current_step / self.total_steps, 1.0)

    def touch(self) -> None:
        self.updated_at = _utcnow()


# Control Panel Models
class ActionRequest(BaseModel):
    """A queued control panel action request."""
    action: str = Field(..., min_length=1, description="Controller action path, e.g. app/getCpAlerts")
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("action")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Normalize leading and trailing slashes."""
        v = v.strip("/")
        if not v:
            raise ValueError("action must not be empty")
        return v


class ActionResponse(BaseModel):
    """Result of a control panel action request."""
    data: Any = None
    status_text: str = "success"
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status_text == "success"


class Notification(BaseModel):
    """A notification shown in the control panel."""
    type: NotificationType
    message: str
    duration: int = Field(..., ge=0, description="Display duration in milliseconds")
    created_at: datetime = Field(default_factory=_utcnow)

    def expires_at(self) -> datetime:
        return self.created_at + timedelta(milliseconds=self.duration)


class UpdateInfo(BaseModel):
    """Available update summary returned by app/checkForUpdates."""
    total: int = Field(0, ge=0)
    critical: bool = False
