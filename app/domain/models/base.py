"""
Base entity and value objects for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import uuid


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.
    Naive values are interpreted as UTC (SQLite drops tzinfo on round-trip).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    """Generate an opaque entity identifier."""
    return str(uuid.uuid4())


@dataclass(eq=False)
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Malformed input: end before start, task/project mismatch, missing fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class NotFoundError(DomainException):
    """Exception raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ForbiddenError(DomainException):
    """Exception raised when the caller does not own the resource being mutated."""

    def __init__(self, message: str = "You do not have permission to modify this resource"):
        super().__init__(message, "FORBIDDEN")


class ConflictError(DomainException):
    """
    Exception raised when a business rule is violated by the current state:
    a timer already running, a timer already stopped, an invoiced entry.
    """

    def __init__(self, message: str, fields: Optional[list] = None):
        super().__init__(message, "CONFLICT")
        self.fields = fields or []


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    @abstractmethod
    def validate(self) -> None:
        """Validate the value object's state."""
        pass


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """Closed time range; the end must be strictly after the start."""

    start: datetime
    end: datetime

    def validate(self) -> None:
        """Validate time range."""
        if self.end <= self.start:
            raise ValidationError("End time must be after start time", "end_time")

    @property
    def duration_seconds(self) -> int:
        """Whole elapsed seconds, truncated."""
        return int((self.end - self.start).total_seconds())
