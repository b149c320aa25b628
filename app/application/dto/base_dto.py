"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import List, TypeVar, Generic
from pydantic import BaseModel, ConfigDict


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        # Unknown fields are rejected
        extra="forbid",
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")


T = TypeVar('T')


class PaginatedResponseDTO(ResponseDTO, Generic[T]):
    """Page of results with the total match count."""

    items: List[T]
    total: int
    page: int
    limit: int
