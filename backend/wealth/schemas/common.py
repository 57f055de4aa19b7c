"""Common response schemas used across the API."""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wealth.services.shared.pagination import Page as ServicePage

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire.

    Requests may use either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PageMeta(CamelModel):
    """Pagination metadata.

    Attributes:
        total: Total number of items across all pages
        limit: Maximum items per page (after clamping)
        offset: Number of items skipped (after clamping)
        has_more: Whether more items exist beyond the current page
        next_offset: Offset of the next page, or None on the last page
    """

    total: int = Field(..., description="Total number of items")
    limit: int = Field(..., description="Maximum items per page")
    offset: int = Field(..., description="Number of items skipped")
    has_more: bool = Field(..., description="Whether more items exist")
    next_offset: int | None = Field(None, description="Offset of the next page")


class Page(CamelModel, Generic[T]):
    """Standard paginated response wrapper."""

    items: list[T]
    meta: PageMeta

    @classmethod
    def build(cls, page: ServicePage, items: list) -> "Page":
        """Wrap converted ``items`` with the metadata of a service-level page."""
        return cls(items=items, meta=PageMeta.model_validate(page.meta))


class ErrorDetail(BaseModel):
    """Detailed error information for a specific field or issue.

    Attributes:
        field: The field name that caused the error (None for general errors)
        message: Human-readable error description
    """

    field: str | None = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response format for API errors.

    Attributes:
        error: Error code (e.g., 'NotFound', 'OversellError')
        message: Human-readable error message
        details: Additional error details (e.g., validation errors per field)
        timestamp: When the error occurred
        path: Request path that caused the error
    """

    error: str = Field(..., description="Error code (e.g., 'NotFound', 'OversellError')")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | None = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    path: str | None = Field(None, description="Request path that caused the error")


class MessageResponse(BaseModel):
    """Simple message response for operations that return only a message.

    Attributes:
        message: The response message
    """

    message: str
