"""Tests for common response schemas."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from wealth.schemas.common import (
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    Page,
    PageMeta,
)
from wealth.services.shared.pagination import paginate


class ItemSchema(CamelModel):
    """Test item schema for pagination tests."""

    id: int
    display_name: str


class TestCamelModel:
    """Tests for camelCase aliasing."""

    def test_dumps_camel_case_by_alias(self):
        data = ItemSchema(id=1, display_name="test").model_dump(by_alias=True)
        assert data == {"id": 1, "displayName": "test"}

    def test_accepts_both_spellings(self):
        assert ItemSchema(id=1, displayName="a").display_name == "a"
        assert ItemSchema.model_validate({"id": 1, "display_name": "b"}).display_name == "b"


class TestPage:
    """Tests for the Page generic schema."""

    def test_page_structure(self):
        """Test basic structure with required fields."""
        page = Page[ItemSchema](
            items=[ItemSchema(id=1, display_name="test")],
            meta=PageMeta(total=45, limit=20, offset=0, has_more=True, next_offset=20),
        )
        assert page.meta.total == 45
        assert page.meta.next_offset == 20

    def test_page_serialization_uses_camel_case(self):
        """Test serialization to the wire format."""
        page = Page[ItemSchema](
            items=[],
            meta=PageMeta(total=0, limit=20, offset=0, has_more=False, next_offset=None),
        )
        data = page.model_dump(by_alias=True)
        assert data["meta"] == {
            "total": 0,
            "limit": 20,
            "offset": 0,
            "hasMore": False,
            "nextOffset": None,
        }

    def test_build_from_service_page(self):
        """Test wrapping a service-level page."""
        service_page = paginate(list(range(45)), limit=20, offset=40)
        items = [ItemSchema(id=i, display_name=str(i)) for i in service_page.items]

        page = Page[ItemSchema].build(service_page, items)

        assert [item.id for item in page.items] == [40, 41, 42, 43, 44]
        assert page.meta.has_more is False
        assert page.meta.next_offset is None

    def test_page_missing_meta(self):
        """Test validation error when metadata is missing."""
        with pytest.raises(ValidationError):
            Page[ItemSchema](items=[])


class TestErrorResponse:
    """Tests for ErrorResponse schema."""

    def test_error_response_structure(self):
        """Test basic error response structure."""
        error = ErrorResponse(
            error="OversellError",
            message="Sell of 11 on 2024-02-10 exceeds open quantity 10",
            path="/api/transactions",
        )
        assert error.error == "OversellError"
        assert error.path == "/api/transactions"
        assert error.details is None
        assert isinstance(error.timestamp, datetime)

    def test_error_response_with_details(self):
        """Test error response with multiple error details."""
        error = ErrorResponse(
            error="ImportValidationError",
            message="Validation failed",
            details=[ErrorDetail(field="csv", message="Required"), ErrorDetail(message="Bad")],
        )
        assert [d.field for d in error.details] == ["csv", None]

    def test_error_response_timestamp_auto_generated(self):
        """Test that timestamp is automatically generated."""
        before = datetime.now(UTC)
        error = ErrorResponse(error="Test", message="Test error")
        after = datetime.now(UTC)

        assert before <= error.timestamp <= after


class TestMessageResponse:
    """Tests for MessageResponse schema."""

    def test_message_response_structure(self):
        response = MessageResponse(message="Account 1 deleted")
        assert response.model_dump() == {"message": "Account 1 deleted"}

    def test_message_response_missing_message(self):
        """Test validation error when message is missing."""
        with pytest.raises(ValidationError):
            MessageResponse()
