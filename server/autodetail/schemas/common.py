"""Common Pydantic schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict using the camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


class DeletedRecord(CamelModel):
    id: int
    label: Optional[str] = None


class DeleteResponse(CamelModel):
    """Returned by the admin delete endpoints; bookings use ``DeleteBookingResponse``."""

    success: bool = True
    deleted: DeletedRecord
