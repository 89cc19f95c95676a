"""
Base document model shared by every collection.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_timestamp(value: Any) -> Any:
    """
    Accept document-store timestamp shapes for datetime fields.

    Handles {"seconds": ..., "nanoseconds": ...} objects and epoch
    milliseconds; ISO strings and datetimes are left to pydantic.
    """
    if isinstance(value, dict) and "seconds" in value:
        seconds = value["seconds"] + value.get("nanoseconds", 0) / 1e9
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return value


Timestamp = Annotated[Optional[datetime], BeforeValidator(_coerce_timestamp)]


class Document(BaseModel):
    """
    A record in a backing-store collection.

    The id is assigned by the caller or by the store on insert. Fields the
    model does not declare are kept so round-trips through the cache never
    drop data.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(None, description="Document identifier")

    def to_store_dict(self) -> dict[str, Any]:
        """JSON-safe dict for the backing store and the cache envelope."""
        return self.model_dump(mode="json")


class AuditedDocument(Document):
    """Document carrying the created/modified audit fields."""

    created_at: Timestamp = None
    created_by: Optional[str] = None
    modified_date: Timestamp = None
    modified_by: Optional[str] = None
