from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict

# Timestamps are stored as fixed-width UTC strings so that lexical range
# queries on the store agree with chronological order.
ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def to_iso(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(ISO_FORMAT)


def date_to_iso(value: date) -> str:
    return to_iso(datetime(value.year, value.month, value.day))


def utcnow_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


class StoreModel(BaseModel):
    id: Optional[str] = None
    account_id: str
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )

    def to_fields(self) -> Dict[str, Any]:
        """Serialize for the document store (the id lives outside the fields)."""
        return self.model_dump(mode="json", exclude={"id"})
