"""
PI Analytics — Entity Models
==============================

Typed snapshots of store rows. Loose records from Supabase are validated
here, once, so the analyzers never have to branch on a missing field:
blank text becomes None, a missing monetary value becomes 0, missing tag
and touch lists become empty, unparsable timestamps become None.

Field names follow the analytics vocabulary; aliases carry the store's
column names (``ghl_created_at``, ``utmSessionSource`` ...). Unknown columns
are kept so listings can return the full row.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

QUALIFIED_TAG = "pi-qualified"
DISQUALIFIED_TAG = "pi-disqualified"
WON_STATUS = "won"

UNKNOWN = "Unknown"
DIRECT = "Direct"

EntityT = TypeVar("EntityT", bound="Entity")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 value to a timezone-aware datetime (naive means UTC)."""
    if isinstance(value, datetime):
        dt = value
    elif not value:
        return None
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _text(value: Any) -> Optional[str]:
    """Coerce a scalar to text; None and blank strings become None."""
    if value is None:
        return None
    return _blank_to_none(value if isinstance(value, str) else str(value))


def _tag_list(value: Any) -> List[str]:
    """Tags as strings; NULL array elements are dropped."""
    if not isinstance(value, list):
        return []
    return [t if isinstance(t, str) else str(t) for t in value if t is not None]


class Entity(BaseModel):
    """Base for store rows: alias-aware, tolerant of extra columns."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_row(self) -> Dict[str, Any]:
        """Serialise back to the store's column names."""
        return self.model_dump(mode="json", by_alias=True)


def parse_rows(model: Type[EntityT], rows: Iterable[Dict[str, Any]]) -> List[EntityT]:
    """Map raw store rows into entity instances."""
    return [model.model_validate(row) for row in rows]


# ─── Contacts ──────────────────────────────────────────────

class ContactSummary(Entity):
    """Contact fields embedded in an opportunity row."""
    email: Optional[str] = None
    phone: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _blank(cls, value):
        return _text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return _tag_list(value)


class Contact(Entity):
    id: Any = None
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    source: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("email", "phone", "first_name", "last_name", "source", mode="before")
    @classmethod
    def _blank(cls, value):
        return _text(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value):
        return _tag_list(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _timestamp(cls, value):
        return parse_timestamp(value)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    @property
    def is_qualified(self) -> bool:
        return self.has_tag(QUALIFIED_TAG)

    @property
    def is_disqualified(self) -> bool:
        return self.has_tag(DISQUALIFIED_TAG)

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name)

    @property
    def source_label(self) -> str:
        return self.source or UNKNOWN


# ─── Pipelines ─────────────────────────────────────────────

class PipelineStage(Entity):
    pipeline_id: Any = Field(None, alias="ghl_pipeline_id")
    pipeline_name: str = UNKNOWN
    stage_id: Any = None
    stage_name: str = UNKNOWN
    stage_position: int = 0

    @field_validator("pipeline_name", "stage_name", mode="before")
    @classmethod
    def _name(cls, value):
        return _text(value) or UNKNOWN

    @field_validator("stage_position", mode="before")
    @classmethod
    def _position(cls, value):
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0


# ─── Opportunities ─────────────────────────────────────────

class AttributionTouch(Entity):
    """One marketing touch embedded in an opportunity."""
    utm_source: Optional[str] = Field(None, alias="utmSessionSource")
    medium: Optional[str] = None
    is_first: bool = Field(False, alias="isFirst")
    is_last: bool = Field(False, alias="isLast")

    @field_validator("utm_source", "medium", mode="before")
    @classmethod
    def _blank(cls, value):
        return _text(value)

    @field_validator("is_first", "is_last", mode="before")
    @classmethod
    def _flag(cls, value):
        return bool(value)

    @property
    def source_label(self) -> str:
        return self.utm_source or DIRECT

    @property
    def medium_label(self) -> str:
        return self.medium or UNKNOWN


class Opportunity(Entity):
    id: Any = None
    name: Optional[str] = None
    status: Optional[str] = None
    monetary_value: float = 0.0
    pipeline_id: Any = None
    pipeline_stage_id: Any = None
    contact_id: Any = Field(None, alias="ghl_contact_id")
    created_at: Optional[datetime] = Field(None, alias="ghl_created_at")
    last_stage_change_at: Optional[datetime] = None
    contact: Optional[ContactSummary] = None
    attributions: List[AttributionTouch] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _text(value)

    @field_validator("contact_id", mode="before")
    @classmethod
    def _blank(cls, value):
        return _blank_to_none(value)

    @field_validator("monetary_value", mode="before")
    @classmethod
    def _value(cls, value):
        if value is None:
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("created_at", "last_stage_change_at", mode="before")
    @classmethod
    def _timestamp(cls, value):
        return parse_timestamp(value)

    @field_validator("contact", mode="before")
    @classmethod
    def _contact(cls, value):
        return value if isinstance(value, (dict, ContactSummary)) else None

    @field_validator("attributions", mode="before")
    @classmethod
    def _touches(cls, value):
        if not isinstance(value, list):
            return []
        return [t for t in value if isinstance(t, (dict, AttributionTouch))]

    @property
    def is_won(self) -> bool:
        return self.status == WON_STATUS


# ─── Migration ─────────────────────────────────────────────

class ShadowRecord(Entity):
    """Staged copy of an entity awaiting sync to Salesforce."""
    id: Any = None
    external_id: Optional[str] = Field(None, alias="salesforce_id")

    @field_validator("external_id", mode="before")
    @classmethod
    def _external_id(cls, value):
        return _text(value)

    @property
    def is_synced(self) -> bool:
        return self.external_id is not None
