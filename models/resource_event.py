"""
Resource event schemas.

Events describe what an operation changed. They are logged and returned to
the caller for notifications; nothing consumes them inside the backend.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import BaseSchema
from models.shipping_resource import ResourceKind


class ResourceEventType(str, Enum):
    """Event types emitted by shipping resource operations."""
    RESOURCE_MERGED = "resource_merged"
    RESOURCE_TOGGLED = "resource_toggled"
    RESOURCE_DUPLICATED = "resource_duplicated"
    RESOURCE_DELETED = "resource_deleted"
    RESOURCE_CREATED = "resource_created"
    RESOURCE_UPDATED = "resource_updated"


class ResourceEvent(BaseSchema):
    """A change applied to one resource across one or more warehouses."""

    event_type: ResourceEventType
    kind: ResourceKind
    partition_ids: list[str] = Field(default_factory=list)
    identity: str = Field(..., description="Identity key of the affected resource")
    resource_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class OperationResponse(BaseSchema):
    """Result of a toggle, duplicate, delete, create or edit."""

    kind: ResourceKind
    partition_ids: list[str] = Field(default_factory=list, description="Warehouses written")
    events: list[ResourceEvent] = Field(default_factory=list)
    resource_id: Optional[str] = None
    is_active: Optional[bool] = None


class SyncResponse(BaseSchema):
    """Result of a carrier catalog sync."""

    kind: ResourceKind
    partition_ids: list[str] = Field(default_factory=list)
    synced_carriers: list[str] = Field(default_factory=list)
    failed_carriers: dict[str, str] = Field(
        default_factory=dict,
        description="Carrier -> error message for carriers that were skipped"
    )
    catalog_count: int = 0
    added: int = 0
    updated: int = 0
    dropped: int = 0
    events: list[ResourceEvent] = Field(default_factory=list)
