"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.shipping_resource import (
    ResourceKind,
    ResourceOrigin,
    ScopeType,
    AvailableFor,
    ActivationStatus,
    Dimensions,
    WeightLimits,
    CarrierIdentity,
    ServiceFeatures,
    ServiceRestrictions,
    PartitionScope,
    ProviderItem,
    Resource,
    PartitionState,
    ActivationSummary,
    PartitionWrite,
    ResourceCreate,
    ResourceUpdate,
    CarrierCredentials,
    SyncRequest,
    WarehouseActionRequest,
    ResourceListResponse,
    AggregateEntry,
    AggregateResponse,
)
from models.resource_event import (
    ResourceEventType,
    ResourceEvent,
    OperationResponse,
    SyncResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Shipping resources
    "ResourceKind",
    "ResourceOrigin",
    "ScopeType",
    "AvailableFor",
    "ActivationStatus",
    "Dimensions",
    "WeightLimits",
    "CarrierIdentity",
    "ServiceFeatures",
    "ServiceRestrictions",
    "PartitionScope",
    "ProviderItem",
    "Resource",
    "PartitionState",
    "ActivationSummary",
    "PartitionWrite",
    "ResourceCreate",
    "ResourceUpdate",
    "CarrierCredentials",
    "SyncRequest",
    "WarehouseActionRequest",
    "ResourceListResponse",
    "AggregateEntry",
    "AggregateResponse",

    # Events
    "ResourceEventType",
    "ResourceEvent",
    "OperationResponse",
    "SyncResponse",
]
