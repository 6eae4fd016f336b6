"""
Shipping resource schemas for validation and serialization.

A shipping resource is a packaging box or a carrier service held by one
warehouse. Every warehouse keeps its own copy of both catalogs; resources
come from a carrier catalog sync (provider origin) or from the user
(custom origin: created or duplicated).
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import Field, model_validator

from models.base import BaseSchema


class ResourceKind(str, Enum):
    """Resource catalogs kept per warehouse."""
    BOX = "box"
    SERVICE = "service"


class ResourceOrigin(str, Enum):
    """Where a resource came from."""
    PROVIDER = "provider"  # Carrier catalog, refreshed on sync
    CUSTOM = "custom"      # Created or duplicated by the user, never touched by sync


class ScopeType(str, Enum):
    """Warehouses a custom resource was created against."""
    ALL = "all"
    SPECIFIC = "specific"


class AvailableFor(str, Enum):
    """Destination types a resource can be used for."""
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"
    BOTH = "both"


class ActivationStatus(str, Enum):
    """Aggregate active state of a resource across warehouses."""
    ALL_ENABLED = "all_enabled"
    ALL_DISABLED = "all_disabled"
    PARTIAL = "partial"


# ===================
# VALUE OBJECTS
# ===================

class Dimensions(BaseSchema):
    """Box dimensions. All zero means the user still has to set them."""

    length: float = Field(default=0, ge=0)
    width: float = Field(default=0, ge=0)
    height: float = Field(default=0, ge=0)
    unit: Literal["in", "cm"] = "in"

    @property
    def is_complete(self) -> bool:
        """True when all three dimensions are set."""
        return self.length > 0 and self.width > 0 and self.height > 0

    @property
    def is_zero(self) -> bool:
        return self.length == 0 and self.width == 0 and self.height == 0


class WeightLimits(BaseSchema):
    """Weight limits. max_weight is carrier-owned, tare_weight is user-set."""

    max_weight: float = Field(default=0, ge=0, description="Carrier weight limit")
    tare_weight: float = Field(default=0, ge=0, description="Empty box weight")
    unit: Literal["lbs", "kg", "oz"] = "lbs"


class CarrierIdentity(BaseSchema):
    """
    Identity of a resource in its carrier's catalog.

    Boxes: carrier_code is the carrier, sub_class the mail class and
    package_code the carrier's container code. Services: carrier_code is
    the carrier and sub_class the service code.
    """

    carrier_code: str = Field(..., min_length=1, description="Carrier, e.g. USPS")
    sub_class: str = Field(..., description="Mail class (boxes) or service code (services)")
    package_code: str = Field(default="", description="Container code (boxes only)")


class ServiceFeatures(BaseSchema):
    """Features a carrier service includes."""

    tracking_included: bool = False
    signature_available: bool = False
    insurance_available: bool = False
    saturday_delivery: bool = False
    max_insurance_value: Optional[float] = None


class ServiceRestrictions(BaseSchema):
    """Carrier limits on a service."""

    max_weight: Optional[float] = None
    max_dimensions: Optional[Dimensions] = None
    prohibited_countries: list[str] = Field(default_factory=list)


class PartitionScope(BaseSchema):
    """
    Warehouses a resource was created against.

    ALL: created from the all-warehouses view (or carrier-provided).
    SPECIFIC: created inside one warehouse; no sibling exists elsewhere.
    """

    type: ScopeType = ScopeType.ALL
    partition_id: Optional[str] = None

    @model_validator(mode="after")
    def check_partition_id(self) -> "PartitionScope":
        if self.type == ScopeType.SPECIFIC and not self.partition_id:
            raise ValueError("specific scope requires a partition_id")
        if self.type == ScopeType.ALL and self.partition_id is not None:
            raise ValueError("all scope cannot name a partition_id")
        return self

    @classmethod
    def all_partitions(cls) -> "PartitionScope":
        return cls(type=ScopeType.ALL)

    @classmethod
    def specific(cls, partition_id: str) -> "PartitionScope":
        return cls(type=ScopeType.SPECIFIC, partition_id=partition_id)

    @property
    def is_specific(self) -> bool:
        return self.type == ScopeType.SPECIFIC


# ===================
# RESOURCE SCHEMAS
# ===================

class ProviderItem(BaseSchema):
    """
    One entry of a carrier catalog, as returned by a sync.

    Carries no id and no per-warehouse state; the merge turns it into a
    provider resource.
    """

    kind: ResourceKind
    carrier: CarrierIdentity
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)

    # Boxes
    dimensions: Optional[Dimensions] = None
    weight: Optional[WeightLimits] = None
    is_editable: bool = Field(default=False, description="Dimensions are user-settable")
    flat_rate: bool = False
    flat_rate_price: Optional[float] = Field(None, ge=0)
    available_for: AvailableFor = AvailableFor.BOTH

    # Services
    service_type: Optional[AvailableFor] = None
    estimated_days: Optional[str] = None
    features: Optional[ServiceFeatures] = None
    restrictions: Optional[ServiceRestrictions] = None


class Resource(BaseSchema):
    """
    A box or service stored in one warehouse.

    Provider-owned fields are refreshed by a carrier sync; user fields
    (is_active, tare weight, cost, dimensions of editable boxes) are not.
    """

    id: str = Field(..., min_length=1, description="Resource id")
    kind: ResourceKind
    origin: ResourceOrigin
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    description: Optional[str] = Field(None, max_length=1000)
    carrier: Optional[CarrierIdentity] = Field(
        None,
        description="Carrier catalog identity (provider and carrier-derived resources)"
    )

    # Boxes
    dimensions: Optional[Dimensions] = None
    weight: Optional[WeightLimits] = None
    cost: Optional[float] = Field(None, ge=0, description="Box cost if applicable")
    flat_rate: bool = False
    flat_rate_price: Optional[float] = Field(None, ge=0)
    available_for: AvailableFor = AvailableFor.BOTH

    # Services
    service_type: Optional[AvailableFor] = None
    estimated_days: Optional[str] = None
    features: Optional[ServiceFeatures] = None
    restrictions: Optional[ServiceRestrictions] = None

    # Per-warehouse state
    is_active: bool = True
    is_editable: bool = False
    needs_completion: bool = Field(
        default=False,
        description="Editable box without dimensions; cannot be enabled"
    )

    # Scoping and duplication
    partition_scope: PartitionScope = Field(default_factory=PartitionScope.all_partitions)
    duplicate_group_id: Optional[str] = None
    original_resource_id: Optional[str] = None

    @property
    def is_provider(self) -> bool:
        return self.origin == ResourceOrigin.PROVIDER

    @property
    def is_grouped(self) -> bool:
        return self.duplicate_group_id is not None

    @property
    def has_complete_dimensions(self) -> bool:
        return self.dimensions is not None and self.dimensions.is_complete


class PartitionState(BaseSchema):
    """Active state of one resource in one warehouse."""

    partition_id: str
    is_active: bool


class ActivationSummary(BaseSchema):
    """Derived active state of a resource across the warehouses holding it."""

    status: ActivationStatus
    enabled_count: int = Field(..., ge=0)
    total: int = Field(..., ge=0)

    @property
    def is_active(self) -> bool:
        return self.status != ActivationStatus.ALL_DISABLED


class PartitionWrite(BaseSchema):
    """Full replacement resource list for one warehouse and kind."""

    partition_id: str
    kind: ResourceKind
    resources: list[Resource]


# ===================
# REQUEST SCHEMAS
# ===================

class ResourceCreate(BaseSchema):
    """
    Create a custom resource.

    Created in one warehouse when warehouse_id is given, otherwise in all.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    carrier: Optional[CarrierIdentity] = None
    dimensions: Optional[Dimensions] = None
    weight: Optional[WeightLimits] = None
    cost: Optional[float] = Field(None, ge=0)
    available_for: AvailableFor = AvailableFor.BOTH
    service_type: Optional[AvailableFor] = None
    estimated_days: Optional[str] = None
    is_active: bool = True
    warehouse_id: Optional[str] = Field(None, description="Create in this warehouse only")


class ResourceUpdate(BaseSchema):
    """
    Edit a resource.

    All fields optional - only provided fields are updated. Carrier-owned
    fields (name, description, available_for) are ignored for provider
    resources.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    dimensions: Optional[Dimensions] = None
    tare_weight: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    available_for: Optional[AvailableFor] = None
    is_active: Optional[bool] = None
    warehouse_id: Optional[str] = Field(None, description="Edit in this warehouse only")


class CarrierCredentials(BaseSchema):
    """Credentials for one carrier catalog (fields depend on the carrier)."""

    consumer_key: Optional[str] = None
    consumer_secret: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    account_number: Optional[str] = None
    environment: Literal["sandbox", "production"] = "sandbox"


class SyncRequest(BaseSchema):
    """Sync a resource catalog from carrier APIs."""

    carriers: list[str] = Field(..., min_length=1, description="Carriers to sync")
    credentials: dict[str, CarrierCredentials] = Field(
        default_factory=dict,
        description="Credentials keyed by carrier"
    )
    warehouse_id: Optional[str] = Field(None, description="Sync this warehouse only")


class WarehouseActionRequest(BaseSchema):
    """Toggle or duplicate in one warehouse (warehouse_id) or in all (None)."""

    warehouse_id: Optional[str] = None


# ===================
# RESPONSE SCHEMAS
# ===================

class ResourceListResponse(BaseSchema):
    """Resources of one warehouse."""

    warehouse_id: str
    kind: ResourceKind
    data: list[Resource]
    total: int


class AggregateEntry(BaseSchema):
    """One deduplicated resource of the all-warehouses view."""

    resource: Resource
    summary: ActivationSummary
    states: list[PartitionState]


class AggregateResponse(BaseSchema):
    """All-warehouses view of one resource kind."""

    kind: ResourceKind
    warehouse_ids: list[str]
    data: list[AggregateEntry]
    total: int
