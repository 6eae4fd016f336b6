"""
Custom exceptions module.

Routes convert any AppError into its JSON form with to_dict().
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Warehouses
    WarehouseNotFoundError,
    PartitionWriteFailedError,

    # Shipping resources
    ResourceNotFoundError,
    IncompleteResourceError,
    NotDeletableError,

    # Carriers
    CredentialsMissingError,
    CarrierSyncError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Warehouses
    "WarehouseNotFoundError",
    "PartitionWriteFailedError",

    # Shipping resources
    "ResourceNotFoundError",
    "IncompleteResourceError",
    "NotDeletableError",

    # Carriers
    "CredentialsMissingError",
    "CarrierSyncError",
]
