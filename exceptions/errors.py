"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can return it unchanged.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "RESOURCE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# WAREHOUSE ERRORS
# ===================

class WarehouseNotFoundError(NotFoundError):
    """Warehouse not found."""

    def __init__(self, warehouse_id: str):
        super().__init__(
            resource="Warehouse",
            identifier=warehouse_id,
            code="WAREHOUSE_NOT_FOUND"
        )


class PartitionWriteFailedError(AppError):
    """
    One or more warehouse writes of a batch could not be persisted.

    Writes applied before the failure are not rolled back, so the details
    list which warehouses were saved and which were not.
    """

    def __init__(
        self,
        partition_id: str,
        succeeded: list[str],
        failed: dict[str, str]
    ):
        self.partition_id = partition_id
        self.succeeded = list(succeeded)
        self.failed = dict(failed)
        super().__init__(
            code="PARTITION_WRITE_FAILED",
            message=f"Failed to save shipping resources for {len(failed)} warehouse(s)",
            status_code=500,
            details={
                "partition_id": partition_id,
                "succeeded": self.succeeded,
                "failed": self.failed,
            }
        )


# ===================
# SHIPPING RESOURCE ERRORS
# ===================

class ResourceNotFoundError(NotFoundError):
    """Shipping resource (box or service) not found."""

    def __init__(self, resource_id: str):
        super().__init__(
            resource="Shipping resource",
            identifier=resource_id,
            code="RESOURCE_NOT_FOUND"
        )


class IncompleteResourceError(ValidationError):
    """Resource cannot be activated until its required fields are set."""

    def __init__(self, resource_id: str, partition_ids: Optional[list[str]] = None):
        super().__init__(
            code="RESOURCE_INCOMPLETE",
            message="Set the box dimensions before enabling it",
            details={"id": resource_id, "partition_ids": partition_ids or []}
        )


class NotDeletableError(ConflictError):
    """Carrier-provided resources can be disabled but not deleted."""

    def __init__(self, resource_id: str):
        super().__init__(
            code="RESOURCE_NOT_DELETABLE",
            message="Carrier resources cannot be deleted, only disabled",
            details={"id": resource_id}
        )


# ===================
# CARRIER ERRORS
# ===================

class CredentialsMissingError(AppError):
    """Carrier credentials are missing or incomplete (400)."""

    def __init__(self, carrier: str, missing: Optional[list[str]] = None):
        self.carrier = carrier
        super().__init__(
            code="CARRIER_CREDENTIALS_MISSING",
            message=f"{carrier} credentials are required",
            status_code=400,
            details={"carrier": carrier, "missing": missing or []}
        )


class CarrierSyncError(ExternalServiceError):
    """Carrier catalog could not be fetched."""

    def __init__(self, carrier: str, message: str, details: Optional[dict] = None):
        self.carrier = carrier
        super().__init__(
            service="carrier_sync",
            message=f"Failed to sync {carrier} catalog: {message}",
            details={"carrier": carrier, **(details or {})}
        )
