"""
Carrier catalog integration.

Fetches the box and service catalogs offered by each carrier account and
translates them into ProviderItems. Each carrier is fetched independently:
missing credentials or a failed request is recorded for that carrier and
the others proceed. A carrier that returns nothing is reported as an error,
never as an empty catalog.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import requests
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from config.shipping import SUPPORTED_CARRIERS, normalize_carrier
from exceptions import AppError, CarrierSyncError, CredentialsMissingError
from models.shipping_resource import (
    CarrierCredentials,
    ProviderItem,
    ResourceKind,
)

logger = structlog.get_logger(__name__)


# Credential fields each carrier needs
REQUIRED_CREDENTIALS = {
    "USPS": ("consumer_key", "consumer_secret"),
    "UPS": ("account_number", "access_token"),
}

# Carrier package types whose dimensions the user chooses ("your own box")
VARIABLE_PACKAGE_TYPES = {"PACKAGE", "PACKAGE_VARIABLE", "PACKAGE_GROUND", "CUSTOMER_PACKAGING"}


@dataclass
class CatalogFetchResult:
    """Catalog entries from every carrier that succeeded."""
    items: list[ProviderItem] = field(default_factory=list)
    synced_carriers: list[str] = field(default_factory=list)
    errors: dict[str, AppError] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return not self.synced_carriers and bool(self.errors)


# ===================
# TRANSLATION
# ===================

def _dimensions(raw: Optional[dict]) -> Optional[dict]:
    if not raw:
        return None
    return {
        "length": raw.get("length", 0) or 0,
        "width": raw.get("width", 0) or 0,
        "height": raw.get("height", 0) or 0,
        "unit": raw.get("unit", "in"),
    }


def _weight(raw: Optional[dict]) -> Optional[dict]:
    if not raw:
        return None
    return {
        "max_weight": raw.get("maxWeight", raw.get("max_weight", 0)) or 0,
        "tare_weight": raw.get("tareWeight", raw.get("tare_weight", 0)) or 0,
        "unit": raw.get("unit", "lbs"),
    }


def box_to_provider_item(carrier: str, raw: dict[str, Any]) -> ProviderItem:
    """
    Translate one carrier container entry into a ProviderItem.

    Containers whose package type is variable are editable: the carrier
    does not fix their dimensions.
    """
    package_type = (raw.get("packageType") or "").upper()
    package_code = raw.get("carrierCode") or raw.get("code") or package_type
    is_editable = bool(raw.get("isEditable")) or package_type in VARIABLE_PACKAGE_TYPES \
        or package_code in VARIABLE_PACKAGE_TYPES

    return ProviderItem.model_validate({
        "kind": ResourceKind.BOX,
        "carrier": {
            "carrier_code": carrier,
            "sub_class": raw.get("mailClass") or "",
            "package_code": package_code,
        },
        "name": raw["name"],
        "description": raw.get("description"),
        "dimensions": _dimensions(raw.get("dimensions")),
        "weight": _weight(raw.get("weight")),
        "is_editable": is_editable,
        "flat_rate": bool(raw.get("flatRate")),
        "flat_rate_price": raw.get("flatRatePrice"),
        "available_for": raw.get("availableFor") or "both",
    })


def service_to_provider_item(carrier: str, raw: dict[str, Any]) -> ProviderItem:
    """Translate one carrier service entry into a ProviderItem."""
    features = raw.get("features") or {}
    restrictions = raw.get("restrictions") or {}

    return ProviderItem.model_validate({
        "kind": ResourceKind.SERVICE,
        "carrier": {
            "carrier_code": carrier,
            "sub_class": raw["serviceCode"],
        },
        "name": raw.get("displayName") or raw.get("serviceName") or raw["serviceCode"],
        "description": raw.get("description"),
        "service_type": raw.get("serviceType"),
        "available_for": raw.get("serviceType") or "both",
        "estimated_days": raw.get("estimatedDays"),
        "features": {
            "tracking_included": bool(features.get("trackingIncluded")),
            "signature_available": bool(features.get("signatureAvailable")),
            "insurance_available": bool(features.get("insuranceAvailable")),
            "saturday_delivery": bool(features.get("saturdayDelivery")),
            "max_insurance_value": features.get("maxInsuranceValue"),
        } if features else None,
        "restrictions": {
            "max_weight": restrictions.get("maxWeight"),
            "max_dimensions": _dimensions(restrictions.get("maxDimensions")),
            "prohibited_countries": restrictions.get("prohibitedCountries") or [],
        } if restrictions else None,
    })


TRANSLATORS = {
    ResourceKind.BOX: box_to_provider_item,
    ResourceKind.SERVICE: service_to_provider_item,
}


# ===================
# CLIENT
# ===================

class CarrierCatalogClient:
    """
    HTTP client for carrier catalogs.

    GET {base_url}/boxes or {base_url}/services, authenticated per carrier.
    """

    def __init__(
        self,
        base_urls: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_urls = base_urls if base_urls is not None else settings.carrier_catalog_urls
        self.timeout = timeout if timeout is not None else settings.carrier_timeout_seconds
        self.session = session or requests.Session()

    def fetch_catalog(
        self,
        kind: ResourceKind,
        carriers: list[str],
        credentials: dict[str, CarrierCredentials],
    ) -> CatalogFetchResult:
        """
        Fetch one resource kind from several carriers.

        Args:
            kind: box or service
            carriers: Carriers to fetch
            credentials: Credentials keyed by carrier name

        Returns:
            CatalogFetchResult; failed carriers are listed in errors
        """
        result = CatalogFetchResult()
        normalized_credentials = {normalize_carrier(k): v for k, v in credentials.items()}

        for carrier in dict.fromkeys(normalize_carrier(c) for c in carriers):
            try:
                items = self.fetch_carrier(carrier, kind, normalized_credentials.get(carrier))
            except (CredentialsMissingError, CarrierSyncError) as e:
                logger.warning(
                    "carrier_catalog_skipped",
                    carrier=carrier,
                    kind=kind.value,
                    code=e.code,
                    error=e.message,
                )
                result.errors[carrier] = e
                continue

            result.items.extend(items)
            result.synced_carriers.append(carrier)

        logger.info(
            "carrier_catalog_fetched",
            kind=kind.value,
            items=len(result.items),
            synced=result.synced_carriers,
            failed=sorted(result.errors),
        )
        return result

    def fetch_carrier(
        self,
        carrier: str,
        kind: ResourceKind,
        credentials: Optional[CarrierCredentials],
    ) -> list[ProviderItem]:
        """
        Fetch one kind from one carrier.

        Raises:
            CredentialsMissingError: If required credential fields are missing
            CarrierSyncError: If the carrier is unsupported, the request
                fails, or the catalog is empty
        """
        if carrier not in SUPPORTED_CARRIERS or carrier not in self.base_urls:
            raise CarrierSyncError(carrier, "carrier sync is not supported")

        self._check_credentials(carrier, credentials)

        url = f"{self.base_urls[carrier].rstrip('/')}/{'boxes' if kind == ResourceKind.BOX else 'services'}"
        logger.debug("fetching_carrier_catalog", carrier=carrier, kind=kind.value, url=url)

        try:
            response = self.session.get(
                url,
                params={"environment": credentials.environment},
                timeout=self.timeout,
                **self._auth(carrier, credentials),
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error("carrier_request_failed", carrier=carrier, error=str(e))
            raise CarrierSyncError(carrier, str(e))
        except ValueError as e:
            raise CarrierSyncError(carrier, f"invalid response: {e}")

        raw_items = payload.get("items", []) if isinstance(payload, dict) else payload
        if not raw_items:
            raise CarrierSyncError(carrier, "carrier returned an empty catalog")

        translate = TRANSLATORS[kind]
        try:
            return [translate(carrier, raw) for raw in raw_items]
        except (KeyError, PydanticValidationError) as e:
            logger.error("carrier_catalog_invalid", carrier=carrier, error=str(e))
            raise CarrierSyncError(carrier, f"invalid catalog entry: {e}")

    def _check_credentials(self, carrier: str, credentials: Optional[CarrierCredentials]) -> None:
        required = REQUIRED_CREDENTIALS.get(carrier, ())
        if credentials is None:
            raise CredentialsMissingError(carrier, list(required))
        missing = [name for name in required if not getattr(credentials, name)]
        if missing:
            raise CredentialsMissingError(carrier, missing)

    @staticmethod
    def _auth(carrier: str, credentials: CarrierCredentials) -> dict[str, Any]:
        if carrier == "USPS":
            return {"auth": (credentials.consumer_key, credentials.consumer_secret)}
        return {
            "headers": {
                "Authorization": f"Bearer {credentials.access_token}",
                "AccountNumber": credentials.account_number,
            }
        }


# ===================
# SINGLETON
# ===================

_catalog_client: Optional[CarrierCatalogClient] = None


def get_carrier_catalog_client() -> CarrierCatalogClient:
    """Get or create CarrierCatalogClient instance."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = CarrierCatalogClient()
    return _catalog_client
