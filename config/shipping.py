"""
Shipping resource constants.

Storage names, carrier lists and naming rules shared by the reconciliation
services and the store adapter.
"""

# =============================================================================
# STORAGE
# =============================================================================

WAREHOUSES_TABLE = "warehouses"

# One row per (warehouse_id, kind) holding the warehouse's full resource list
RESOURCES_TABLE = "warehouse_shipping_resources"
RESOURCES_CONFLICT_COLUMNS = "warehouse_id,kind"

# =============================================================================
# CARRIERS
# =============================================================================

# Carriers with a catalog client. Anything else is reported per-carrier.
SUPPORTED_CARRIERS = ("USPS", "UPS")

# Aliases the dashboard has used for the same carrier
CARRIER_ALIASES = {
    "FEDEX": "FedEx",
    "FedEx": "FedEx",
    "usps": "USPS",
    "ups": "UPS",
}

# =============================================================================
# RESOURCES
# =============================================================================

# Prefix given to every duplicated resource name
COPY_NAME_PREFIX = "Copy of "

# Prefixes for generated ids (readable in storage dumps)
PROVIDER_ID_PREFIX = "prv"
CUSTOM_ID_PREFIX = "custom"
GROUP_ID_PREFIX = "duplicate-group"


def normalize_carrier(carrier: str) -> str:
    """
    Normalize a carrier name to its canonical spelling.

    Args:
        carrier: Carrier name as entered ("usps", "FEDEX", "UPS")

    Returns:
        Canonical carrier name ("USPS", "FedEx", "UPS")
    """
    carrier = carrier.strip()
    return CARRIER_ALIASES.get(carrier, carrier.upper() if carrier.upper() in SUPPORTED_CARRIERS else carrier)
