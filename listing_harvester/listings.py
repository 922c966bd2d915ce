"""
Flattening of the raw PropertySearch payload into report rows.

Pure field mapping: every listing in the payload's `Results` array becomes
one ListingRecord. Missing scalars become NOT_AVAILABLE, missing lists
become empty lists, so every record has every field.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

NOT_AVAILABLE = "N/A"
REALTOR_BASE_URL = "https://www.realtor.ca"


@dataclass
class ListingRecord:
    # Listing
    realtor_ca_listing_id: str
    mls_number: str
    listing_full_address: str
    listing_link: str
    ownership_type: str
    price_formatted: str
    price_unformatted: Any
    building_type: str
    size_interior: str
    time_on_realtor: str
    # Realtor (first Individual on the listing)
    realtor_name: str = NOT_AVAILABLE
    realtor_phones: list[dict] = field(default_factory=list)
    realtor_websites: list[dict] = field(default_factory=list)
    # Brokerage (that Individual's Organization)
    brokerage_name: str = NOT_AVAILABLE
    brokerage_address: str = NOT_AVAILABLE
    brokerage_phones: list[dict] = field(default_factory=list)
    brokerage_websites: list[dict] = field(default_factory=list)
    brokerage_emails: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _dig(obj: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _or_na(value: Any) -> Any:
    return value if value else NOT_AVAILABLE


def _address(value: Any) -> str:
    # The API separates street and city with " | "; only the first is replaced.
    return value.replace(" | ", ", ", 1) if value else NOT_AVAILABLE


def _phones(entries: Any) -> list[dict]:
    return [
        {"type": p.get("PhoneType"), "number": f"{p.get('AreaCode')}-{p.get('PhoneNumber')}"}
        for p in entries or []
    ]


def flatten_listing(listing: dict, base_url: str = REALTOR_BASE_URL) -> ListingRecord:
    individuals = listing.get("Individual") or []
    realtor = individuals[0] if individuals else {}
    organization = realtor.get("Organization") or {}
    relative_link = listing.get("RelativeDetailsURL")

    return ListingRecord(
        realtor_ca_listing_id=_or_na(listing.get("Id")),
        mls_number=_or_na(listing.get("MlsNumber")),
        listing_full_address=_address(_dig(listing, "Property", "Address", "AddressText")),
        listing_link=f"{base_url}{relative_link}" if relative_link else NOT_AVAILABLE,
        ownership_type=_or_na(_dig(listing, "Property", "OwnershipType")),
        price_formatted=_or_na(_dig(listing, "Property", "Price")),
        price_unformatted=_dig(listing, "Property", "PriceUnformattedValue") or None,
        building_type=_or_na(_dig(listing, "Building", "Type")),
        size_interior=_or_na(_dig(listing, "Building", "SizeInterior")),
        time_on_realtor=_or_na(listing.get("TimeOnRealtor")),
        realtor_name=_or_na(realtor.get("Name")),
        realtor_phones=_phones(realtor.get("Phones")),
        realtor_websites=list(realtor.get("Websites") or []),
        brokerage_name=_or_na(organization.get("Name")),
        brokerage_address=_address(_dig(organization, "Address", "AddressText")),
        brokerage_phones=_phones(organization.get("Phones")),
        brokerage_websites=list(organization.get("Websites") or []),
        brokerage_emails=list(organization.get("Emails") or []),
    )


def flatten_payload(payload: Any, base_url: str = REALTOR_BASE_URL) -> list[ListingRecord]:
    """Flatten every listing in payload["Results"]; anything else yields []."""
    results = payload.get("Results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        return []
    return [flatten_listing(listing, base_url) for listing in results]


def listings_frame(records: list[ListingRecord]) -> pd.DataFrame:
    return pd.DataFrame([r.to_dict() for r in records])
