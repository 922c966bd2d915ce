import pandas as pd

from listing_harvester.listings import (
    NOT_AVAILABLE,
    flatten_listing,
    flatten_payload,
    listings_frame,
)


def make_listing(**overrides) -> dict:
    """Helper: a fully populated listing; override or drop keys as needed."""
    base = {
        "Id": "27012345",
        "MlsNumber": "A2123456",
        "RelativeDetailsURL": "/real-estate/27012345/101-1-main-st-calgary",
        "TimeOnRealtor": "5 hours ago",
        "Property": {
            "Address": {"AddressText": "101 1 Main Street SW | Calgary, Alberta T2P1J9"},
            "OwnershipType": "Condominium/Strata",
            "Price": "$325,000",
            "PriceUnformattedValue": "325000",
        },
        "Building": {"Type": "Apartment", "SizeInterior": "650 sqft"},
        "Individual": [
            {
                "Name": "Jane Agent",
                "Phones": [{"PhoneType": "Telephone", "AreaCode": "403", "PhoneNumber": "555-0100"}],
                "Websites": [{"Website": "https://jane.example", "WebsiteTypeId": "1"}],
                "Organization": {
                    "Name": "Example Realty",
                    "Address": {"AddressText": "1 Broker Way | Calgary, Alberta T2P0A1"},
                    "Phones": [{"PhoneType": "Fax", "AreaCode": "403", "PhoneNumber": "555-0199"}],
                    "Websites": [{"Website": "https://realty.example", "WebsiteTypeId": "1"}],
                    "Emails": [{"ContactId": "9876"}],
                },
            },
            {"Name": "Second Agent"},
        ],
    }
    base.update(overrides)
    return base


def test_full_listing_is_flattened():
    record = flatten_listing(make_listing())

    assert record.realtor_ca_listing_id == "27012345"
    assert record.mls_number == "A2123456"
    assert record.listing_full_address == "101 1 Main Street SW, Calgary, Alberta T2P1J9"
    assert record.listing_link == "https://www.realtor.ca/real-estate/27012345/101-1-main-st-calgary"
    assert record.price_formatted == "$325,000"
    assert record.price_unformatted == "325000"
    assert record.building_type == "Apartment"
    assert record.realtor_name == "Jane Agent"
    assert record.realtor_phones == [{"type": "Telephone", "number": "403-555-0100"}]
    assert record.realtor_websites == [{"Website": "https://jane.example", "WebsiteTypeId": "1"}]
    assert record.brokerage_name == "Example Realty"
    assert record.brokerage_address == "1 Broker Way, Calgary, Alberta T2P0A1"
    assert record.brokerage_phones == [{"type": "Fax", "number": "403-555-0199"}]
    assert record.brokerage_emails == [{"ContactId": "9876"}]


def test_listing_without_individual_uses_sentinels_and_empty_lists():
    listing = make_listing()
    del listing["Individual"]

    record = flatten_listing(listing).to_dict()

    assert record["realtor_name"] == NOT_AVAILABLE
    assert record["brokerage_name"] == NOT_AVAILABLE
    assert record["brokerage_address"] == NOT_AVAILABLE
    for key in ("realtor_phones", "realtor_websites", "brokerage_phones", "brokerage_websites", "brokerage_emails"):
        assert record[key] == []


def test_missing_listing_fields_default_to_not_available():
    record = flatten_listing({"Individual": []})

    assert record.realtor_ca_listing_id == NOT_AVAILABLE
    assert record.listing_full_address == NOT_AVAILABLE
    assert record.listing_link == NOT_AVAILABLE
    assert record.ownership_type == NOT_AVAILABLE
    assert record.size_interior == NOT_AVAILABLE
    assert record.price_unformatted is None


def test_custom_base_url_builds_link():
    record = flatten_listing(make_listing(), base_url="https://mirror.example")
    assert record.listing_link.startswith("https://mirror.example/real-estate/")


def test_payload_order_is_preserved():
    payload = {"Results": [make_listing(Id="a"), make_listing(Id="b")]}
    assert [r.realtor_ca_listing_id for r in flatten_payload(payload)] == ["a", "b"]


def test_payload_without_results_yields_nothing():
    assert flatten_payload({}) == []
    assert flatten_payload({"Results": None}) == []
    assert flatten_payload([]) == []


def test_listings_frame_has_one_row_per_listing():
    df = listings_frame(flatten_payload({"Results": [make_listing(), make_listing(Id="b")]}))
    assert isinstance(df, pd.DataFrame)
    assert len(df) == 2
    assert list(df["realtor_ca_listing_id"]) == ["27012345", "b"]
