"""
Merchant reference table.

Loaded once at import and never mutated. Company names coming from the
catalog database are normalized to a brand key by alias substring match.
"""
from __future__ import annotations

from app.pos.schemas import CatalogItem, Jurisdiction, LineItemKind, Merchant, TenderType

USA = frozenset({Jurisdiction.USA})
CANADA = frozenset({Jurisdiction.CANADA})
BOTH = frozenset({Jurisdiction.USA, Jurisdiction.CANADA})

US_TENDERS = frozenset({
    TenderType.CASH,
    TenderType.VISA,
    TenderType.MASTERCARD,
    TenderType.AMERICAN_EXPRESS,
    TenderType.EFS,
    TenderType.TCH,
})
ALL_TENDERS = frozenset(TenderType)

GENERIC = "generic"
CLASSIC = "classic"

MERCHANTS: dict[str, Merchant] = {
    m.key: m
    for m in [
        Merchant(
            key="one9",
            display_name="ONE 9 Fuel Network",
            brand_family="truck_stop",
            aliases=("one 9", "one9"),
            jurisdictions=USA,
            tenders=US_TENDERS,
        ),
        Merchant(
            key="pilot",
            display_name="Pilot Travel Centers",
            brand_family="truck_stop",
            aliases=("pilot",),
            jurisdictions=USA,
            tenders=US_TENDERS,
        ),
        Merchant(
            key="flyingj",
            display_name="Flying J",
            brand_family="truck_stop",
            aliases=("flying j",),
            jurisdictions=BOTH,
            tenders=ALL_TENDERS,
            fixed_catalog={
                Jurisdiction.CANADA: (
                    CatalogItem(name="Truck Diesel", kind=LineItemKind.FUEL),
                    CatalogItem(name="DEF Fuel Item", kind=LineItemKind.FUEL),
                ),
            },
        ),
        Merchant(
            key="loves",
            display_name="Love's Travel Stops",
            brand_family="truck_stop",
            aliases=("love's", "loves", "love"),
            jurisdictions=USA,
            tenders=US_TENDERS,
            fixed_catalog={
                Jurisdiction.USA: (
                    CatalogItem(name="DIESEL", kind=LineItemKind.FUEL),
                    CatalogItem(name="CASH ADVANCE", kind=LineItemKind.CASH_ADVANCE),
                    CatalogItem(name="DEF", kind=LineItemKind.FUEL),
                    CatalogItem(name="REEFER", kind=LineItemKind.FUEL),
                ),
            },
        ),
        Merchant(
            key="ta",
            display_name="TravelCenters of America",
            brand_family="truck_stop",
            aliases=("travelcenters", "travel centers", "ta petro"),
            jurisdictions=USA,
            tenders=US_TENDERS,
        ),
        Merchant(
            key="husky",
            display_name="Husky",
            brand_family="canadian_fuel",
            aliases=("husky",),
            jurisdictions=CANADA,
            tenders=ALL_TENDERS,
        ),
        Merchant(
            key="petrocanada",
            display_name="Petro-Canada",
            brand_family="canadian_fuel",
            aliases=("petro-canada", "petro canada", "petrocanada"),
            jurisdictions=CANADA,
            tenders=ALL_TENDERS,
        ),
        Merchant(
            key="pearson",
            display_name="Pearson Mart Esso",
            brand_family="canadian_fuel",
            aliases=("pearson",),
            jurisdictions=CANADA,
            tenders=ALL_TENDERS,
        ),
        Merchant(
            key="bvd",
            display_name="BVD Petroleum",
            brand_family="canadian_fuel",
            aliases=("bvd petroleum", "bvd"),
            jurisdictions=CANADA,
            tenders=ALL_TENDERS,
        ),
        Merchant(
            key=GENERIC,
            display_name="Generic Fuel",
            brand_family="generic",
            jurisdictions=BOTH,
            tenders=ALL_TENDERS,
        ),
        Merchant(
            key=CLASSIC,
            display_name="Classic Design",
            brand_family="retail",
            jurisdictions=BOTH,
            tenders=ALL_TENDERS,
        ),
    ]
}


def get_merchant(key: str) -> Merchant:
    return MERCHANTS.get(key, MERCHANTS[GENERIC])


def merchant_for(company_name: str | None, design_id: int | None = None) -> Merchant:
    """Map a company name to its brand.

    Unknown names are generic fuel merchants, unless the caller picked a
    classic design explicitly.
    """
    name = (company_name or "").lower()
    for merchant in MERCHANTS.values():
        if any(alias in name for alias in merchant.aliases):
            return merchant
    if design_id is not None:
        return MERCHANTS[CLASSIC]
    return MERCHANTS[GENERIC]


def supported_triples():
    """Every (merchant, jurisdiction, tender) the table declares reachable."""
    for merchant in MERCHANTS.values():
        for jurisdiction in sorted(merchant.jurisdictions, key=lambda j: j.value):
            for tender in sorted(merchant.tenders, key=lambda t: t.value):
                yield merchant, jurisdiction, tender
