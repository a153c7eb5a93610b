"""
Unit & currency profiles, plus parsing of the jurisdiction and tender labels
the form sends.
"""
from __future__ import annotations

from app.pos.pipeline.errors import ValidationError
from app.pos.schemas import Jurisdiction, TenderType, UnitProfile

UNIT_PROFILES: dict[Jurisdiction, UnitProfile] = {
    Jurisdiction.USA: UnitProfile(
        jurisdiction=Jurisdiction.USA,
        volume_unit="gal",
        volume_label="Gallons",
        price_label="Price/Gal",
        currency="USD",
        tax_included_in_price=False,
    ),
    Jurisdiction.CANADA: UnitProfile(
        jurisdiction=Jurisdiction.CANADA,
        volume_unit="L",
        volume_label="Liters",
        price_label="$ / L",
        currency="CAD",
        tax_included_in_price=True,
    ),
}

COUNTRY_LABELS: dict[str, Jurisdiction] = {
    "usa": Jurisdiction.USA,
    "us": Jurisdiction.USA,
    "united states": Jurisdiction.USA,
    "united states of america": Jurisdiction.USA,
    "canada": Jurisdiction.CANADA,
    "ca": Jurisdiction.CANADA,
}

# Legacy wire labels the form still posts
TENDER_LABELS: dict[str, TenderType] = {
    "cash": TenderType.CASH,
    "visa": TenderType.VISA,
    "master": TenderType.MASTERCARD,
    "mastercard": TenderType.MASTERCARD,
    "interac": TenderType.INTERAC,
    "american express": TenderType.AMERICAN_EXPRESS,
    "americanexpress": TenderType.AMERICAN_EXPRESS,
    "amex": TenderType.AMERICAN_EXPRESS,
    "efs": TenderType.EFS,
    "tch": TenderType.TCH,
}


def unit_profile(jurisdiction: Jurisdiction) -> UnitProfile:
    return UNIT_PROFILES[jurisdiction]


def parse_jurisdiction(label: str | None) -> Jurisdiction:
    key = (label or "").strip().lower()
    if not key:
        raise ValidationError.single("country", "country is required")
    try:
        return COUNTRY_LABELS[key]
    except KeyError:
        raise ValidationError.single("country", f"unsupported country {label!r}") from None


def parse_tender(label: str | None) -> TenderType:
    """Missing payment method means cash, as the legacy form assumed."""
    key = (label or "").strip().lower()
    if not key:
        return TenderType.CASH
    try:
        return TENDER_LABELS[key]
    except KeyError:
        raise ValidationError.single("paymentMethod", f"unsupported payment method {label!r}") from None


def wire_label(tender: TenderType) -> str:
    """The label receipts print for a tender."""
    return {
        TenderType.MASTERCARD: "Master",
        TenderType.AMERICAN_EXPRESS: "American Express",
    }.get(tender, tender.value)
