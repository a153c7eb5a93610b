"""
Settlement calculator.

Accumulates in Decimal and rounds once at the end (half up, two places) so
many lines do not drift. The tax convention used is always reported back.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.pos.pipeline.classifier import classify, contribution
from app.pos.schemas import (
    FieldRequirementProfile,
    Jurisdiction,
    LineItem,
    LineItemKind,
    Merchant,
    SettledLine,
    Settlement,
    TaxConvention,
)

CENTS = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def fmt(value: Decimal) -> str:
    """Two-place presentation, e.g. Decimal('3') -> '3.00'."""
    return f"{money(value):.2f}"


def tax_for(subtotal: Decimal, convention: TaxConvention, rate: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(tax_amount, total)`` for an unrounded subtotal."""
    if convention is TaxConvention.ITEMIZED:
        tax = subtotal * rate
        return tax, subtotal + tax
    if convention is TaxConvention.INCLUDED:
        # displayed prices already carry the tax; back it out, total unchanged
        tax = subtotal - subtotal / (Decimal(1) + rate)
        return tax, subtotal
    return Decimal(0), subtotal


def settle_lines(
    lines: list[SettledLine],
    convention: TaxConvention,
    rate: Decimal = Decimal(0),
) -> Settlement:
    subtotal = sum((line.amount for line in lines), Decimal(0))
    fuel_volume = sum(
        (line.item.declared_quantity for line in lines if line.kind is not LineItemKind.CASH_ADVANCE),
        Decimal(0),
    )
    tax, total = tax_for(subtotal, convention, rate)
    return Settlement(
        lines=tuple(lines),
        subtotal=money(subtotal),
        tax_amount=money(tax),
        total=money(total),
        tax_convention=convention,
        tax_rate=rate if convention is not TaxConvention.ZERO else Decimal(0),
        fuel_volume=fuel_volume,
    )


def settle(
    items: list[LineItem],
    merchant: Merchant,
    jurisdiction: Jurisdiction,
    profile: FieldRequirementProfile,
    rate: Decimal = Decimal(0),
) -> Settlement:
    """Classify every item and aggregate under the profile's tax convention."""
    lines = []
    for item in items:
        kind = classify(item, merchant, jurisdiction, profile)
        lines.append(SettledLine(item=item, kind=kind, amount=contribution(item, kind)))
    return settle_lines(lines, profile.tax_convention, rate)
