"""
Line-item classifier.

An item's kind comes from the merchant's fixed catalog tag when the catalog
carries one. Otherwise the display name is matched against substring
patterns, which is how the legacy item data has always been read. When more
than one pattern matches, KIND_PRECEDENCE decides.
"""
from __future__ import annotations

from decimal import Decimal

from app.pos.pipeline.errors import ClassificationAmbiguity
from app.pos.schemas import (
    FieldRequirementProfile,
    Jurisdiction,
    LineItem,
    LineItemKind,
    Merchant,
)

# lower-case substrings per special kind
KIND_PATTERNS: dict[LineItemKind, list[str]] = {
    LineItemKind.CASH_ADVANCE: ["cash advance"],
}

# first listed wins when several kinds match one name
KIND_PRECEDENCE: list[LineItemKind] = [
    LineItemKind.CASH_ADVANCE,
    LineItemKind.VOLUME_ONLY,
]


def _tagged_kind(item: LineItem, merchant: Merchant, jurisdiction: Jurisdiction) -> LineItemKind | None:
    catalog = merchant.catalog_for(jurisdiction) or ()
    for entry in catalog:
        if entry.name.strip().lower() == item.name.strip().lower():
            return entry.kind
    return None


def _pattern_kinds(name: str) -> list[LineItemKind]:
    lowered = name.lower()
    return [
        kind for kind, patterns in KIND_PATTERNS.items()
        if any(p in lowered for p in patterns)
    ]


def is_cash_advance(name: str) -> bool:
    return LineItemKind.CASH_ADVANCE in _pattern_kinds(name)


def classify(
    item: LineItem,
    merchant: Merchant,
    jurisdiction: Jurisdiction,
    profile: FieldRequirementProfile,
) -> LineItemKind:
    """Return the settlement kind of one item.

    Brand volume-only handling is a candidate for every non-special item;
    cash advance outranks it.
    """
    tagged = _tagged_kind(item, merchant, jurisdiction)
    candidates: list[LineItemKind] = []
    if tagged is LineItemKind.CASH_ADVANCE:
        candidates.append(tagged)
    elif tagged is None:
        candidates.extend(_pattern_kinds(item.name))
    if profile.volume_only:
        candidates.append(LineItemKind.VOLUME_ONLY)

    if not candidates:
        return LineItemKind.FUEL
    for kind in KIND_PRECEDENCE:
        if kind in candidates:
            return kind
    raise ClassificationAmbiguity(item.name, [k.value for k in candidates])


def contribution(item: LineItem, kind: LineItemKind) -> Decimal:
    """Amount one item adds to the subtotal, unrounded."""
    if kind is LineItemKind.CASH_ADVANCE:
        # qty carries the dollar count; it is never a multiplier
        if item.multiplier_qty is not None:
            return Decimal(item.multiplier_qty)
        return item.unit_price
    # qty is a printed count for fuel; volume-only items do not print it at all
    return item.declared_quantity * item.unit_price


def printed_qty(item: LineItem, kind: LineItemKind) -> str:
    if kind is LineItemKind.VOLUME_ONLY:
        return ""
    return str(item.multiplier_qty or 1)
