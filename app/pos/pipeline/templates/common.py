"""
Shared pieces for receipt templates: the render context, line helpers, and the
block builders several layouts reuse.

A block builder takes a RenderContext and returns a list of Lines. It reads
nothing else and performs no I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from app.pos.pipeline.classifier import printed_qty
from app.pos.pipeline.errors import MissingContext
from app.pos.pipeline.settlement import fmt
from app.pos.pipeline.units import wire_label
from app.pos.schemas import (
    BlockKind,
    Line,
    LineItemKind,
    ResolvedFields,
    Settlement,
    StoreContext,
    SyntheticAuthorization,
    TaxConvention,
    TemplateKey,
    TenderType,
    UnitProfile,
)

WIDTH = 40


@dataclass(frozen=True)
class RenderContext:
    key: TemplateKey
    settlement: Settlement
    fields: ResolvedFields
    auth: SyntheticAuthorization
    store: StoreContext
    units: UnitProfile
    receipt_number: str
    issued_at: datetime

    @property
    def tender(self) -> TenderType:
        return self.key.tender

    def value(self, name: str) -> str:
        """A visible field's value; hidden fields always read as ''."""
        return self.fields.value(name)

    def need(self, attr: str) -> str:
        value = getattr(self.store, attr)
        if not value:
            raise MissingContext(attr)
        return value

    def date(self, pattern: str = "%m/%d/%Y") -> str:
        return self.issued_at.strftime(pattern)

    def time(self, pattern: str = "%H:%M:%S") -> str:
        return self.issued_at.strftime(pattern)

    @property
    def short_number(self) -> str:
        return self.receipt_number.replace("REC-", "")


Builder = Callable[[RenderContext], list[Line]]


@dataclass(frozen=True)
class Template:
    """A layout: a design label, its block sequence, and its tender blocks."""
    design: str
    blocks: list[tuple[BlockKind, Optional[Builder]]]  # None marks the tender slot
    tenders: dict[TenderType, Builder] = field(default_factory=dict)
    default_tender: Optional[Builder] = None

    def tender_builder(self, tender: TenderType) -> Builder:
        return self.tenders.get(tender) or self.default_tender or card_tender


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------

def text(s: str, bold: bool = False) -> Line:
    return Line(text=s, bold=bold)


def center(s: str, bold: bool = False) -> Line:
    return Line(text=s, align="center", bold=bold)


def pair(left: str, right: str, bold: bool = False) -> Line:
    return Line(text=left, right=right, bold=bold)


def blank() -> Line:
    return Line(text="")


def rule(char: str = "-") -> Line:
    return Line(text=char * WIDTH)


def money_str(value, symbol: str = "$") -> str:
    return f"{symbol}{fmt(value)}"


def columns(*cells: tuple[str, int]) -> str:
    """Left-pad cells to fixed widths, e.g. columns(("1", 5), ("DIESEL", 20))."""
    return "".join(c.ljust(w) for c, w in cells).rstrip()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------

def store_header(ctx: RenderContext) -> list[Line]:
    lines = [center(ctx.store.company_name or ctx.need("company_name"), bold=True)]
    if ctx.store.store_number:
        lines.append(center(f"STORE {ctx.store.store_number}"))
    lines += [
        center(ctx.need("address")),
        center(ctx.store.city_state),
        center(ctx.store.phone),
    ]
    return lines


def date_line(ctx: RenderContext) -> list[Line]:
    return [pair(ctx.date(), ctx.time("%I:%M %p"))]


def fuel_item_table(ctx: RenderContext, currency: str = "") -> list[Line]:
    """``Qty Name Price Total`` rows, each fuel row followed by pump/volume/price."""
    labels = ctx.fields.profile.labels
    lines = [text(columns(("Qty", 5), ("Name", 20), ("Price", 8)) + " Total")]
    for settled in ctx.settlement.lines:
        item = settled.item
        qty = printed_qty(item, settled.kind)
        if settled.kind is LineItemKind.CASH_ADVANCE:
            price = fmt(settled.amount)
        else:
            price = fmt(item.unit_price)
        lines.append(
            pair(columns((qty, 5), (item.name[:19], 20), (price, 8)), currency + fmt(settled.amount))
        )
        if settled.kind is not LineItemKind.CASH_ADVANCE:
            if item.pump_number is not None:
                lines.append(text(f"    Pump:        {item.pump_number}"))
            lines.append(text(f"    {labels.get('volume', 'Volume') + ':':<13}{item.declared_quantity:.3f}"))
            lines.append(text(f"    {labels.get('price', 'Price') + ':':<13}{currency}{item.unit_price:.3f}"))
    return lines


def tax_label(ctx: RenderContext) -> str:
    convention = ctx.settlement.tax_convention
    if convention is TaxConvention.ITEMIZED:
        return f"Tax ({ctx.settlement.tax_rate * 100:.0f}%)"
    if convention is TaxConvention.INCLUDED:
        return f"HST({ctx.settlement.tax_rate * 100:.0f}%) Included"
    return "Sales Tax"


def totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    return [
        pair("Subtotal", fmt(s.subtotal)),
        pair(tax_label(ctx), fmt(s.tax_amount)),
        pair("Total", fmt(s.total), bold=True),
    ]


def card_line(ctx: RenderContext) -> list[Line]:
    masked = ctx.auth.masked_card
    if not masked:
        return []
    entry = ctx.value("cardEntryMethod")
    return [text(f"{masked}  {entry}".rstrip())]


def emv_lines(ctx: RenderContext) -> list[Line]:
    c = ctx.auth.cryptogram
    lines = []
    for label, value in (("AID", c.aid), ("TVR", c.tvr), ("IAD", c.iad), ("TSI", c.tsi), ("ARC", c.arc)):
        if value:
            lines.append(text(f"{label}: {value}"))
    return lines


def card_tender(ctx: RenderContext) -> list[Line]:
    """Generic bank-card or fleet block; layouts without a special shape use it."""
    label = wire_label(ctx.tender).upper()
    lines = [text("Received:"), pair(f"  {label}", fmt(ctx.settlement.total))]
    lines += card_line(ctx)
    if ctx.auth.auth_code:
        lines.append(text(f"  Auth No: {ctx.auth.auth_code}"))
    lines.append(text(f"  INVOICE# {ctx.auth.invoice_number}"))
    lines += emv_lines(ctx)
    return lines


def cash_tender(ctx: RenderContext) -> list[Line]:
    return [text("Received:"), pair("  Cash", fmt(ctx.settlement.total))]


FLEET_LABELS: list[tuple[str, str]] = [
    ("vehicleId", "VehicleID"),
    ("companyName", "CompanyName"),
    ("dlNumber", "DLNumber"),
    ("driverFirstName", "DriverFName"),
    ("driverLastName", "DriverLName"),
    ("checkNumber", "CheckNumber"),
]


def fleet_prompts(ctx: RenderContext, extended: bool = False) -> list[Line]:
    """Prompted fleet values. ``extended`` selects the fields routed to the extended block."""
    routed = ctx.fields.profile.extended
    lines = []
    for name, label in FLEET_LABELS:
        if (name in routed) != extended:
            continue
        value = ctx.value(name)
        if value:
            lines.append(pair(label, value))
    return lines


def signature(ctx: RenderContext) -> list[Line]:
    if not ctx.fields.wants_signature:
        return []
    return [blank(), text("Signature: ___________________________")]


def copy_type(ctx: RenderContext) -> str:
    return (ctx.value("copyType") or "Original").upper()
