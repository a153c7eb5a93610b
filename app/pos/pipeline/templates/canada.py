"""
Canadian layouts: Husky, Flying J (Canada), Petro-Canada and BVD Petroleum.

Husky, Petro-Canada and BVD print a tax amount backed out of a tax-inclusive
total. Canadian Flying J prints a literal 0.00 sales tax line.
"""
from __future__ import annotations

from app.pos.pipeline.classifier import printed_qty
from app.pos.pipeline.settlement import fmt
from app.pos.pipeline.templates.common import (
    RenderContext,
    Template,
    blank,
    card_tender,
    cash_tender,
    center,
    columns,
    copy_type,
    fleet_prompts,
    pair,
    rule,
    signature,
    store_header,
    text,
)
from app.pos.pipeline.units import wire_label
from app.pos.schemas import BlockKind, Line, LineItemKind, TenderType


def _total(ctx: RenderContext) -> str:
    return fmt(ctx.settlement.total)


def _last4(ctx: RenderContext) -> str:
    return ctx.auth.masked_card[-4:]


# ---------------------------------------------------------------------------
# Husky
# ---------------------------------------------------------------------------

HUSKY_GST = "R851757005"
HUSKY_MERCHANT_ID = "3665"


def _husky_header(ctx: RenderContext) -> list[Line]:
    lines = store_header(ctx) + [center(f"GST# {HUSKY_GST} Merchant ID:{HUSKY_MERCHANT_ID}"), blank()]
    if ctx.tender not in (TenderType.MASTERCARD, TenderType.TCH):
        lines.append(center("****SUSPENDED****"))
    lines += [
        text(f"Receipt: {ctx.auth.reference_number[:7]}"),
        text(f"{ctx.date()} {ctx.time()}"),
        text(f"Type: SALE ({copy_type(ctx)})"),
        rule(),
    ]
    return lines


def _husky_items(ctx: RenderContext) -> list[Line]:
    price_label = "Price/Liter" if ctx.tender is TenderType.MASTERCARD else "$/L"
    lines: list[Line] = []
    for settled in ctx.settlement.lines:
        item = settled.item
        lines.append(pair(item.name, fmt(settled.amount)))
        if settled.kind is LineItemKind.CASH_ADVANCE:
            continue
        if item.pump_number is not None:
            lines.append(text(f"  Pump: {item.pump_number}"))
        lines += [
            text(f"  {item.declared_quantity:.3f} Liters"),
            text(f"  @ {item.unit_price:.3f} {price_label}"),
        ]
    return lines


def _husky_totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    lines = [pair("GST/HST Fuel", fmt(s.tax_amount))]
    if ctx.tender is not TenderType.TCH:
        lines += [pair("Subtotal", fmt(s.subtotal)), pair("Total", fmt(s.total), bold=True)]
    return lines


def _husky_tch(ctx: RenderContext) -> list[Line]:
    return [
        text("PreAuth Completion"),
        text(f"#***************{_last4(ctx)}"),
        pair("TCH", _total(ctx)),
        text(f"{ctx.date()} {ctx.time()}"),
        text(f"REG# {ctx.auth.terminal_id[-2:]}  AUTH {ctx.auth.auth_code}"),
    ] + fleet_prompts(ctx)


def _husky_emv(label: str):
    def build(ctx: RenderContext) -> list[Line]:
        c = ctx.auth.cryptogram
        return [
            text("Pre Auth Completion"),
            pair(label, _total(ctx)),
            text(f"#************{_last4(ctx)}"),
            text(f"REG: {ctx.auth.terminal_id[-2:]}  RESP: 00  ISO: 00"),
            text(f"Ref: {ctx.auth.reference_number}"),
            text(f"Auth: {ctx.auth.auth_code}"),
            text(f"AID: {c.aid}"),
            text(f"TVR: {c.tvr}"),
            text(f"TSI: {c.tsi}"),
            center("Approved"),
            text(f"Pos: 1  Cashier: {ctx.auth.clerk_id}  Store: {ctx.store.store_number}"),
        ]
    return build


def _husky_preauth(ctx: RenderContext) -> list[Line]:
    lines = [text("PreAuthorization"), pair(wire_label(ctx.tender), _total(ctx))]
    if ctx.auth.masked_card:
        lines.append(text(f"#************{_last4(ctx)}"))
    lines += [text("Chequing"), text(f"Auth: {ctx.auth.auth_code}")]
    if ctx.auth.cryptogram.aid:
        lines.append(text(f"AID: {ctx.auth.cryptogram.aid}"))
    return lines + fleet_prompts(ctx)


def _husky_footer(ctx: RenderContext) -> list[Line]:
    lines = signature(ctx) + [blank()]
    if ctx.auth.auth_code:
        lines.append(center(f"AUTH CODE {ctx.auth.auth_code}"))
    return lines + [center("Thank you for choosing Husky")]


HUSKY = Template(
    design="Husky Receipt",
    blocks=[
        (BlockKind.HEADER, _husky_header),
        (BlockKind.ITEMS, _husky_items),
        (BlockKind.TOTALS, _husky_totals),
        (BlockKind.TENDER, None),
        (BlockKind.FOOTER, _husky_footer),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.TCH: _husky_tch,
        TenderType.MASTERCARD: _husky_emv("Master"),
        TenderType.INTERAC: _husky_emv("Interac"),
        TenderType.VISA: _husky_preauth,
        TenderType.EFS: _husky_preauth,
    },
    default_tender=_husky_preauth,
)


# ---------------------------------------------------------------------------
# Flying J (Canada)
# ---------------------------------------------------------------------------

def _fjc_header(ctx: RenderContext) -> list[Line]:
    return store_header(ctx) + [
        blank(),
        center("****PREPAY****"),
        text(f"{ctx.date()} {ctx.time()}"),
        text(f"Tran #: {ctx.auth.transaction_number}"),
        rule(),
    ]


def _fjc_items(ctx: RenderContext) -> list[Line]:
    lines: list[Line] = []
    for settled in ctx.settlement.lines:
        item = settled.item
        qty = printed_qty(item, settled.kind)
        lines.append(pair(f"{qty} {item.name}".strip(), fmt(settled.amount)))
        if settled.kind is not LineItemKind.CASH_ADVANCE:
            if item.pump_number is not None:
                lines.append(text(f"   Pump: {item.pump_number}"))
            lines.append(text(f"   {item.declared_quantity:.3f} L @ {item.unit_price:.3f} $/L"))
    return lines


def _fjc_totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    return [
        pair("Subtotal", fmt(s.subtotal)),
        pair("Sales Tax", fmt(s.tax_amount)),
        pair("Total $", fmt(s.total), bold=True),
    ]


def _fjc_tch(ctx: RenderContext) -> list[Line]:
    return [
        text("TCH Card"),
        text("TYPE: COMPLETION"),
        text(ctx.auth.masked_card),
        pair("AMOUNT", _total(ctx)),
        text(f"AUTH #: {ctx.auth.auth_code}"),
        text(f"Invoice Number: {ctx.auth.invoice_number}"),
    ] + fleet_prompts(ctx)


def _fjc_bank(ctx: RenderContext) -> list[Line]:
    c = ctx.auth.cryptogram
    return [
        center("=== TRANSACTION RECORD ==="),
        center("Pilot Flying J"),
        text("TYPE: COMPLETION"),
        text(f"ACCT: {wire_label(ctx.tender).upper()}"),
        text(f"CARD NO: {ctx.auth.masked_card}"),
        pair("AMOUNT", _total(ctx)),
        text(f"AUTH #: {ctx.auth.auth_code}"),
        text(f"REFERENCE #: {ctx.auth.reference_number}"),
        text(f"AID: {c.aid}"),
        text(f"TVR: {c.tvr}"),
        text(f"TSI: {c.tsi}"),
        center("APPROVED - THANK YOU"),
    ] + fleet_prompts(ctx)


def _fjc_footer(ctx: RenderContext) -> list[Line]:
    return signature(ctx) + [
        blank(),
        text("Pos:6 Clerk: 99"),
        text("(Original Pos:99)"),
        center("THANK YOU FOR STOPPING AT FLYING J"),
    ]


FLYINGJ_CA = Template(
    design="Canadian Flying J Receipt",
    blocks=[
        (BlockKind.HEADER, _fjc_header),
        (BlockKind.ITEMS, _fjc_items),
        (BlockKind.TOTALS, _fjc_totals),
        (BlockKind.TENDER, None),
        (BlockKind.FOOTER, _fjc_footer),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.TCH: _fjc_tch,
        TenderType.MASTERCARD: _fjc_bank,
        TenderType.VISA: _fjc_bank,
        TenderType.INTERAC: _fjc_bank,
    },
    default_tender=card_tender,
)


# ---------------------------------------------------------------------------
# Petro-Canada
# ---------------------------------------------------------------------------

PETRO_FHST = "818310427"


def _petro_header(ctx: RenderContext) -> list[Line]:
    return [
        center("TRANSACTION RECORD", bold=True),
        center("PETRO-CANADA"),
        center(ctx.need("address")),
        center(ctx.store.city_state),
        center(ctx.store.phone),
        text(f"FHST {PETRO_FHST}"),
        pair(f"DATE {ctx.date('%Y/%m/%d')}", f"TIME {ctx.time()}"),
        text(f"TERMINAL *****{ctx.auth.terminal_id[-4:]}"),
        text(f"TRANS# {ctx.auth.transaction_number}"),
        text(f"INVOICE NO {ctx.auth.invoice_number}"),
        rule(),
    ]


def _petro_items(ctx: RenderContext) -> list[Line]:
    lines = [text(columns(("PRODUCT", 14), ("QTY", 9), ("PRICE", 8)) + " AMOUNT")]
    for settled in ctx.settlement.lines:
        item = settled.item
        if settled.kind is LineItemKind.CASH_ADVANCE:
            lines.append(pair(item.name[:13], fmt(settled.amount)))
            continue
        lines.append(pair(
            columns((item.name[:13], 14), (f"{item.declared_quantity:.3f}L", 9), (f"{item.unit_price:.3f}", 8)),
            fmt(settled.amount),
        ))
        if item.pump_number is not None:
            lines.append(text(f"  PUMP {item.pump_number}"))
    return lines


def _petro_totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    lines = [
        pair(f"HST({s.tax_rate * 100:.0f}%) INCLUDED", fmt(s.tax_amount)),
        pair("TOTAL CAD $", fmt(s.total), bold=True),
    ]
    if ctx.tender.is_bank_card:
        lines.append(center(f"{wire_label(ctx.tender).upper()} SALE"))
    return lines


def _petro_interac(ctx: RenderContext) -> list[Line]:
    c = ctx.auth.cryptogram
    return [
        text("PURCHASE"),
        text("ACCT CHEQUING"),
        text(f"CARD {ctx.auth.masked_card}"),
        pair("AMOUNT", _total(ctx)),
        text(f"REFERENCE # {ctx.auth.reference_number} C"),
        text(f"AUTH # {ctx.auth.auth_code}"),
        text(f"AID {c.aid}"),
        text(f"TVR {c.tvr}"),
        text(f"TSI {c.tsi}"),
        center("00/001 APPROVED - THANK YOU"),
    ]


def _petro_credit(app: str):
    def build(ctx: RenderContext) -> list[Line]:
        c = ctx.auth.cryptogram
        return [
            text("PURCHASE"),
            text(f"CARD {ctx.auth.masked_card}"),
            pair("AMOUNT", _total(ctx)),
            text(f"REFERENCE # {ctx.auth.reference_number} H"),
            text(f"AUTH # {ctx.auth.auth_code}"),
            text(f"{app} {c.aid}"),
            text(f"TVR {c.tvr}"),
            text(f"TSI {c.tsi}"),
            center("01/027 APPROVED - THANK YOU"),
            center("NO SIGNATURE TRANSACTION"),
        ]
    return build


def _petro_footer(ctx: RenderContext) -> list[Line]:
    lines = signature(ctx) + [blank()]
    if ctx.tender is TenderType.INTERAC:
        return lines + [center("FINAL SALE / NO REFUND"), center("CUSTOMER COPY")]
    lines.append(center("CUSTOMER COPY"))
    if ctx.tender in (TenderType.VISA, TenderType.MASTERCARD):
        lines += [center("Collect Petro-Points on every fill"), center("petro-canada.ca/petro-points")]
    return lines


PETROCANADA = Template(
    design="Petro-Canada Receipt",
    blocks=[
        (BlockKind.HEADER, _petro_header),
        (BlockKind.ITEMS, _petro_items),
        (BlockKind.TOTALS, _petro_totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, lambda ctx: fleet_prompts(ctx)),
        (BlockKind.FOOTER, _petro_footer),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.INTERAC: _petro_interac,
        TenderType.VISA: _petro_credit("Visa CREDIT"),
        TenderType.MASTERCARD: _petro_credit("Mastercard"),
    },
    default_tender=card_tender,
)


# ---------------------------------------------------------------------------
# BVD Petroleum
# ---------------------------------------------------------------------------

def _bvd_header(ctx: RenderContext) -> list[Line]:
    return store_header(ctx) + [blank(), rule()]


def _bvd_items(ctx: RenderContext) -> list[Line]:
    labels = ctx.fields.profile.labels
    volume = labels.get("volume", "Volume")
    price = labels.get("price", "UnitPrice").replace(" ", "")
    lines: list[Line] = []
    for settled in ctx.settlement.lines:
        item = settled.item
        if settled.kind is LineItemKind.CASH_ADVANCE:
            lines.append(pair(item.name, f"${fmt(settled.amount)}"))
            continue
        if item.pump_number is not None:
            lines.append(pair("Pump", str(item.pump_number)))
        lines += [
            pair("Fuel", item.name),
            pair(volume, f"{item.declared_quantity:.3f}L"),
            pair(price, f"${item.unit_price:.3f}/L"),
            pair("Total", f"${fmt(settled.amount)}"),
            blank(),
        ]
    return lines


def _bvd_totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    return [
        pair("Total", f"${fmt(s.total)}", bold=True),
        text("Taxes Included"),
        pair(f"HST({s.tax_rate * 100:.0f}%)", f"${fmt(s.tax_amount)}"),
        rule(),
    ]


def _bvd_card(ctx: RenderContext) -> list[Line]:
    c = ctx.auth.cryptogram
    lines = [
        text("Pre-Auth Completion"),
        center("APPROVED"),
        pair(wire_label(ctx.tender), f"${_total(ctx)}"),
        text(f"Card# {ctx.auth.masked_card}"),
    ]
    if c.aid:
        lines.append(text(f"AID: {c.aid}"))
    lines += [
        text(f"Auth#: {ctx.auth.auth_code}"),
        text("ISO: 00  ACI: Y"),
    ]
    if c.tvr:
        lines += [text(f"TUR: {c.tvr}"), text(f"TSI: {c.tsi}"), text(f"CUM: {c.arc}")]
    lines += [text(f"Seq#: {ctx.auth.sequence_number}"), center("VERIFIED BY PIN")]
    return lines


def _bvd_footer(ctx: RenderContext) -> list[Line]:
    return signature(ctx) + [
        blank(),
        pair(f"Date: {ctx.date()}", f"Time: {ctx.time()}"),
        text(f"Trans#: {ctx.auth.transaction_number}"),
        center("Customer Copy"),
        center("Thank You S.U.P"),
    ]


BVD = Template(
    design="BVD Petroleum Receipt",
    blocks=[
        (BlockKind.HEADER, _bvd_header),
        (BlockKind.ITEMS, _bvd_items),
        (BlockKind.TOTALS, _bvd_totals),
        (BlockKind.TENDER, None),
        (BlockKind.FOOTER, _bvd_footer),
    ],
    tenders={TenderType.CASH: cash_tender},
    default_tender=_bvd_card,
)
