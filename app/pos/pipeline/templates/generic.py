"""
Layouts without brand boilerplate: ``generic`` fuel and the ``classic``
design catalog.
"""
from __future__ import annotations

from app.pos.pipeline.settlement import fmt
from app.pos.pipeline.templates.common import (
    RenderContext,
    Template,
    blank,
    card_tender,
    cash_tender,
    center,
    columns,
    date_line,
    fleet_prompts,
    fuel_item_table,
    pair,
    rule,
    signature,
    store_header,
    text,
    totals,
)
from app.pos.pipeline.templates.designs import DEFAULT_FOOTER, FOOTERS, SEPARATORS, design_for
from app.pos.pipeline.units import wire_label
from app.pos.schemas import BlockKind, Line, TenderType


# ---------------------------------------------------------------------------
# Generic fuel
# ---------------------------------------------------------------------------

def _generic_header(ctx: RenderContext) -> list[Line]:
    return store_header(ctx) + [blank()] + date_line(ctx) + [
        text(f"Receipt #: {ctx.short_number}"),
        rule(),
    ]


def _generic_footer(ctx: RenderContext) -> list[Line]:
    return [rule(), center("THANK YOU"), center("PLEASE COME AGAIN")]


GENERIC = Template(
    design="Generic Fuel Receipt",
    blocks=[
        (BlockKind.HEADER, _generic_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, lambda ctx: fleet_prompts(ctx) + fleet_prompts(ctx, extended=True) + signature(ctx)),
        (BlockKind.FOOTER, _generic_footer),
    ],
    tenders={TenderType.CASH: cash_tender},
    default_tender=card_tender,
)


# ---------------------------------------------------------------------------
# Classic designs
# ---------------------------------------------------------------------------

def _sep(ctx: RenderContext) -> Line:
    design = design_for(ctx.fields.design_id)
    return rule(SEPARATORS[design.separator_style])


def _classic_header(ctx: RenderContext) -> list[Line]:
    design = design_for(ctx.fields.design_id)
    name = ctx.store.company_name or ctx.need("company_name")
    if design.header_style == "logo-top":
        lines = [center(f"* {name} *", bold=True)]
    elif design.header_style == "left":
        lines = [text(name.upper(), bold=True)]
    elif design.header_style == "split":
        lines = [pair(name, f"#{ctx.store.store_number}" if design.store_number else "", bold=True)]
    else:
        lines = [center(name.upper(), bold=True)]
    align = text if design.header_style in ("left", "split") else center
    lines += [align(ctx.store.address), align(ctx.store.city_state), align(f"Tel: {ctx.store.phone}")]
    if design.store_number and design.header_style != "split" and ctx.store.store_number:
        lines.append(align(f"Store #{ctx.store.store_number}"))
    lines += [_sep(ctx), text(f"RECEIPT #{ctx.receipt_number}"),
              text(f"Date: {ctx.date()}  {ctx.time()}"),
              text(f"Customer: {ctx.store.company_name}")]
    if design.cashier:
        lines.append(text(f"Cashier: {ctx.auth.clerk_id}"))
    lines.append(_sep(ctx))
    return lines


def _classic_items(ctx: RenderContext) -> list[Line]:
    layout = design_for(ctx.fields.design_id).item_layout
    lines: list[Line] = []
    if layout == "table":
        lines.append(text(columns(("ITEM", 16), ("QTY", 6), ("PRICE", 9)) + " TOTAL"))
    for n, settled in enumerate(ctx.settlement.lines, 1):
        item = settled.item
        qty = f"{item.declared_quantity:g}"
        if layout == "spacious":
            lines += [text(f"{qty}x {item.name}", bold=True), pair("", f"${fmt(settled.amount)}"), blank()]
        elif layout == "table":
            lines.append(pair(columns((item.name[:15], 16), (qty, 6), (f"${fmt(item.unit_price)}", 9)),
                              f"${fmt(settled.amount)}"))
        elif layout == "description":
            lines += [text(f"{n}. {item.name}", bold=True),
                      text(f"   Qty: {qty} x ${fmt(item.unit_price)} = ${fmt(settled.amount)}")]
        else:
            lines.append(pair(f"{item.name[:24]} {qty}x", f"${fmt(settled.amount)}"))
    return lines


def _classic_totals(ctx: RenderContext) -> list[Line]:
    return [_sep(ctx)] + [
        pair(line.text + ":" if line.text != "Total" else "TOTAL:", f"${line.right}", bold=line.bold)
        for line in totals(ctx)
    ]


def _classic_tender(ctx: RenderContext) -> list[Line]:
    design = design_for(ctx.fields.design_id)
    if not design.payment_details:
        return []
    label = wire_label(ctx.tender).upper()
    lines = [_sep(ctx)]
    if ctx.auth.masked_card:
        lines.append(center(f"PAYMENT METHOD: {label} ****{ctx.auth.masked_card[-4:]}"))
    else:
        lines.append(center(f"PAYMENT METHOD: {label}"))
    if ctx.auth.auth_code:
        lines.append(center(f"AUTH CODE: {ctx.auth.auth_code}"))
    lines.append(center(f"TRANSACTION ID: TXN-{ctx.short_number}"))
    return lines


def _classic_footer(ctx: RenderContext) -> list[Line]:
    design = design_for(ctx.fields.design_id)
    footer = FOOTERS.get(design.business_type, DEFAULT_FOOTER)
    lines = [_sep(ctx)] + [center(s) for s in footer]
    if design.business_type == "Medical" and ctx.store.phone:
        lines.append(center(f"Questions? Call: {ctx.store.phone}"))
    if design.barcode:
        lines.append(center(f"|| ||| | || {ctx.short_number} || | |||"))
    lines.append(center(f"Receipt Type: {design.name}"))
    return lines


CLASSIC = Template(
    design="Classic",
    blocks=[
        (BlockKind.HEADER, _classic_header),
        (BlockKind.ITEMS, _classic_items),
        (BlockKind.TOTALS, _classic_totals),
        (BlockKind.TENDER, None),
        (BlockKind.FOOTER, _classic_footer),
    ],
    default_tender=_classic_tender,
)
