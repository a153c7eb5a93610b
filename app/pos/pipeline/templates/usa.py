"""
US truck-stop layouts: ONE 9, Pilot, Flying J, Love's and TravelCenters.

All of them print a literal 0.00 sales tax line.
"""
from __future__ import annotations

from app.pos.pipeline.settlement import fmt
from app.pos.pipeline.templates.common import (
    RenderContext,
    Template,
    blank,
    card_line,
    card_tender,
    cash_tender,
    center,
    copy_type,
    emv_lines,
    fleet_prompts,
    fuel_item_table,
    pair,
    rule,
    signature,
    store_header,
    text,
    totals,
)
from app.pos.schemas import BlockKind, Line, TenderType


def _total(ctx: RenderContext) -> str:
    return fmt(ctx.settlement.total)


def _truck_header(ctx: RenderContext) -> list[Line]:
    return store_header(ctx) + [
        center(f"{ctx.date()} {ctx.time()}"),
        blank(),
        center("SALE", bold=True),
        text(f"Transaction #: {ctx.auth.transaction_number}"),
        rule(),
    ]


def _customer_copy(ctx: RenderContext) -> list[Line]:
    return [blank(), center("CUSTOMER COPY")] + fleet_prompts(ctx)


# ---------------------------------------------------------------------------
# ONE 9
# ---------------------------------------------------------------------------

def _one9_visa(ctx: RenderContext) -> list[Line]:
    return (
        [text("Received:"), pair("  Visa", _total(ctx))]
        + card_line(ctx)
        + [text(f"  Auth No: {ctx.auth.auth_code}")]
        + emv_lines(ctx)
        + [text("Verified by PIN")]
    )


def _one9_master(ctx: RenderContext) -> list[Line]:
    return (
        [text("Received:"), pair("  MASTERCARD", _total(ctx))]
        + card_line(ctx)
        + [text(f"  Auth No: {ctx.auth.auth_code}")]
        + emv_lines(ctx)
        + [blank(), center("IMPORTANT - Retain this copy"), center("for your records")]
    )


def _one9_tch(ctx: RenderContext) -> list[Line]:
    return (
        [text("Received:"), pair("  TCH", _total(ctx))]
        + card_line(ctx)
        + [text(f"  Auth No: {ctx.auth.auth_code}"),
           text(f"TruckingCompanyNameTCI {ctx.value('companyName')}".rstrip())]
    )


def _one9_efs(ctx: RenderContext) -> list[Line]:
    return [
        text("Received:"),
        pair("  EFS LLC Checks", _total(ctx)),
        pair("  Tran/Route", ctx.auth.transaction_number),
        pair("  Check", ctx.value("checkNumber")),
        pair("  Tran Amount", _total(ctx)),
        pair("  Approval CD", ctx.auth.auth_code),
        pair("  Clerk ID", ctx.auth.clerk_id),
        pair("  Tran Ref", ctx.auth.reference_number),
        center("Please destroy check"),
        text(f"Auth: {ctx.auth.auth_code}"),
    ]


def _one9_vehicle(ctx: RenderContext) -> list[Line]:
    lines = _customer_copy(ctx)
    extended = fleet_prompts(ctx, extended=True)
    if extended:
        lines += [blank(), text("Fleet Details")] + extended
    return lines + signature(ctx)


ONE9 = Template(
    design="ONE 9 Fuel Network Receipt",
    blocks=[
        (BlockKind.HEADER, _truck_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, _one9_vehicle),
        (BlockKind.FOOTER, lambda ctx: [blank(), center("THANK YOU FOR CHOOSING ONE 9")]),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.VISA: _one9_visa,
        TenderType.MASTERCARD: _one9_master,
        TenderType.TCH: _one9_tch,
        TenderType.EFS: _one9_efs,
    },
)


# ---------------------------------------------------------------------------
# Pilot / Flying J (USA)
# ---------------------------------------------------------------------------

def _pilot_visa(ctx: RenderContext) -> list[Line]:
    return (
        [center("SCOTIABANK VISA (C)"), text("TYPE: PURCHASE")]
        + card_line(ctx)
        + [pair("AMOUNT", _total(ctx)), text(f"AUTH #: {ctx.auth.auth_code}")]
        + emv_lines(ctx)
    )


def _pilot_master(ctx: RenderContext) -> list[Line]:
    return (
        [text("TYPE: PURCHASE"), text("ACCT: MASTERCARD")]
        + card_line(ctx)
        + [pair("AMOUNT", _total(ctx)), text(f"AUTH #: {ctx.auth.auth_code}")]
        + emv_lines(ctx)
        + [text(f"Pos:2 Clerk:{ctx.auth.clerk_id}"), center("COPY RECEIPT")]
    )


def _pilot_tch(ctx: RenderContext) -> list[Line]:
    return (
        [text("TCH Card"), text("TYPE: PURCHASE")]
        + card_line(ctx)
        + [pair("AMOUNT", _total(ctx)),
           text(f"Invoice Number: {ctx.auth.invoice_number}"),
           text(f"AUTH #: {ctx.auth.auth_code}")]
    )


def _pilot_efs(ctx: RenderContext) -> list[Line]:
    return [text("EFS"), pair("AMOUNT", _total(ctx)), text(f"APPROVAL: {ctx.auth.auth_code}")]


def _pilot_vehicle(ctx: RenderContext) -> list[Line]:
    return fleet_prompts(ctx) + fleet_prompts(ctx, extended=True) + signature(ctx)


PILOT_TENDERS = {
    TenderType.CASH: cash_tender,
    TenderType.VISA: _pilot_visa,
    TenderType.MASTERCARD: _pilot_master,
    TenderType.TCH: _pilot_tch,
    TenderType.EFS: _pilot_efs,
}

PILOT = Template(
    design="Pilot Travel Centers Receipt",
    blocks=[
        (BlockKind.HEADER, _truck_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, _pilot_vehicle),
        (BlockKind.FOOTER, lambda ctx: [blank(), center("THANK YOU"), center("myRewards Plus")]),
    ],
    tenders=PILOT_TENDERS,
)

FLYINGJ = Template(
    design="Flying J Receipt",
    blocks=[
        (BlockKind.HEADER, _truck_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, _pilot_vehicle),
        (BlockKind.FOOTER, lambda ctx: [blank(), center("THANK YOU FOR STOPPING AT FLYING J")]),
    ],
    tenders=PILOT_TENDERS,
)


# ---------------------------------------------------------------------------
# Love's
# ---------------------------------------------------------------------------

def _loves_header(ctx: RenderContext) -> list[Line]:
    return store_header(ctx) + [
        blank(),
        text(f"Type:  SALE      ({copy_type(ctx)})"),
        text(f"Invoice: {ctx.auth.invoice_number}"),
        rule(),
    ]


def _loves_efs(ctx: RenderContext) -> list[Line]:
    return [
        text("Received:"),
        pair("  EFS LLC Check", _total(ctx)),
        text(f"    Auth No: {ctx.auth.auth_code}"),
        text(f"Invoice Number: {ctx.auth.invoice_number[-5:]}"),
    ]


def _loves_tch(ctx: RenderContext) -> list[Line]:
    return (
        [text("Received:"), pair("  TCH Fleet", _total(ctx))]
        + card_line(ctx)
        + [text(f"    Auth No:{ctx.auth.auth_code}"), text(f"INVOICE# {ctx.auth.invoice_number}")]
    )


def _loves_bank(label: str, app: str):
    def build(ctx: RenderContext) -> list[Line]:
        return (
            [text("Received:"), pair(f"  {label}", _total(ctx))]
            + card_line(ctx)
            + [text(f"    Auth No: {ctx.auth.auth_code}"),
               text(f"  INVOICE# {ctx.auth.invoice_number}"),
               text(f"AID: {ctx.auth.cryptogram.aid}"),
               text(f"APP: {app}"),
               text("Verified by PIN")]
        )
    return build


def _loves_vehicle(ctx: RenderContext) -> list[Line]:
    lines = signature(ctx) + fleet_prompts(ctx) + fleet_prompts(ctx, extended=True)
    if ctx.tender in (TenderType.VISA, TenderType.MASTERCARD):
        lines += [blank(), center("My Love Rewards")]
    return lines


def _loves_footer(ctx: RenderContext) -> list[Line]:
    return [
        blank(),
        text("Pos: #1"),
        text(f"Date: {ctx.date()} {ctx.time()}"),
        pair("Total Sale:", _total(ctx)),
        text("Thank you for shopping at Love's"),
    ]


LOVES = Template(
    design="Love's Travel Stops Receipt",
    blocks=[
        (BlockKind.HEADER, _loves_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, _loves_vehicle),
        (BlockKind.FOOTER, _loves_footer),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.EFS: _loves_efs,
        TenderType.TCH: _loves_tch,
        TenderType.VISA: _loves_bank("Visa", "Visa DEBIT"),
        TenderType.MASTERCARD: _loves_bank("MASTERCARD", "Mastercard"),
    },
)


# ---------------------------------------------------------------------------
# TravelCenters of America
# ---------------------------------------------------------------------------

def _ta_header(ctx: RenderContext) -> list[Line]:
    lines = [
        center("TravelCenters", bold=True),
        center("of America"),
        center("TA PETRO"),
        center(ctx.need("address")),
        center(ctx.store.city_state),
        center(ctx.store.phone),
        blank(),
        text(f"Receipt #    {ctx.short_number}"),
        text(f"{ctx.date()}  {ctx.time()}"),
        text("Register    #41"),
    ]
    if ctx.tender is TenderType.EFS:
        lines.append(text("**** SUSPENDED ****"))
    lines += [text(f"Type:    SALE              ({copy_type(ctx)})"), rule()]
    return lines


def _ta_totals(ctx: RenderContext) -> list[Line]:
    s = ctx.settlement
    return [
        pair("Sale Total", fmt(s.subtotal)),
        pair("Sales Tax Total", fmt(s.tax_amount)),
        pair("Total", fmt(s.total), bold=True),
    ]


def _ta_prompts(ctx: RenderContext, names: list[tuple[str, str]]) -> list[Line]:
    lines = [text("PROMPTS")]
    for name, label in names:
        value = ctx.value(name)
        if value:
            lines.append(text(f"  {label:<21}: {value}"))
    return lines


def _ta_efs(ctx: RenderContext) -> list[Line]:
    return [
        text("Received"),
        pair("  EFS TransCheck", _total(ctx)),
        text("  Approved"),
        text(f"  Auth. Code: {ctx.auth.auth_code}"),
        text(f"  Invoice NO. {ctx.auth.invoice_number}"),
    ] + _ta_prompts(ctx, [
        ("checkNumber", "CheckNumber"),
        ("checkNumberConfirm", "CheckNumberConfirm"),
        ("driverFirstName", "DriverFName"),
        ("driverLastName", "DriverLName"),
    ])


def _ta_bank(label: str, app: str, network: str, verified: bool):
    def build(ctx: RenderContext) -> list[Line]:
        lines = [text("Received"), pair(f"  {label}", _total(ctx))] + card_line(ctx) + [
            text("  Approved"),
            text(f"  Auth. Code: {ctx.auth.auth_code}"),
            text(f"  Invoice NO. {ctx.auth.invoice_number}"),
            text(f"AID: {ctx.auth.cryptogram.aid}"),
            text(f"APP: {app}"),
        ]
        if verified:
            lines.append(text("Verified by PIN"))
        lines += [
            text(f"TID: *********{ctx.auth.terminal_id[-4:]}"),
            text("Card Entry Method:"),
            text(f"  {ctx.value('cardEntryMethod') or 'Chip Read'}"),
            text(f"Payment Network: {network}"),
            text("Authorized by Issuer"),
        ]
        return lines + _ta_prompts(ctx, [("companyName", "TruckingCompanyName"), ("vehicleId", "VehicleID")])
    return build


def _ta_tch(ctx: RenderContext) -> list[Line]:
    return [text("Received"), pair("  TCH Card", _total(ctx))] + card_line(ctx) + [
        text("  Approved"),
        text(f"  Auth #: {ctx.auth.auth_code}"),
    ]


def _ta_vehicle(ctx: RenderContext) -> list[Line]:
    # card and EFS blocks print their own PROMPTS section
    lines = [] if ctx.tender in (TenderType.EFS, TenderType.VISA, TenderType.MASTERCARD) else fleet_prompts(ctx)
    return lines + signature(ctx)


TA = Template(
    design="TravelCenters of America Receipt",
    blocks=[
        (BlockKind.HEADER, _ta_header),
        (BlockKind.ITEMS, fuel_item_table),
        (BlockKind.TOTALS, _ta_totals),
        (BlockKind.TENDER, None),
        (BlockKind.VEHICLE, _ta_vehicle),
        (BlockKind.FOOTER, lambda ctx: [blank(), center("THANK YOU FOR CHOOSING TA")]),
    ],
    tenders={
        TenderType.CASH: cash_tender,
        TenderType.EFS: _ta_efs,
        TenderType.TCH: _ta_tch,
        TenderType.MASTERCARD: _ta_bank("MASTERCARD", "MASTERCARD", "14", verified=False),
        TenderType.VISA: _ta_bank("VISA", "Visa DEBIT", "02", verified=True),
    },
    default_tender=card_tender,
)
