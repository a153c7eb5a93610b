"""
Receipt composition pipeline.

Orchestrates: resolve rules → gate fields → settle → authorize → render.
"""
import logging
import random
import threading
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.config import settings
from app.pos.pipeline.authorization import last4, synthesize
from app.pos.pipeline.classifier import is_cash_advance
from app.pos.pipeline.errors import FieldProblem, ValidationError
from app.pos.pipeline.merchants import merchant_for
from app.pos.pipeline.renderer import render
from app.pos.pipeline.rules import resolve
from app.pos.pipeline.settlement import settle
from app.pos.pipeline.units import parse_jurisdiction, parse_tender
from app.pos.schemas import (
    CatalogItem,
    FieldRequirementProfile,
    GenerateReceiptRequest,
    Jurisdiction,
    LineItem,
    ReceiptDocument,
    ResolvedFields,
    StoreContext,
    TaxConvention,
    TenderType,
)

logger = logging.getLogger(__name__)

# profile field name -> request attribute
REQUEST_FIELDS: dict[str, str] = {
    "vehicleId": "vehicle_id",
    "dlNumber": "dl_number",
    "companyName": "driver_company_name",
    "driverFirstName": "driver_first_name",
    "driverLastName": "driver_last_name",
    "checkNumber": "check_number",
    "checkNumberConfirm": "check_number_confirm",
    "cardLast4": "card_last4",
    "cardEntryMethod": "card_entry_method",
    "copyType": "copy_type",
}


def store_context(request: GenerateReceiptRequest, company=None, store=None) -> StoreContext:
    """Header data: posted store data wins, then the stored store, then the company."""
    name = request.company_name or (company.name if company is not None else "")
    if request.store_data is not None:
        data = request.store_data
        return StoreContext(
            company_name=name,
            store_number=data.store_code,
            address=data.address,
            city_state=data.city_state,
            phone=data.phone,
        )
    if store is not None:
        return StoreContext(
            company_name=name,
            store_number=store.store_code,
            address=store.address,
            city_state=store.city_state,
            phone=store.phone,
        )
    return StoreContext(
        company_name=name,
        address=request.company_address or (company.address if company is not None else ""),
        phone=company.phone if company is not None else "",
    )


def _defaults(tender: TenderType) -> dict[str, str]:
    out = {"copyType": settings.DEFAULT_COPY_TYPE}
    if tender.is_card:
        out["cardLast4"] = settings.DEFAULT_CARD_LAST4
        out["cardEntryMethod"] = settings.DEFAULT_ENTRY_METHOD
    return out


def gate_fields(
    request: GenerateReceiptRequest,
    profile: FieldRequirementProfile,
    tender: TenderType,
    design_id: int = 0,
) -> tuple[ResolvedFields, list[FieldProblem]]:
    """Filter request values through the profile.

    Hidden values are dropped, defaults fill visible gaps, and every missing
    required value is reported.
    """
    defaults = _defaults(tender)
    problems: list[FieldProblem] = []
    values: dict[str, str] = {}
    for name, attr in REQUEST_FIELDS.items():
        if profile.is_hidden(name):
            continue
        value = (getattr(request, attr) or "").strip() or defaults.get(name, "")
        if not value:
            if profile.is_required(name):
                problems.append(FieldProblem(name, "is required"))
            continue
        values[name] = value

    if "cardLast4" in values:
        masked = last4(values["cardLast4"])
        if masked:
            values["cardLast4"] = masked
        else:
            del values["cardLast4"]
            problems.append(FieldProblem("cardLast4", "needs at least four digits"))

    if "checkNumberConfirm" in values and values["checkNumberConfirm"] != values.get("checkNumber"):
        problems.append(FieldProblem("checkNumberConfirm", "does not match checkNumber"))

    fields = ResolvedFields(
        profile=profile,
        values=values,
        include_signature=request.include_signature,
        design_id=design_id,
    )
    return fields, problems


def line_items(
    request: GenerateReceiptRequest,
    profile: Optional[FieldRequirementProfile] = None,
    catalog: Optional[tuple[CatalogItem, ...]] = None,
) -> tuple[list[LineItem], list[FieldProblem]]:
    """Validate the posted items.

    Without a profile (the request failed before rules were resolved) the
    items are still checked, so every problem is reported at once.
    """
    problems: list[FieldProblem] = []
    items: list[LineItem] = []
    if not request.items:
        return items, [FieldProblem("items", "at least one item is required")]

    drop_qty = profile is not None and profile.is_hidden("qty")
    offered = {entry.name.strip().lower() for entry in catalog or ()}
    for n, raw in enumerate(request.items):
        where = f"items[{n}]"
        name = raw.name.strip()
        if not name:
            problems.append(FieldProblem(f"{where}.name", "is required"))
            continue
        if offered and name.lower() not in offered:
            problems.append(FieldProblem(f"{where}.name", f"{name!r} is not sold here"))
            continue
        cash = is_cash_advance(name)
        if raw.price is None and not (cash and raw.qty is not None):
            problems.append(FieldProblem(f"{where}.price", "is required"))
            continue
        if raw.quantity is None and not cash:
            problems.append(FieldProblem(f"{where}.quantity", "is required"))
            continue
        if any(v is not None and v < 0 for v in (raw.price, raw.quantity, raw.qty)):
            problems.append(FieldProblem(where, "amounts cannot be negative"))
            continue
        items.append(LineItem(
            name=name,
            declared_quantity=raw.quantity if raw.quantity is not None else Decimal(1),
            unit_price=raw.price if raw.price is not None else Decimal(0),
            pump_number=raw.pump,
            multiplier_qty=None if drop_qty and not cash else raw.qty,
        ))
    return items, problems


def tax_rate(convention: TaxConvention) -> Decimal:
    if convention is TaxConvention.ITEMIZED:
        return Decimal(settings.PREVIEW_TAX_RATE)
    if convention is TaxConvention.INCLUDED:
        return Decimal(settings.INCLUDED_TAX_RATE)
    return Decimal(0)


_last_issued = 0
_issue_lock = threading.Lock()


def receipt_number_for(clock: datetime) -> str:
    """``REC-`` plus eight digits of the millisecond clock.

    Numbers strictly increase within the process, so two requests in the same
    millisecond never share one.
    """
    global _last_issued
    stamp = int(clock.timestamp() * 1000)
    with _issue_lock:
        _last_issued = max(stamp, _last_issued + 1)
        return f"REC-{_last_issued % 10 ** 8:08d}"


def _parse(request: GenerateReceiptRequest, company) -> tuple[Optional[Jurisdiction], TenderType, list[FieldProblem]]:
    problems: list[FieldProblem] = []
    jurisdiction = None
    tender = TenderType.CASH
    try:
        jurisdiction = parse_jurisdiction(request.country or (company.country if company is not None else None))
    except ValidationError as exc:
        problems += exc.problems
    try:
        tender = parse_tender(request.payment_method)
    except ValidationError as exc:
        problems += exc.problems
    return jurisdiction, tender, problems


def compose_receipt(
    request: GenerateReceiptRequest,
    company=None,
    store=None,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> ReceiptDocument:
    """Run the full composition pipeline for one transaction.

    Raises ValidationError with every problem of the request at once; no
    document is produced in that case.
    """
    logger.info("Pipeline start — resolve merchant")
    ctx = store_context(request, company, store)
    design_id = request.design_id
    if design_id is None and company is not None:
        design_id = company.design_id
    merchant = merchant_for(ctx.company_name, design_id)
    logger.info("Merchant: %s", merchant.key)

    jurisdiction, tender, problems = _parse(request, company)
    if not ctx.company_name:
        problems.append(FieldProblem("companyName", "company is required"))
    if jurisdiction is not None and jurisdiction not in merchant.jurisdictions:
        problems.append(FieldProblem("country", f"{merchant.display_name} does not operate in {jurisdiction.value}"))
    if tender not in merchant.tenders:
        problems.append(FieldProblem("paymentMethod", f"{merchant.display_name} does not accept {tender.value}"))
    catalog = merchant.catalog_for(jurisdiction) if jurisdiction is not None else None
    if problems:
        # no profile to gate against; still report every item problem
        _, item_problems = line_items(request, catalog=catalog)
        raise ValidationError(problems + item_problems)

    logger.info("Pipeline — resolve rules")
    profile, key = resolve(merchant.key, jurisdiction, tender)
    logger.info("Template: %s", key.name)

    logger.info("Pipeline — gate fields")
    fields, problems = gate_fields(request, profile, tender, design_id or 0)
    items, item_problems = line_items(request, profile, catalog)
    problems += item_problems
    if problems:
        raise ValidationError(problems)

    logger.info("Pipeline — settle")
    settlement = settle(items, merchant, jurisdiction, profile, tax_rate(profile.tax_convention))
    logger.info("Settled %d lines, total %s", len(settlement.lines), settlement.total)

    logger.info("Pipeline — authorize")
    rng = rng if rng is not None else random.Random(settings.AUTH_SEED)
    auth = synthesize(tender, rng, fields.value("cardLast4"))

    logger.info("Pipeline — render")
    clock = now or datetime.now()
    document = render(
        key,
        settlement,
        fields,
        auth,
        ctx,
        jurisdiction=jurisdiction,
        receipt_number=receipt_number_for(clock),
        issued_at=request.date or clock,
    )
    logger.info("Receipt rendered: %s (%s)", document.receipt_number, document.design)
    return document
