"""
Template renderer.

Turns a TemplateKey plus the settled, resolved and authorized transaction into
a ReceiptDocument. Rendering is pure: the same inputs always give the same
document, and nothing here reads the clock, random state or the database.
"""
from __future__ import annotations

import logging
from datetime import datetime

from app.pos.pipeline.templates import TEMPLATES, RenderContext, Template
from app.pos.pipeline.templates.designs import design_for
from app.pos.pipeline.errors import MissingContext, UnresolvedRuleError
from app.pos.pipeline.units import unit_profile
from app.pos.schemas import (
    Block,
    Jurisdiction,
    Line,
    ReceiptDocument,
    ResolvedFields,
    Settlement,
    StoreContext,
    SyntheticAuthorization,
    TemplateKey,
)

logger = logging.getLogger(__name__)

# layouts whose design label is the company's own name
COMPANY_NAMED = {"one9", "pilot", "flyingj", "loves", "ta"}

PLACEHOLDER: tuple[Line, ...] = (Line(text=""),)


def get_template(key: TemplateKey) -> Template:
    try:
        return TEMPLATES[key.layout]
    except KeyError:
        raise UnresolvedRuleError(
            "?", "?", key.tender.value, reason=f"no template named {key.layout!r}"
        ) from None


def design_name(key: TemplateKey, template: Template, fields: ResolvedFields, store: StoreContext) -> str:
    if key.layout == "classic":
        return design_for(fields.design_id).name
    if key.layout in COMPANY_NAMED and store.company_name:
        return f"{store.company_name} Receipt"
    return template.design


def render(
    key: TemplateKey,
    settlement: Settlement,
    fields: ResolvedFields,
    auth: SyntheticAuthorization,
    store: StoreContext,
    *,
    jurisdiction: Jurisdiction,
    receipt_number: str,
    issued_at: datetime,
) -> ReceiptDocument:
    """Render the ordered blocks of ``key``'s layout.

    A block whose builder lacks optional store context is replaced by a
    placeholder; the other blocks still render.
    """
    template = get_template(key)
    ctx = RenderContext(
        key=key,
        settlement=settlement,
        fields=fields,
        auth=auth,
        store=store,
        units=unit_profile(jurisdiction),
        receipt_number=receipt_number,
        issued_at=issued_at,
    )

    blocks: list[Block] = []
    for kind, builder in template.blocks:
        build = builder or template.tender_builder(key.tender)
        try:
            lines = tuple(build(ctx))
        except MissingContext as exc:
            logger.warning("Block %s of %s is missing %s, using placeholder", kind.value, key.name, exc)
            lines = PLACEHOLDER
        blocks.append(Block(kind=kind, lines=lines or PLACEHOLDER))

    return ReceiptDocument(
        receipt_number=receipt_number,
        template=key,
        design=design_name(key, template, fields, store),
        blocks=tuple(blocks),
    )
