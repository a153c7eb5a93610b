"""
Company and store catalog endpoints.

GET    /api/companies                       — list companies
GET    /api/companies/{id}                  — one company
POST   /api/companies                       — create a company
PUT    /api/companies/{id}                  — update a company
DELETE /api/companies/{id}                  — delete a company and its stores
GET    /api/companies/{id}/stores           — the company's stores
GET    /api/companies/{id}/items            — item names offered for the company
GET    /api/companies/{id}/profile          — resolved field profile for a tender
GET    /api/designs                         — classic design catalog
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.pos.database import get_db
from app.pos.models import CompanyModel
from app.pos.pipeline.errors import ValidationError
from app.pos.pipeline.merchants import merchant_for
from app.pos.pipeline.rules import resolve
from app.pos.pipeline.templates.designs import DESIGNS, design_for
from app.pos.pipeline.units import parse_jurisdiction, parse_tender
from app.pos.schemas import (
    CompanyIn,
    CompanyOut,
    CompanyUpdate,
    FieldProfileOut,
    StoreOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def transform_company(model: CompanyModel) -> CompanyOut:
    design = design_for(model.design_id)
    return CompanyOut(
        id=model.id,
        name=model.name,
        address=model.address,
        email=model.email,
        phone=model.phone,
        country=model.country,
        design_id=model.design_id,
        design_name=design.name,
        business_type=design.business_type,
        merchant_key=merchant_for(model.name, model.design_id).key,
    )


def transform_store(model) -> StoreOut:
    return StoreOut(
        id=model.id,
        company_id=model.company_id,
        store_code=model.store_code,
        address=model.address,
        city_state=model.city_state,
        phone=model.phone,
        items=model.items or "",
    )


def _get_company(db: Session, company_id: int) -> CompanyModel:
    company = db.query(CompanyModel).filter(CompanyModel.id == company_id).first()
    if not company:
        logger.warning("Company not found: %s", company_id)
        raise HTTPException(status_code=404, detail="Company not found")
    return company


# ── GET /api/companies ───────────────────────────────────────────────────
@router.get("/companies", response_model=List[CompanyOut])
def list_companies(db: Session = Depends(get_db)):
    rows = db.query(CompanyModel).order_by(CompanyModel.name, CompanyModel.id).all()
    logger.info("Found %d companies", len(rows))
    return [transform_company(r) for r in rows]


# ── GET /api/companies/{company_id} ──────────────────────────────────────
@router.get("/companies/{company_id}", response_model=CompanyOut)
def get_company(company_id: int, db: Session = Depends(get_db)):
    return transform_company(_get_company(db, company_id))


# ── POST /api/companies ──────────────────────────────────────────────────
@router.post("/companies", response_model=CompanyOut, status_code=201)
def create_company(req: CompanyIn, db: Session = Depends(get_db)):
    # rejects unknown countries with the same 400 the composer uses
    parse_jurisdiction(req.country)
    company = CompanyModel(**req.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    logger.info("Created company %s (%s)", company.id, company.name)
    return transform_company(company)


# ── PUT /api/companies/{company_id} ──────────────────────────────────────
@router.put("/companies/{company_id}", response_model=CompanyOut)
def update_company(company_id: int, req: CompanyUpdate, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    changes = req.model_dump(exclude_unset=True)
    if changes.get("country") is not None:
        parse_jurisdiction(changes["country"])
    for key, value in changes.items():
        if value is not None:
            setattr(company, key, value)
    db.commit()
    db.refresh(company)
    logger.info("Updated company %s: %s", company_id, sorted(changes))
    return transform_company(company)


# ── DELETE /api/companies/{company_id} ───────────────────────────────────
@router.delete("/companies/{company_id}")
def delete_company(company_id: int, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    db.delete(company)
    db.commit()
    logger.info("Deleted company %s", company_id)
    return {"message": "Company deleted successfully", "id": company_id}


# ── GET /api/companies/{company_id}/stores ───────────────────────────────
@router.get("/companies/{company_id}/stores", response_model=List[StoreOut])
def list_stores(company_id: int, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    return [transform_store(s) for s in company.stores]


# ── GET /api/companies/{company_id}/items ────────────────────────────────
@router.get("/companies/{company_id}/items", response_model=List[str])
def list_items(company_id: int, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    merchant = merchant_for(company.name, company.design_id)
    try:
        catalog = merchant.catalog_for(parse_jurisdiction(company.country))
    except ValidationError:
        catalog = None
    if catalog:
        return [entry.name for entry in catalog]

    names = set()
    for store in company.stores:
        for name in (store.items or "").split(","):
            if name.strip():
                names.add(name.strip())
    return sorted(names)


# ── GET /api/companies/{company_id}/profile ──────────────────────────────
@router.get("/companies/{company_id}/profile", response_model=FieldProfileOut)
def field_profile(company_id: int, paymentMethod: Optional[str] = None, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    merchant = merchant_for(company.name, company.design_id)
    jurisdiction = parse_jurisdiction(company.country)
    tender = parse_tender(paymentMethod)
    if jurisdiction not in merchant.jurisdictions or tender not in merchant.tenders:
        raise ValidationError.single("paymentMethod", f"{merchant.display_name} does not accept {tender.value} in {jurisdiction.value}")
    profile, key = resolve(merchant.key, jurisdiction, tender)
    return FieldProfileOut(
        merchant_key=merchant.key,
        jurisdiction=jurisdiction.value,
        payment_method=tender.value,
        template=key.name,
        tax_convention=profile.tax_convention.value,
        fields={name: state.value for name, state in profile.states.items()},
        labels=dict(profile.labels),
        extended=sorted(profile.extended),
    )


# ── GET /api/designs ─────────────────────────────────────────────────────
@router.get("/designs")
def list_designs():
    return [
        {
            "id": n,
            "name": d.name,
            "businessType": d.business_type,
            "headerStyle": d.header_style,
            "itemLayout": d.item_layout,
            "separatorStyle": d.separator_style,
        }
        for n, d in enumerate(DESIGNS)
    ]


# ── GET /api/health ──────────────────────────────────────────────────────
@router.get("/health")
def health():
    return {"status": "healthy"}
