"""
Receipt endpoints.

POST /api/generate-receipt   — compose a receipt and write its PDF
GET  /receipts/{file_name}   — download a written receipt
"""
from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.pos.database import get_db
from app.pos.models import CompanyModel, StoreModel
from app.pos.pipeline import compose_receipt
from app.pos.pipeline.document import write_document
from app.pos.schemas import GenerateReceiptRequest, GenerateReceiptResponse

logger = logging.getLogger(__name__)
router = APIRouter()
files_router = APIRouter()

NUMBER_ATTEMPTS = 3


# ── POST /api/generate-receipt ───────────────────────────────────────────
@router.post("/generate-receipt", response_model=GenerateReceiptResponse, response_model_by_alias=True)
def generate_receipt(req: GenerateReceiptRequest, db: Session = Depends(get_db)):
    company = None
    if req.company_id is not None:
        company = db.query(CompanyModel).filter(CompanyModel.id == req.company_id).first()
        if not company:
            logger.warning("Company not found: %s", req.company_id)
            raise HTTPException(status_code=404, detail="Company not found")

    store = None
    if req.store_id is not None:
        store = db.query(StoreModel).filter(StoreModel.id == req.store_id).first()
        if not store:
            logger.warning("Store not found: %s", req.store_id)
            raise HTTPException(status_code=404, detail="Store not found")

    logger.info(
        "Generate receipt: company=%s  store=%s  payment=%s  items=%d",
        req.company_id or req.company_name, req.store_id, req.payment_method, len(req.items),
    )
    for _ in range(NUMBER_ATTEMPTS):
        document = compose_receipt(req, company, store)
        try:
            write_document(document, settings.RECEIPTS_DIR)
            break
        except FileExistsError:
            # the 8-digit suffix wraps; a new attempt draws the next number
            logger.warning("Receipt number %s already on disk, retrying", document.receipt_number)
    else:
        raise HTTPException(status_code=500, detail="Could not allocate a receipt number")

    return GenerateReceiptResponse(
        receipt_number=document.receipt_number,
        file_name=document.file_name,
        download_url=f"/receipts/{document.file_name}",
        design=document.design,
        template=document.template.name,
    )


# ── GET /receipts/{file_name} ────────────────────────────────────────────
@files_router.get("/receipts/{file_name}")
def download_receipt(file_name: str):
    if os.path.basename(file_name) != file_name or not file_name.endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Invalid file name")
    path = os.path.join(settings.RECEIPTS_DIR, file_name)
    if not os.path.isfile(path):
        logger.warning("Receipt file not found: %s", file_name)
        raise HTTPException(status_code=404, detail="Receipt not found")
    return FileResponse(path, media_type="application/pdf", filename=file_name)
