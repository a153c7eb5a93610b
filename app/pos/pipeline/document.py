"""
PDF output for rendered receipts.

Draws a ReceiptDocument onto a narrow thermal-style page with ReportLab. The
page is as tall as the document needs, so every receipt is a single page.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.pos.schemas import ReceiptDocument

logger = logging.getLogger(__name__)

PAGE_WIDTH = 280
MARGIN = 5 * mm
LEADING = 10
FONT = "Courier"
FONT_BOLD = "Courier-Bold"
FONT_SIZE = 8


def page_size(document: ReceiptDocument) -> tuple[float, float]:
    rows = sum(len(block.lines) for block in document.blocks)
    return PAGE_WIDTH, rows * LEADING + 2 * MARGIN


def draw(document: ReceiptDocument, target) -> None:
    """Draw ``document`` onto ``target`` (a path or a binary file object)."""
    width, height = page_size(document)
    pdf = canvas.Canvas(target, pagesize=(width, height))
    pdf.setTitle(document.design)
    pdf.setSubject(document.receipt_number)

    y = height - MARGIN - FONT_SIZE
    right_edge = width - MARGIN
    for block in document.blocks:
        for line in block.lines:
            pdf.setFont(FONT_BOLD if line.bold else FONT, FONT_SIZE)
            if line.align == "center":
                pdf.drawCentredString(width / 2, y, line.text)
            elif line.align == "right":
                pdf.drawRightString(right_edge, y, line.text)
            else:
                pdf.drawString(MARGIN, y, line.text)
            if line.right:
                pdf.drawRightString(right_edge, y, line.right)
            y -= LEADING

    pdf.showPage()
    pdf.save()


def write_document(document: ReceiptDocument, directory: Union[str, Path]) -> Path:
    """Write ``document`` as ``receipt-<number>.pdf`` under ``directory``.

    Never overwrites: an existing file with that name raises FileExistsError.
    """
    os.makedirs(directory, exist_ok=True)
    path = Path(directory) / document.file_name
    with open(path, "xb") as fh:
        draw(document, fh)
    logger.info("Receipt written: %s", path)
    return path
