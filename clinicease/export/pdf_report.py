from __future__ import annotations
from pathlib import Path
from typing import List

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..errors import StorageError
from ..models import Patient, Prescription
from .html_report import VALIDITY_NOTE

MARGIN = 20 * mm
LINE_HEIGHT = 12
# title row above the first text line, padding below the last
BOX_HEAD = 28
BOX_FOOT = 8
SECTION_GAP = 12
# keep clear of the validity note printed at the bottom of every page
BOTTOM_LIMIT = MARGIN + 16


def pdf_filename(prescription: Prescription) -> str:
    return f"prescription_{prescription.id}.pdf"


def _wrap(text: str, width: float) -> List[str]:
    lines: List[str] = []
    for paragraph in (text or "-").splitlines():
        lines.extend(simpleSplit(paragraph, "Helvetica", 9, width - 12) or [""])
    return lines


def _draw_box(c: "canvas.Canvas", title: str, lines: List[str], x: float, y: float, width: float) -> float:
    """Draw a titled box sized to ``lines``; returns the y just below it."""
    height = BOX_HEAD + LINE_HEIGHT * max(len(lines), 1) + BOX_FOOT - LINE_HEIGHT
    c.rect(x, y - height, width, height, stroke=1, fill=0)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(x + 6, y - 16, title)
    c.setFont("Helvetica", 9)
    text_y = y - BOX_HEAD
    for line in lines:
        c.drawString(x + 6, text_y, line)
        text_y -= LINE_HEIGHT
    return y - height


def _finish_page(c: "canvas.Canvas", page_width: float) -> None:
    c.setFont("Helvetica", 8)
    c.drawCentredString(page_width / 2, MARGIN, VALIDITY_NOTE)
    c.showPage()


def _draw_section(c: "canvas.Canvas", title: str, text: str, y: float) -> float:
    """Draw a section, continuing it on new pages while its lines do not fit."""
    page_width, page_height = A4
    box_width = page_width - 2 * MARGIN
    lines = _wrap(text, box_width)
    while True:
        room = int((y - BOTTOM_LIMIT - BOX_HEAD - BOX_FOOT) // LINE_HEIGHT) + 1
        if room < 1:
            _finish_page(c, page_width)
            y = page_height - MARGIN
            continue
        chunk, lines = lines[:room], lines[room:]
        y = _draw_box(c, title, chunk, MARGIN, y, box_width) - SECTION_GAP
        if not lines:
            return y
        title = f"{title} (continued)" if not title.endswith("(continued)") else title
        _finish_page(c, page_width)
        y = page_height - MARGIN


def build_prescription_pdf(out_pdf_path: str | Path, prescription: Prescription, patient: Patient) -> Path:
    """Render the prescription on A4 pages; long lists continue on further pages."""
    target = Path(out_pdf_path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        c = canvas.Canvas(str(target), pagesize=A4)
        width, height = A4

        y = height - MARGIN
        c.setFont("Helvetica-Bold", 16)
        c.drawString(MARGIN, y, "Medical Prescription")
        y -= 18
        c.setFont("Helvetica", 10)
        c.drawString(MARGIN, y, f"Prescription ID: {prescription.id}")
        y -= 12
        c.drawString(MARGIN, y, f"Date: {prescription.issued_at}")
        y -= 18

        patient_text = "\n".join([
            f"NRIC: {patient.id}    Name: {patient.name}",
            f"Date of Birth: {patient.dob}    Gender: {patient.gender}",
            f"Contact: {patient.contact}",
            f"Address: {patient.address}",
        ])
        y = _draw_section(c, "Patient", patient_text, y)
        for title, items in (("Symptoms", prescription.symptoms), ("Prescribed Medicines", prescription.medicines)):
            y = _draw_section(c, title, "\n".join(f"- {item}" for item in items), y)
        if prescription.notes:
            _draw_section(c, "Additional Notes", prescription.notes, y)

        _finish_page(c, width)
        c.save()
    except OSError as exc:
        raise StorageError(f"Cannot write {target}: {exc}") from exc
    return target
