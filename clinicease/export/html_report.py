from __future__ import annotations
from html import escape
from pathlib import Path
from typing import Iterable, List

from ..errors import StorageError
from ..models import Patient, Prescription

VALIDITY_NOTE = "This prescription is valid for 30 days from the date of issue."

_STYLE = """\
body { font-family: Arial, sans-serif; margin: 40px; }
.prescription { border: 1px solid #ccc; padding: 20px; max-width: 800px; margin: 0 auto; }
.header { text-align: center; margin-bottom: 20px; }
.header h1 { color: #2c3e50; }
.patient-info { display: grid; grid-template-columns: 1fr 1fr; gap: 10px; margin-bottom: 20px; }
.patient-info div { padding: 5px; }
.section { margin-top: 15px; border-top: 1px solid #eee; padding-top: 15px; }
.section h3 { color: #3498db; }
ul { padding-left: 20px; }
.notes { background-color: #f9f9f9; padding: 10px; border-left: 3px solid #3498db; }
.footer { margin-top: 30px; text-align: center; font-size: 0.9em; color: #7f8c8d; }
.print-btn { display: block; margin: 20px auto; padding: 10px 20px; background-color: #3498db; color: white; border: none; border-radius: 4px; cursor: pointer; }
@media print { .print-btn { display: none; } }
"""


def html_filename(prescription: Prescription) -> str:
    return f"prescription_{prescription.id}.html"


def _list_section(title: str, items: Iterable[str]) -> List[str]:
    lines = ['  <div class="section">', f'    <h3>{escape(title)}</h3>', '    <ul>']
    lines.extend(f'      <li>{escape(item)}</li>' for item in items)
    lines.extend(['    </ul>', '  </div>'])
    return lines


def render_prescription_html(prescription: Prescription, patient: Patient) -> str:
    info = [
        ("Patient NRIC", patient.id),
        ("Name", patient.name),
        ("Date of Birth", patient.dob),
        ("Gender", patient.gender),
        ("Contact", patient.contact),
        ("Address", patient.address),
    ]
    lines = [
        '<!DOCTYPE html>',
        '<html>',
        '<head>',
        '<meta charset="utf-8">',
        f'<title>Prescription for {escape(patient.name)}</title>',
        '<style>',
        _STYLE,
        '</style>',
        '</head>',
        '<body>',
        '<div class="prescription">',
        '  <div class="header">',
        '    <h1>Medical Prescription</h1>',
        f'    <p>Prescription ID: {escape(prescription.id)}</p>',
        f'    <p>Date: {escape(prescription.issued_at)}</p>',
        '  </div>',
        '  <div class="patient-info">',
    ]
    lines.extend(f'    <div><strong>{label}:</strong> {escape(value)}</div>' for label, value in info)
    lines.append('  </div>')
    lines.extend(_list_section("Symptoms", prescription.symptoms))
    lines.extend(_list_section("Prescribed Medicines", prescription.medicines))
    if prescription.notes:
        lines.extend([
            '  <div class="section">',
            '    <h3>Additional Notes</h3>',
            f'    <div class="notes">{escape(prescription.notes)}</div>',
            '  </div>',
        ])
    lines.extend([
        '  <div class="footer">',
        f'    <p>{VALIDITY_NOTE}</p>',
        '  </div>',
        '</div>',
        '<button class="print-btn" onclick="window.print()">Print Prescription</button>',
        '</body>',
        '</html>',
    ])
    return '\n'.join(lines) + '\n'


def write_prescription_html(prescription: Prescription, patient: Patient, out_dir: str | Path) -> Path:
    folder = Path(out_dir)
    target = folder / html_filename(prescription)
    try:
        folder.mkdir(parents=True, exist_ok=True)
        target.write_text(render_prescription_html(prescription, patient), encoding='utf-8')
    except OSError as exc:
        raise StorageError(f"Cannot write {target}: {exc}") from exc
    return target
