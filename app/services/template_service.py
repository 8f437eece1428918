"""
app/services/template_service.py

Downloadable starter files for the plan import.
"""

from __future__ import annotations

import csv
import io
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from app.domain.plan_import import PLAN_COLUMNS
from app.errors import TemplateNotFoundError

TEMPLATE_CSV = "csv"
TEMPLATE_XML = "xml"

SAMPLE_ROWS: tuple[tuple[str, ...], ...] = (
    ("FP01", "Área 1", "Sistema Proceso", "A-0001", 'Soldadura spool 2"', "u", "120", "0.20"),
    ("FP01", "Área 1", "Sistema Eléctrico", "A-0101", "Tendido bandeja principal", "m", "200", "0.25"),
    ("FP01", "Área 2", "Sistema Instrumentos", "A-0205", "Instalación transmisores", "u", "40", "0.15"),
)

PROJECT_XML_NAMESPACE = "http://schemas.microsoft.com/project"


@dataclass(frozen=True)
class PlanTemplate:
    file_name: str
    media_type: str
    content: str


def build_csv_template() -> str:
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(PLAN_COLUMNS)
    writer.writerows(SAMPLE_ROWS)
    return buffer.getvalue()


def build_project_xml_template() -> str:
    """
    Minimal Microsoft Project XML document with one sample task.

    Only UID, Name, Duration and Work are read on import; Duration feeds
    boq_qty in hours and Work / 100 feeds weight.
    """

    root = ET.Element(f"{{{PROJECT_XML_NAMESPACE}}}Project")
    ET.SubElement(root, f"{{{PROJECT_XML_NAMESPACE}}}Name").text = "Plan template"
    tasks = ET.SubElement(root, f"{{{PROJECT_XML_NAMESPACE}}}Tasks")
    task = ET.SubElement(tasks, f"{{{PROJECT_XML_NAMESPACE}}}Task")
    for tag, value in (
        ("UID", "1"),
        ("Name", "Tendido bandeja principal"),
        ("Duration", "PT16H0M0S"),
        ("Work", "PT32H0M0S"),
    ):
        ET.SubElement(task, f"{{{PROJECT_XML_NAMESPACE}}}{tag}").text = value

    ET.indent(root)
    body = ET.tostring(root, encoding="unicode", default_namespace=PROJECT_XML_NAMESPACE)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def get_plan_template(kind: str) -> PlanTemplate:
    normalized = (kind or "").strip().lower()
    if normalized == TEMPLATE_CSV:
        return PlanTemplate(
            file_name="activities_template.csv",
            media_type="text/csv",
            content=build_csv_template(),
        )
    if normalized == TEMPLATE_XML:
        return PlanTemplate(
            file_name="activities_template.xml",
            media_type="application/xml",
            content=build_project_xml_template(),
        )
    raise TemplateNotFoundError(f"Unknown template kind: {kind!r}. Expected 'csv' or 'xml'.")
