"""
Plan file parsers and the shared report builder.
"""

from app.importers.csv_parser import CsvPlanParser
from app.importers.format_detector import DetectedFormat, PlanFormat, detect_plan_format
from app.importers.mpp_rejector import reject_mpp
from app.importers.project_xml_parser import ProjectXmlParser
from app.importers.report import build_import_result
from app.importers.xer_parser import XerPlanParser

__all__ = [
    "CsvPlanParser",
    "DetectedFormat",
    "PlanFormat",
    "ProjectXmlParser",
    "XerPlanParser",
    "build_import_result",
    "detect_plan_format",
    "reject_mpp",
]
