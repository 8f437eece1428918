"""
app/importers/format_detector.py

Classifies an uploaded plan file to choose its parser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from app.domain.plan_import import PlanFileType
from app.errors import FormatUnsupportedError

logger = logging.getLogger(__name__)

# Matches <Project>, <project ...>, <Project xmlns="..."> and prefixed <msp:Project>.
_PROJECT_ROOT_MARKER = re.compile(rb"<\s*(?:[\w.-]+:)?project(?=[\s>/])", re.IGNORECASE)


class PlanFormat:
    CSV = "csv"
    XER = "xer"
    PROJECT_XML = "project_xml"
    MPP = "mpp"


_SUFFIXES: dict[str, tuple[str, str]] = {
    ".csv": (PlanFormat.CSV, PlanFileType.CSV),
    ".xer": (PlanFormat.XER, PlanFileType.XER),
    ".xml": (PlanFormat.PROJECT_XML, PlanFileType.PROJECT_XML),
    ".mpp": (PlanFormat.MPP, PlanFileType.MPP),
}

SUPPORTED_SUFFIXES: tuple[str, ...] = tuple(_SUFFIXES)


@dataclass(frozen=True)
class DetectedFormat:
    """
    Parser choice for one upload.
    """

    kind: str
    file_type: str
    project_marker_found: bool = True


def has_project_root_marker(content: bytes) -> bool:
    return _PROJECT_ROOT_MARKER.search(content) is not None


def detect_plan_format(file_name: str | None, content: bytes = b"") -> DetectedFormat:
    """
    Match the file suffix (case-insensitive); sniff XML content for a project root.

    An `.xml` without the marker is still routed to the Project-XML parser.
    """

    normalized = (file_name or "").strip().lower()
    for suffix, (kind, file_type) in _SUFFIXES.items():
        if not normalized.endswith(suffix):
            continue
        if kind != PlanFormat.PROJECT_XML:
            return DetectedFormat(kind=kind, file_type=file_type)

        marker_found = has_project_root_marker(content)
        if not marker_found:
            logger.warning(
                "XML upload has no project root element; parsing as Project XML anyway file=%r",
                file_name,
            )
        return DetectedFormat(kind=kind, file_type=file_type, project_marker_found=marker_found)

    raise FormatUnsupportedError(
        f"Unsupported file type: {normalized or '<unnamed>'}. "
        f"Allowed extensions: {', '.join(SUPPORTED_SUFFIXES)}."
    )
