"""
app/importers/project_xml_parser.py

Microsoft Project XML parser.

Every ``Task`` element is one source record. Tag matching ignores XML
namespaces, so both ``<Project xmlns="http://schemas.microsoft.com/project">``
exports and bare ``<Project>`` documents are read.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from app.domain.plan_import import CandidateRow
from app.errors import PlanParseError
from app.importers.values import clean_text, number_or_default

logger = logging.getLogger(__name__)

ACTIVITY_CODE_PREFIX = "MSP-"
HOURS_UNIT = "h"
DEFAULT_BOQ_QTY = 1.0
DEFAULT_WEIGHT = 0.1
WORK_TO_WEIGHT_DIVISOR = 100.0

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_duration_hours(raw_value: str | None) -> float | None:
    """
    Convert ``PT8H30M0S`` style durations (or plain numbers) to hours.
    """

    raw = clean_text(raw_value)
    if not raw:
        return None

    try:
        return float(raw)
    except ValueError:
        pass

    match = _ISO_DURATION.match(raw)
    if match is None or not any(match.groupdict().values()):
        return None

    parts = {key: float(value) if value else 0.0 for key, value in match.groupdict().items()}
    return parts["days"] * 24 + parts["hours"] + parts["minutes"] / 60 + parts["seconds"] / 3600


class ProjectXmlParser:
    """
    Maps Project XML tasks onto candidate rows.

    Tasks without UID or Name become error rows unless ``drop_incomplete_tasks``
    restores the historical behaviour of silently omitting them.
    """

    def __init__(
        self,
        *,
        project_code: str = "MSP_IMPORT",
        default_area_name: str = "Area Principal",
        default_system_name: str = "Sistema General",
        drop_incomplete_tasks: bool = False,
    ) -> None:
        self._project_code = project_code
        self._default_area_name = default_area_name
        self._default_system_name = default_system_name
        self._drop_incomplete_tasks = drop_incomplete_tasks

    def parse(self, content: bytes | str) -> list[CandidateRow]:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise PlanParseError(f"Malformed XML: {exc}") from exc

        candidates: list[CandidateRow] = []
        dropped = 0
        for task in root.iter():
            if local_name(task.tag) != "Task":
                continue

            uid = clean_text(self._child_text(task, "UID"))
            name = clean_text(self._child_text(task, "Name"))
            if not (uid and name) and self._drop_incomplete_tasks:
                dropped += 1
                continue

            candidates.append(self._to_candidate(task, uid=uid, name=name))

        if dropped:
            logger.warning("Dropped %s Project XML task(s) without UID or Name", dropped)
        return candidates

    def _to_candidate(self, task: ET.Element, *, uid: str, name: str) -> CandidateRow:
        duration = parse_duration_hours(self._child_text(task, "Duration"))
        work = parse_duration_hours(self._child_text(task, "Work"))
        return CandidateRow(
            project_code=self._project_code,
            area_name=self._default_area_name,
            system_name=self._default_system_name,
            activity_code=f"{ACTIVITY_CODE_PREFIX}{uid}" if uid else "",
            activity_name=name,
            unit=HOURS_UNIT,
            boq_qty=number_or_default(duration, DEFAULT_BOQ_QTY),
            weight=number_or_default(
                work / WORK_TO_WEIGHT_DIVISOR if work is not None else None,
                DEFAULT_WEIGHT,
            ),
        )

    @staticmethod
    def _child_text(node: ET.Element, name: str) -> str | None:
        for child in list(node):
            if local_name(child.tag) == name:
                return child.text
        return None
