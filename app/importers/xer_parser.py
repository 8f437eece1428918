"""
app/importers/xer_parser.py

Primavera P6 XER parser extracting the TASK table.

XER is line oriented and tab delimited. Each line starts with a marker:

    %T  table start       %T<TAB>TASK
    %F  field names       %F<TAB>task_id<TAB>task_code<TAB>...
    %R  row values        %R<TAB>1001<TAB>A-100<TAB>...
    %E  end of file

Some exporters put the field list on the %T line itself and prefix each row
with the table name (``%R<TAB>TASK<TAB>...``); both layouts are accepted.
A TASK section ends at %E or at the next %T line.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from app.domain.plan_import import CandidateRow
from app.importers.values import clean_text, number_or_default

logger = logging.getLogger(__name__)

TABLE_MARKER = "%T"
FIELDS_MARKER = "%F"
ROW_MARKER = "%R"
END_MARKER = "%E"
TASK_TABLE = "TASK"

DEFAULT_UNIT = "u"
DEFAULT_BOQ_QTY = 1.0
DEFAULT_WEIGHT = 0.1

# Exact, case-insensitive column names per normalized field. Bump the version
# when the list changes so mapping drift is traceable in logs.
XER_FIELD_ALLOWLIST_VERSION = 1
XER_FIELD_ALLOWLIST: dict[str, tuple[str, ...]] = {
    "activity_code": ("task_code",),
    "activity_name": ("task_name",),
    "unit": ("unit", "unit_name"),
    "boq_qty": ("budgeted_total_cost", "target_cost"),
    "weight": ("remaining_duration", "remain_drtn_hr_cnt"),
    "area_name": ("area_name",),
    "system_name": ("system_name",),
}

# Positional fallbacks used only when the column is absent from the header.
_POSITIONAL_FALLBACK: dict[str, int] = {
    "activity_code": 0,
    "activity_name": 1,
}


@dataclass(frozen=True)
class XerColumnMap:
    """
    Resolved header index per normalized field; None when the header lacks it.
    """

    indexes: dict[str, int | None]

    @classmethod
    def resolve(
        cls,
        headers: Sequence[str],
        allowlist: Mapping[str, Sequence[str]] = XER_FIELD_ALLOWLIST,
    ) -> "XerColumnMap":
        lowered = [header.strip().lower() for header in headers]
        indexes: dict[str, int | None] = {}
        for field_name, names in allowlist.items():
            indexes[field_name] = next(
                (lowered.index(name) for name in names if name in lowered),
                None,
            )
        return cls(indexes=indexes)

    def value(self, values: Sequence[str], field_name: str) -> str | None:
        """
        Column value, or None on a true miss (column not in header).
        """

        index = self.indexes.get(field_name)
        if index is None:
            index = _POSITIONAL_FALLBACK.get(field_name)
            if index is None:
                return None
        return clean_text(values[index]) if index < len(values) else ""


class XerPlanParser:
    """
    Parses the TASK table of an XER export into candidate rows.
    """

    def __init__(
        self,
        *,
        project_code: str = "P6_IMPORT",
        default_area_name: str = "Area Principal",
        default_system_name: str = "Sistema General",
    ) -> None:
        self._project_code = project_code
        self._default_area_name = default_area_name
        self._default_system_name = default_system_name

    def parse(self, text: str) -> list[CandidateRow]:
        candidates: list[CandidateRow] = []
        in_task_section = False
        rows_prefixed_with_table = False
        column_map: XerColumnMap | None = None

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            tokens = line.split("\t")
            marker = tokens[0].strip()

            if marker == TABLE_MARKER:
                table = tokens[1].strip() if len(tokens) > 1 else ""
                in_task_section = table == TASK_TABLE
                column_map = None
                if in_task_section:
                    inline_headers = tokens[2:]
                    rows_prefixed_with_table = bool(inline_headers)
                    if inline_headers:
                        column_map = self._resolve_columns(inline_headers)
                continue

            if marker == END_MARKER:
                in_task_section = False
                continue

            if not in_task_section:
                continue

            if marker == FIELDS_MARKER:
                rows_prefixed_with_table = False
                column_map = self._resolve_columns(tokens[1:])
                continue

            if marker != ROW_MARKER:
                continue

            if rows_prefixed_with_table:
                if len(tokens) < 2 or tokens[1].strip() != TASK_TABLE:
                    continue
                values = tokens[2:]
            else:
                values = tokens[1:]

            candidates.append(self._to_candidate(values, column_map or XerColumnMap.resolve(())))

        return candidates

    @staticmethod
    def _resolve_columns(headers: Sequence[str]) -> XerColumnMap:
        column_map = XerColumnMap.resolve(headers)
        unmapped = sorted(name for name, index in column_map.indexes.items() if index is None)
        if unmapped:
            logger.info(
                "XER TASK header missing allowlisted columns version=%s fields=%s",
                XER_FIELD_ALLOWLIST_VERSION,
                unmapped,
            )
        return column_map

    def _to_candidate(self, values: Sequence[str], columns: XerColumnMap) -> CandidateRow:
        unit = columns.value(values, "unit")
        return CandidateRow(
            project_code=self._project_code,
            area_name=columns.value(values, "area_name") or self._default_area_name,
            system_name=columns.value(values, "system_name") or self._default_system_name,
            activity_code=columns.value(values, "activity_code") or "",
            activity_name=columns.value(values, "activity_name") or "",
            unit=unit or DEFAULT_UNIT,
            boq_qty=number_or_default(columns.value(values, "boq_qty"), DEFAULT_BOQ_QTY),
            weight=number_or_default(columns.value(values, "weight"), DEFAULT_WEIGHT),
        )
