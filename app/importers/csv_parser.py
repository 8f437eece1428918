"""
app/importers/csv_parser.py

Positional CSV plan parser.

Columns are read by index, never by header name:
project_code, area_name, system_name, activity_code, activity_name, unit,
boq_qty, weight. The header line only fixes the expected row width.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator, Sequence

from app.domain.plan_import import PLAN_COLUMNS, CandidateRow
from app.errors import PlanParseError
from app.importers.values import clean_text, is_number, parse_number

logger = logging.getLogger(__name__)

CSV_MODE_RFC4180 = "rfc4180"
CSV_MODE_LEGACY = "legacy"


class CsvPlanParser:
    """
    Parses delimited plan text into candidate rows.

    ``rfc4180`` honours quoted fields (commas inside quotes stay in the value);
    ``legacy`` splits every line on commas and strips all double quotes.
    """

    def __init__(self, *, mode: str = CSV_MODE_RFC4180) -> None:
        if mode not in (CSV_MODE_RFC4180, CSV_MODE_LEGACY):
            raise ValueError(f"Unknown CSV mode: {mode!r}")
        self._mode = mode

    @property
    def mode(self) -> str:
        return self._mode

    def parse(self, text: str) -> list[CandidateRow]:
        records = self._iter_records(text)
        first = next(records, None)
        if first is None:
            return []

        width = len(first)
        candidates: list[CandidateRow] = []
        if not self._looks_like_header(first):
            # Headerless upload: the first record is data and sets the width.
            candidates.append(self._to_candidate(first))

        for line_number, values in enumerate(records, start=2):
            if len(values) < width:
                logger.debug(
                    "Skipping short CSV row record=%s fields=%s expected=%s",
                    line_number,
                    len(values),
                    width,
                )
                continue
            candidates.append(self._to_candidate(values))
        return candidates

    def _iter_records(self, text: str) -> Iterator[list[str]]:
        if self._mode == CSV_MODE_LEGACY:
            return self._iter_legacy(text)
        return self._iter_rfc4180(text)

    @staticmethod
    def _iter_legacy(text: str) -> Iterator[list[str]]:
        for line in text.split("\n"):
            if not line.strip():
                continue
            yield [value.strip().replace('"', "") for value in line.split(",")]

    @staticmethod
    def _iter_rfc4180(text: str) -> Iterator[list[str]]:
        reader = csv.reader(io.StringIO(text, newline=""), skipinitialspace=True)
        try:
            for row in reader:
                if not row or (len(row) == 1 and not row[0].strip()):
                    continue
                yield [value.strip() for value in row]
        except csv.Error as exc:
            raise PlanParseError(f"Invalid CSV format: {exc}") from exc

    @staticmethod
    def _looks_like_header(values: Sequence[str]) -> bool:
        """
        A header never carries a number in the boq_qty or weight position.
        """

        numeric_positions = (PLAN_COLUMNS.index("boq_qty"), PLAN_COLUMNS.index("weight"))
        return not any(
            index < len(values) and is_number(values[index]) for index in numeric_positions
        )

    @staticmethod
    def _to_candidate(values: Sequence[str]) -> CandidateRow:
        def column(name: str) -> str:
            index = PLAN_COLUMNS.index(name)
            return clean_text(values[index]) if index < len(values) else ""

        return CandidateRow(
            project_code=column("project_code"),
            area_name=column("area_name"),
            system_name=column("system_name"),
            activity_code=column("activity_code"),
            activity_name=column("activity_name"),
            unit=column("unit"),
            boq_qty=parse_number(column("boq_qty")),
            weight=parse_number(column("weight")),
        )
