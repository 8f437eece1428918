"""
app/services/plan_import_service.py

Service layer for the plan import workflow.

    raw bytes -> FormatDetector -> format parser -> ActivityRowValidator
              -> build_import_result -> ImportResult (reviewed, then committed)

Parsing is a pure, synchronous transform of the uploaded bytes: the same
file always produces the same ImportResult. Nothing is persisted here.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.config import PlanImportSettings, get_plan_import_settings
from app.domain.plan_import import CandidateRow, ImportResult, RowStatus
from app.errors import PlanFileTooLargeError
from app.importers.csv_parser import CsvPlanParser
from app.importers.format_detector import DetectedFormat, PlanFormat, detect_plan_format
from app.importers.mpp_rejector import reject_mpp
from app.importers.project_xml_parser import ProjectXmlParser
from app.importers.report import build_import_result
from app.importers.values import decode_plan_text
from app.importers.xer_parser import XerPlanParser
from app.validators.activity_validator import ActivityRowValidator

logger = logging.getLogger(__name__)


class PlanImportService:
    """
    Turns one uploaded plan file into a reviewable ImportResult.
    """

    def __init__(
        self,
        *,
        settings: PlanImportSettings | None = None,
        validator: ActivityRowValidator | None = None,
    ) -> None:
        self._settings = settings or PlanImportSettings()
        self._validator = validator or ActivityRowValidator()
        self._csv_parser = CsvPlanParser(mode=self._settings.csv_mode)
        self._xer_parser = XerPlanParser(
            project_code=self._settings.xer_project_code,
            default_area_name=self._settings.default_area_name,
            default_system_name=self._settings.default_system_name,
        )
        self._xml_parser = ProjectXmlParser(
            project_code=self._settings.xml_project_code,
            default_area_name=self._settings.default_area_name,
            default_system_name=self._settings.default_system_name,
            drop_incomplete_tasks=self._settings.xml_drop_incomplete_tasks,
        )

    @property
    def max_upload_bytes(self) -> int:
        return self._settings.max_upload_bytes

    def parse_upload(self, *, file_name: str | None, content: bytes) -> ImportResult:
        """
        Classify, parse and validate one file.

        Raises:
            FormatUnsupportedError: the file suffix is not a plan format.
            PlanFileTooLargeError:  content exceeds the configured limit.
            PlanParseError:         content cannot be decoded or parsed.
        """

        detected = detect_plan_format(file_name, content)
        if detected.kind == PlanFormat.MPP:
            logger.info("Rejected binary Microsoft Project upload file=%r", file_name)
            return reject_mpp()

        if len(content) > self._settings.max_upload_bytes:
            raise PlanFileTooLargeError(
                f"File exceeds the {self._settings.max_upload_bytes}-byte upload limit."
            )

        candidates = self._parse_candidates(detected, content)
        activities = self._validator.validate_all(candidates)
        result = build_import_result(activities, detected.file_type)

        if self._settings.log_row_outcomes:
            self._log_row_outcomes(file_name, result)
        logger.info(
            "Parsed plan file=%r type=%r project_marker=%s total=%s valid=%s warning=%s error=%s",
            file_name,
            result.file_type,
            detected.project_marker_found,
            result.total_rows,
            result.valid_rows,
            result.warning_rows,
            result.error_rows,
        )
        return result

    def _parse_candidates(self, detected: DetectedFormat, content: bytes) -> list[CandidateRow]:
        if detected.kind == PlanFormat.PROJECT_XML:
            return self._xml_parser.parse(content)

        if detected.kind == PlanFormat.XER:
            text = decode_plan_text(content, fallback_encoding=self._settings.fallback_encoding)
            return self._xer_parser.parse(text)

        text = decode_plan_text(content)
        return self._csv_parser.parse(text)

    @staticmethod
    def _log_row_outcomes(file_name: str | None, result: ImportResult) -> None:
        for position, activity in enumerate(result.activities, start=1):
            if activity.status == RowStatus.VALID:
                continue
            logger.warning(
                "Plan row %s file=%r row=%s code=%r message=%s",
                activity.status,
                file_name,
                position,
                activity.activity_code,
                activity.error_message,
            )


@lru_cache(maxsize=1)
def get_plan_import_service() -> PlanImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    return PlanImportService(settings=get_plan_import_settings())
