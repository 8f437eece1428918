from __future__ import annotations

import logging

import pytest

from app.domain.plan_import import PlanFileType
from app.errors import FormatUnsupportedError
from app.importers.format_detector import PlanFormat, detect_plan_format, has_project_root_marker

PROJECT_XML = b'<?xml version="1.0"?>\n<Project xmlns="http://schemas.microsoft.com/project"><Tasks/></Project>'


class TestDetectPlanFormat:
    @pytest.mark.parametrize(
        ("file_name", "kind", "file_type"),
        [
            ("plan.csv", PlanFormat.CSV, PlanFileType.CSV),
            ("PLAN.CSV", PlanFormat.CSV, PlanFileType.CSV),
            ("export.xer", PlanFormat.XER, PlanFileType.XER),
            ("schedule.Mpp", PlanFormat.MPP, PlanFileType.MPP),
        ],
    )
    def test_suffix_selects_parser(self, file_name: str, kind: str, file_type: str) -> None:
        detected = detect_plan_format(file_name, b"")

        assert detected.kind == kind
        assert detected.file_type == file_type

    def test_project_xml_with_marker(self) -> None:
        detected = detect_plan_format("schedule.xml", PROJECT_XML)

        assert detected.kind == PlanFormat.PROJECT_XML
        assert detected.file_type == PlanFileType.PROJECT_XML
        assert detected.project_marker_found is True

    def test_xml_without_marker_is_still_project_xml(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="app.importers.format_detector"):
            detected = detect_plan_format("data.xml", b"<root><item/></root>")

        assert detected.kind == PlanFormat.PROJECT_XML
        assert detected.project_marker_found is False
        assert "no project root element" in caplog.text

    @pytest.mark.parametrize("file_name", ["notes.docx", "plan.csv.bak", "", None, "xer"])
    def test_unsupported_names_raise(self, file_name: str | None) -> None:
        with pytest.raises(FormatUnsupportedError) as exc_info:
            detect_plan_format(file_name, b"whatever")

        assert exc_info.value.status_code == 400
        assert exc_info.value.to_dict()["error"] == "Unsupported file type"


class TestProjectRootMarker:
    @pytest.mark.parametrize(
        "content",
        [
            b"<Project>",
            b"<project >",
            b'<Project xmlns="http://schemas.microsoft.com/project">',
            b"<msp:Project/>",
            b"<  PROJECT\n  Name='x'>",
        ],
    )
    def test_detects_project_root(self, content: bytes) -> None:
        assert has_project_root_marker(content) is True

    @pytest.mark.parametrize("content", [b"<Projects>", b"<ProjectName>", b"<root/>", b""])
    def test_ignores_lookalikes(self, content: bytes) -> None:
        assert has_project_root_marker(content) is False
