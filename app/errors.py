"""
app/errors.py

Request-level failures of the plan import and commit flows.

Row-level problems never raise; they are expressed as row status instead.
"""

from __future__ import annotations

from typing import Sequence


class PlanImportError(Exception):
    """
    Base exception; carries the `{error, details}` body and an HTTP status.
    """

    status_code = 500
    error = "Error parsing project file"

    def __init__(self, details: str, *, error: str | None = None) -> None:
        super().__init__(details)
        self.details = details
        if error is not None:
            self.error = error

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "details": self.details}


class FormatUnsupportedError(PlanImportError):
    """
    Raised when the uploaded file name has no recognized plan suffix.
    """

    status_code = 400
    error = "Unsupported file type"


class PlanFileTooLargeError(PlanImportError):
    status_code = 413
    error = "File too large"


class PlanParseError(PlanImportError):
    """
    Raised when file content cannot be decoded or structurally parsed.
    """

    status_code = 422
    error = "Error parsing project file"


class NoValidActivitiesError(PlanImportError):
    status_code = 400
    error = "No valid activities to import"


class ProjectNotFoundError(PlanImportError):
    status_code = 404
    error = "Project not found"


class AmbiguousProjectError(PlanImportError):
    """
    Raised when no target project is given and the rows name several.
    """

    status_code = 400
    error = "Target project is ambiguous"


class DuplicateActivityCodesError(PlanImportError):
    """
    Raised in reject mode when candidate codes already exist for the project.
    """

    status_code = 409
    error = "Duplicate activity codes"

    def __init__(self, *, project_code: str, codes: Sequence[str]) -> None:
        self.codes = tuple(sorted(codes))
        preview = ", ".join(self.codes[:20])
        if len(self.codes) > 20:
            preview += f" (+{len(self.codes) - 20} more)"
        super().__init__(
            f"Project {project_code} already has activities with codes: {preview}."
        )


class CommitPersistenceError(PlanImportError):
    """
    Raised when valid rows cannot be persisted.
    """

    status_code = 500
    error = "Unable to persist activities"


class TemplateNotFoundError(PlanImportError):
    status_code = 404
    error = "Template not found"
