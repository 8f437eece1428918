"""
app/services package marker.
"""

from app.services.activity_commit_service import (
    ActivityCommitService,
    get_activity_commit_service,
)
from app.services.plan_import_service import PlanImportService, get_plan_import_service
from app.services.template_service import PlanTemplate, get_plan_template

__all__ = [
    "ActivityCommitService",
    "get_activity_commit_service",
    "PlanImportService",
    "get_plan_import_service",
    "PlanTemplate",
    "get_plan_template",
]
