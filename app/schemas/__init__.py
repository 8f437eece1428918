"""
app/schemas package marker.
"""

from app.schemas.plan_import import (
    CommitRequest,
    CommitRowResponse,
    CommitSummaryResponse,
    ErrorResponse,
    ImportResultResponse,
    ParsedActivityResponse,
)

__all__ = [
    "CommitRequest",
    "CommitRowResponse",
    "CommitSummaryResponse",
    "ErrorResponse",
    "ImportResultResponse",
    "ParsedActivityResponse",
]
