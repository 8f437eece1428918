"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, UploadFile

from app.errors import FormatUnsupportedError


def get_plan_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Require a named upload; the suffix decides which parser runs.
    """

    if not (file.filename or "").strip():
        raise FormatUnsupportedError("The uploaded file has no name; a file suffix is required.")

    return file
