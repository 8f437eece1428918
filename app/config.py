"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

CSV_MODES = ("rfc4180", "legacy")
DUPLICATE_POLICIES = ("reject", "skip", "upsert")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    """
    Read a lower-cased enum-like value; unknown values fall back to default.
    """

    value = _get_str_env(name, default).lower()
    return value if value in choices else default


@dataclass(frozen=True)
class PlanImportSettings:
    """
    Runtime settings for plan file parsing.
    """

    max_upload_bytes: int = 10 * 1024 * 1024
    csv_mode: str = "rfc4180"
    fallback_encoding: str = "cp1252"
    xer_project_code: str = "P6_IMPORT"
    xml_project_code: str = "MSP_IMPORT"
    default_area_name: str = "Area Principal"
    default_system_name: str = "Sistema General"
    xml_drop_incomplete_tasks: bool = False
    log_row_outcomes: bool = False


@dataclass(frozen=True)
class ActivityCommitSettings:
    """
    Runtime settings for committing validated activities.
    """

    duplicate_policy: str = "reject"
    batch_size: int = 500


@lru_cache(maxsize=1)
def get_plan_import_settings() -> PlanImportSettings:
    """
    Return cached plan import settings from environment variables.
    """

    return PlanImportSettings(
        max_upload_bytes=max(1, _get_int_env("PLAN_IMPORT_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
        csv_mode=_get_choice_env("PLAN_IMPORT_CSV_MODE", "rfc4180", CSV_MODES),
        fallback_encoding=_get_str_env("PLAN_IMPORT_FALLBACK_ENCODING", "cp1252"),
        xer_project_code=_get_str_env("PLAN_IMPORT_XER_PROJECT_CODE", "P6_IMPORT"),
        xml_project_code=_get_str_env("PLAN_IMPORT_XML_PROJECT_CODE", "MSP_IMPORT"),
        default_area_name=_get_str_env("PLAN_IMPORT_DEFAULT_AREA", "Area Principal"),
        default_system_name=_get_str_env("PLAN_IMPORT_DEFAULT_SYSTEM", "Sistema General"),
        xml_drop_incomplete_tasks=_get_bool_env("PLAN_IMPORT_XML_DROP_INCOMPLETE_TASKS", False),
        log_row_outcomes=_get_bool_env("PLAN_IMPORT_LOG_ROW_OUTCOMES", False),
    )


@lru_cache(maxsize=1)
def get_activity_commit_settings() -> ActivityCommitSettings:
    """
    Return cached commit settings from environment variables.
    """

    return ActivityCommitSettings(
        duplicate_policy=_get_choice_env("PLAN_IMPORT_DUPLICATE_POLICY", "reject", DUPLICATE_POLICIES),
        batch_size=max(1, _get_int_env("PLAN_IMPORT_COMMIT_BATCH_SIZE", 500)),
    )
