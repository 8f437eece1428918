"""
tests/conftest.py

Shared fixtures: an in-memory ActivityStore and settings cache handling.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

import pytest

from app.config import get_activity_commit_settings, get_plan_import_settings
from app.domain.plan_import import ParsedActivity
from app.repositories.activity_repository import ON_CONFLICT_UPDATE


class InMemoryActivityStore:
    """
    Dict-backed ActivityStore with staged writes, commit and rollback.

    ``concurrent_codes`` simulates rows another transaction inserts between
    the duplicate check and the insert: they are invisible to
    list_activity_codes but conflict on insert.
    """

    def __init__(
        self,
        projects: Iterable[str] = ("FP01",),
        existing: dict[str, Iterable[str]] | None = None,
        concurrent_codes: Iterable[str] = (),
        fail_on_insert: Exception | None = None,
    ) -> None:
        self.project_ids: dict[str, uuid.UUID] = {code: uuid.uuid4() for code in projects}
        self.committed: dict[tuple[uuid.UUID, str], dict] = {}
        self.staged: dict[tuple[uuid.UUID, str], dict] = {}
        self.concurrent_codes = set(concurrent_codes)
        self.fail_on_insert = fail_on_insert
        self.commit_count = 0
        self.rollback_count = 0
        self.insert_calls: list[dict] = []

        for project_code, codes in (existing or {}).items():
            project_id = self.project_ids[project_code]
            for code in codes:
                self.committed[(project_id, code)] = {"code": code, "name": f"existing {code}"}

    def find_project_id(self, project_code: str) -> uuid.UUID | None:
        return self.project_ids.get(project_code)

    def list_activity_codes(
        self,
        project_id: uuid.UUID,
        codes: Iterable[str] | None = None,
    ) -> set[str]:
        stored = {code for (pid, code) in self.committed if pid == project_id}
        if codes is None:
            return stored
        return stored & set(codes)

    def insert_activities(
        self,
        project_id: uuid.UUID,
        activities: Sequence[ParsedActivity],
        *,
        on_conflict: str,
        created_by: str | None = None,
        batch_size: int = 500,
    ) -> dict[str, bool]:
        self.insert_calls.append(
            {"on_conflict": on_conflict, "created_by": created_by, "batch_size": batch_size}
        )
        if self.fail_on_insert is not None:
            raise self.fail_on_insert

        written: dict[str, bool] = {}
        for activity in activities:
            key = (project_id, activity.activity_code)
            exists = key in self.committed or activity.activity_code in self.concurrent_codes
            payload = {
                "code": activity.activity_code,
                "name": activity.activity_name,
                "created_by": created_by,
            }
            if not exists:
                self.staged[key] = payload
                written[activity.activity_code] = True
            elif on_conflict == ON_CONFLICT_UPDATE:
                self.staged[key] = payload
                written[activity.activity_code] = False
        return written

    def commit(self) -> None:
        self.committed.update(self.staged)
        self.staged.clear()
        self.commit_count += 1

    def rollback(self) -> None:
        self.staged.clear()
        self.rollback_count += 1

    def codes_for(self, project_code: str) -> set[str]:
        return self.list_activity_codes(self.project_ids[project_code])


def make_activity(
    activity_code: str = "A-0001",
    *,
    project_code: str = "FP01",
    activity_name: str = "Soldadura spool",
    boq_qty: float = 120.0,
    weight: float = 0.2,
    status: str = "valid",
    error_message: str | None = None,
) -> ParsedActivity:
    return ParsedActivity(
        project_code=project_code,
        area_name="Area 1",
        system_name="Sistema Proceso",
        activity_code=activity_code,
        activity_name=activity_name,
        unit="u",
        boq_qty=boq_qty,
        weight=weight,
        status=status,
        error_message=error_message,
    )


@pytest.fixture()
def store_factory():
    return InMemoryActivityStore


@pytest.fixture()
def activity_factory():
    return make_activity


@pytest.fixture()
def clear_settings_cache():
    get_plan_import_settings.cache_clear()
    get_activity_commit_settings.cache_clear()
    yield
    get_plan_import_settings.cache_clear()
    get_activity_commit_settings.cache_clear()
