"""
app/services/activity_commit_service.py

Commits the valid subset of a reviewed import into a project.

Duplicate handling is governed by one policy per commit:

    reject  any candidate code that already exists aborts the whole commit
    skip    existing codes are left untouched and reported as already_exists
    upsert  existing codes are updated in place

The (project_id, code) unique constraint is the final arbiter: a concurrent
commit that lands between the duplicate check and the insert is caught by
ON CONFLICT and, in reject mode, rolls this commit back.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError

from app.config import ActivityCommitSettings, get_activity_commit_settings
from app.domain.plan_import import (
    CandidateRow,
    CommitOutcome,
    CommitRowResult,
    CommitSummary,
    ParsedActivity,
)
from app.errors import (
    AmbiguousProjectError,
    CommitPersistenceError,
    DuplicateActivityCodesError,
    NoValidActivitiesError,
    ProjectNotFoundError,
)
from app.repositories.activity_repository import (
    ON_CONFLICT_NOTHING,
    ON_CONFLICT_UPDATE,
    ActivityStore,
    storage_limit_problem,
)
from app.validators.activity_validator import ActivityRowValidator

logger = logging.getLogger(__name__)

POLICY_REJECT = "reject"
POLICY_SKIP = "skip"
POLICY_UPSERT = "upsert"


class ActivityCommitService:
    """
    Persists validated activities through an ActivityStore.
    """

    def __init__(
        self,
        *,
        duplicate_policy: str = POLICY_REJECT,
        batch_size: int = 500,
        validator: ActivityRowValidator | None = None,
    ) -> None:
        if duplicate_policy not in (POLICY_REJECT, POLICY_SKIP, POLICY_UPSERT):
            raise ValueError(f"Unknown duplicate policy: {duplicate_policy!r}")
        self._duplicate_policy = duplicate_policy
        self._batch_size = max(1, batch_size)
        self._validator = validator or ActivityRowValidator()

    @property
    def duplicate_policy(self) -> str:
        return self._duplicate_policy

    def commit(
        self,
        *,
        store: ActivityStore,
        activities: Sequence[ParsedActivity],
        project_code: str | None = None,
        created_by: str | None = None,
    ) -> CommitSummary:
        """
        Insert the valid rows of ``activities`` into the target project.

        Rows are re-validated here: a client cannot promote a row to valid
        by editing its status field. Rows that do not fit the activities
        table are reported not_valid instead of failing the whole commit.
        """

        results: dict[int, CommitRowResult] = {}
        pending: list[tuple[int, ParsedActivity]] = []
        seen_codes: set[str] = set()

        for index, activity in enumerate(activities):
            checked = self._revalidate(activity)
            if not checked.is_valid:
                results[index] = CommitRowResult(
                    activity_code=checked.activity_code,
                    outcome=CommitOutcome.NOT_VALID,
                    message=checked.error_message,
                )
                continue
            problem = storage_limit_problem(checked)
            if problem is not None:
                results[index] = CommitRowResult(
                    activity_code=checked.activity_code,
                    outcome=CommitOutcome.NOT_VALID,
                    message=problem,
                )
                continue
            if checked.activity_code in seen_codes:
                results[index] = CommitRowResult(
                    activity_code=checked.activity_code,
                    outcome=CommitOutcome.DUPLICATE_IN_FILE,
                    message="Activity code appears earlier in the same import.",
                )
                continue
            seen_codes.add(checked.activity_code)
            pending.append((index, checked))

        candidates = [activity for _, activity in pending]

        if not candidates:
            raise NoValidActivitiesError("The import contains no valid activities to commit.")

        target_code = self._resolve_project_code(project_code, candidates)
        project_id = store.find_project_id(target_code)
        if project_id is None:
            raise ProjectNotFoundError(f"Project with code {target_code} was not found.")

        try:
            written = self._write(store, project_id, target_code, candidates, created_by)
        except SQLAlchemyError as exc:
            store.rollback()
            raise CommitPersistenceError("Failed to persist activities.") from exc

        for index, activity in pending:
            was_inserted = written.get(activity.activity_code)
            if was_inserted is None:
                results[index] = CommitRowResult(
                    activity_code=activity.activity_code,
                    outcome=CommitOutcome.ALREADY_EXISTS,
                    message="Activity code already exists in the project.",
                )
            else:
                results[index] = CommitRowResult(
                    activity_code=activity.activity_code,
                    outcome=CommitOutcome.INSERTED if was_inserted else CommitOutcome.UPDATED,
                )

        rows = [results[index] for index in sorted(results)]

        summary = CommitSummary(
            project_code=target_code,
            duplicate_policy=self._duplicate_policy,
            inserted=sum(1 for row in rows if row.outcome == CommitOutcome.INSERTED),
            updated=sum(1 for row in rows if row.outcome == CommitOutcome.UPDATED),
            skipped=sum(1 for row in rows if not row.succeeded),
            rows=rows,
        )
        logger.info(
            "Committed activities project=%r policy=%s inserted=%s updated=%s skipped=%s",
            summary.project_code,
            summary.duplicate_policy,
            summary.inserted,
            summary.updated,
            summary.skipped,
        )
        return summary

    def _write(
        self,
        store: ActivityStore,
        project_id: uuid.UUID,
        project_code: str,
        candidates: list[ParsedActivity],
        created_by: str | None,
    ) -> dict[str, bool]:
        codes = [activity.activity_code for activity in candidates]

        if self._duplicate_policy == POLICY_REJECT:
            existing = store.list_activity_codes(project_id, codes)
            if existing:
                logger.warning(
                    "Rejected commit with existing codes project=%r count=%s",
                    project_code,
                    len(existing),
                )
                raise DuplicateActivityCodesError(project_code=project_code, codes=existing)

        on_conflict = ON_CONFLICT_UPDATE if self._duplicate_policy == POLICY_UPSERT else ON_CONFLICT_NOTHING
        written = store.insert_activities(
            project_id,
            candidates,
            on_conflict=on_conflict,
            created_by=created_by,
            batch_size=self._batch_size,
        )

        if self._duplicate_policy == POLICY_REJECT and len(written) < len(candidates):
            store.rollback()
            conflicting = sorted(set(codes) - set(written))
            logger.warning(
                "Concurrent insert detected; commit rolled back project=%r codes=%s",
                project_code,
                conflicting,
            )
            raise DuplicateActivityCodesError(project_code=project_code, codes=conflicting)

        store.commit()
        return written

    def _revalidate(self, activity: ParsedActivity) -> ParsedActivity:
        return self._validator.validate(
            CandidateRow(
                project_code=activity.project_code,
                area_name=activity.area_name,
                system_name=activity.system_name,
                activity_code=activity.activity_code,
                activity_name=activity.activity_name,
                unit=activity.unit,
                boq_qty=activity.boq_qty,
                weight=activity.weight,
            )
        )

    @staticmethod
    def _resolve_project_code(project_code: str | None, candidates: Sequence[ParsedActivity]) -> str:
        if project_code and project_code.strip():
            return project_code.strip()

        row_codes = sorted({activity.project_code for activity in candidates if activity.project_code})
        if len(row_codes) != 1:
            raise AmbiguousProjectError(
                "Specify project_code; the rows reference "
                f"{len(row_codes)} project codes ({', '.join(row_codes) or 'none'})."
            )
        return row_codes[0]


@lru_cache(maxsize=1)
def get_activity_commit_service() -> ActivityCommitService:
    """
    Build and cache the commit service with env-driven settings.
    """

    settings: ActivityCommitSettings = get_activity_commit_settings()
    return ActivityCommitService(
        duplicate_policy=settings.duplicate_policy,
        batch_size=settings.batch_size,
    )
