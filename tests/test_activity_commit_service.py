"""
tests/test_activity_commit_service.py

Commit flow against an in-memory ActivityStore.

Coverage
--------
- reject / skip / upsert duplicate policies
- Concurrent insert detected at write time rolls back in reject mode
- Re-validation, duplicate codes within one import, per-row outcomes in order
- Rows over the activities column limits are not_valid, good rows still commit
- Project resolution: explicit, inferred, ambiguous, unknown
- Persistence failures surface as CommitPersistenceError
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.plan_import import CommitOutcome
from app.errors import (
    AmbiguousProjectError,
    CommitPersistenceError,
    DuplicateActivityCodesError,
    NoValidActivitiesError,
    ProjectNotFoundError,
)
from app.repositories.activity_repository import ON_CONFLICT_NOTHING, ON_CONFLICT_UPDATE
from app.services.activity_commit_service import (
    POLICY_REJECT,
    POLICY_SKIP,
    POLICY_UPSERT,
    ActivityCommitService,
)


# ---------------------------------------------------------------------------
# reject (default)
# ---------------------------------------------------------------------------


class TestRejectPolicy:
    def test_inserts_new_codes(self, store_factory, activity_factory) -> None:
        store = store_factory()
        service = ActivityCommitService()

        summary = service.commit(
            store=store,
            activities=[activity_factory("A-0001"), activity_factory("A-0101")],
        )

        assert summary.project_code == "FP01"
        assert summary.duplicate_policy == POLICY_REJECT
        assert (summary.inserted, summary.updated, summary.skipped) == (2, 0, 0)
        assert [row.outcome for row in summary.rows] == [CommitOutcome.INSERTED, CommitOutcome.INSERTED]
        assert store.codes_for("FP01") == {"A-0001", "A-0101"}
        assert store.commit_count == 1
        assert store.insert_calls[0]["on_conflict"] == ON_CONFLICT_NOTHING

    def test_existing_code_rejects_whole_commit(self, store_factory, activity_factory) -> None:
        store = store_factory(existing={"FP01": ["A-0001"]})

        with pytest.raises(DuplicateActivityCodesError) as exc_info:
            ActivityCommitService().commit(
                store=store,
                activities=[activity_factory("A-0001"), activity_factory("A-0101")],
            )

        assert exc_info.value.codes == ("A-0001",)
        assert exc_info.value.status_code == 409
        assert "A-0001" in exc_info.value.details
        assert store.codes_for("FP01") == {"A-0001"}
        assert store.insert_calls == []

    def test_concurrent_insert_rolls_back(self, store_factory, activity_factory) -> None:
        store = store_factory(concurrent_codes=["A-0101"])

        with pytest.raises(DuplicateActivityCodesError) as exc_info:
            ActivityCommitService().commit(
                store=store,
                activities=[activity_factory("A-0001"), activity_factory("A-0101")],
            )

        assert exc_info.value.codes == ("A-0101",)
        assert store.rollback_count == 1
        assert store.commit_count == 0
        assert store.codes_for("FP01") == set()

    def test_duplicate_preview_is_truncated(self) -> None:
        codes = [f"A-{index:04d}" for index in range(25)]

        error = DuplicateActivityCodesError(project_code="FP01", codes=codes)

        assert "(+5 more)" in error.details
        assert len(error.codes) == 25


# ---------------------------------------------------------------------------
# skip / upsert
# ---------------------------------------------------------------------------


class TestSkipPolicy:
    def test_existing_codes_reported_already_exists(self, store_factory, activity_factory) -> None:
        store = store_factory(existing={"FP01": ["A-0001"]})
        service = ActivityCommitService(duplicate_policy=POLICY_SKIP)

        summary = service.commit(
            store=store,
            activities=[activity_factory("A-0001", activity_name="renamed"), activity_factory("A-0205")],
        )

        assert [row.outcome for row in summary.rows] == [CommitOutcome.ALREADY_EXISTS, CommitOutcome.INSERTED]
        assert (summary.inserted, summary.updated, summary.skipped) == (1, 0, 1)
        project_id = store.project_ids["FP01"]
        assert store.committed[(project_id, "A-0001")]["name"] == "existing A-0001"

    def test_concurrent_insert_is_skipped_not_rejected(self, store_factory, activity_factory) -> None:
        store = store_factory(concurrent_codes=["A-0101"])

        summary = ActivityCommitService(duplicate_policy=POLICY_SKIP).commit(
            store=store,
            activities=[activity_factory("A-0001"), activity_factory("A-0101")],
        )

        assert [row.outcome for row in summary.rows] == [CommitOutcome.INSERTED, CommitOutcome.ALREADY_EXISTS]
        assert store.commit_count == 1


class TestUpsertPolicy:
    def test_existing_codes_are_updated(self, store_factory, activity_factory) -> None:
        store = store_factory(existing={"FP01": ["A-0001"]})
        service = ActivityCommitService(duplicate_policy=POLICY_UPSERT)

        summary = service.commit(
            store=store,
            activities=[activity_factory("A-0001", activity_name="renamed"), activity_factory("A-0205")],
        )

        assert [row.outcome for row in summary.rows] == [CommitOutcome.UPDATED, CommitOutcome.INSERTED]
        assert (summary.inserted, summary.updated, summary.skipped) == (1, 1, 0)
        project_id = store.project_ids["FP01"]
        assert store.committed[(project_id, "A-0001")]["name"] == "renamed"
        assert store.insert_calls[0]["on_conflict"] == ON_CONFLICT_UPDATE


# ---------------------------------------------------------------------------
# Row handling
# ---------------------------------------------------------------------------


class TestRowHandling:
    def test_only_valid_rows_are_attempted(self, store_factory, activity_factory) -> None:
        store = store_factory()
        activities = [
            activity_factory("A-0001"),
            activity_factory("", status="error", error_message="Activity code and name are required."),
            activity_factory("A-0002", boq_qty=0.0, status="warning", error_message="BOQ quantity must be greater than zero."),
        ]

        summary = ActivityCommitService().commit(store=store, activities=activities)

        assert [row.outcome for row in summary.rows] == [
            CommitOutcome.INSERTED,
            CommitOutcome.NOT_VALID,
            CommitOutcome.NOT_VALID,
        ]
        assert summary.skipped == 2
        assert store.codes_for("FP01") == {"A-0001"}

    def test_client_status_is_not_trusted(self, store_factory, activity_factory) -> None:
        store = store_factory()
        forged = activity_factory("A-0009", weight=0.0, status="valid")

        summary = ActivityCommitService().commit(
            store=store,
            activities=[activity_factory("A-0001"), forged],
        )

        assert summary.rows[1].outcome == CommitOutcome.NOT_VALID
        assert summary.rows[1].message == "Weight must be greater than zero."
        assert "A-0009" not in store.codes_for("FP01")

    def test_duplicate_codes_in_one_import(self, store_factory, activity_factory) -> None:
        store = store_factory()

        summary = ActivityCommitService().commit(
            store=store,
            activities=[
                activity_factory("A-0001", activity_name="first"),
                activity_factory("A-0001", activity_name="second"),
            ],
        )

        assert [row.outcome for row in summary.rows] == [CommitOutcome.INSERTED, CommitOutcome.DUPLICATE_IN_FILE]
        project_id = store.project_ids["FP01"]
        assert store.committed[(project_id, "A-0001")]["name"] == "first"

    def test_rows_exceeding_column_limits_are_not_valid(self, store_factory, activity_factory) -> None:
        store = store_factory()

        summary = ActivityCommitService().commit(
            store=store,
            activities=[
                activity_factory("A-0001"),
                activity_factory("A-0002", activity_name="N" * 300),
                activity_factory("C" * 70),
                activity_factory("A-0003", boq_qty=1e15),
                activity_factory("A-0004", weight=5_000_000.0),
            ],
        )

        assert [row.outcome for row in summary.rows] == [
            CommitOutcome.INSERTED,
            CommitOutcome.NOT_VALID,
            CommitOutcome.NOT_VALID,
            CommitOutcome.NOT_VALID,
            CommitOutcome.NOT_VALID,
        ]
        assert summary.rows[1].message == "Activity name exceeds 255 characters."
        assert summary.rows[2].message == "Activity code exceeds 64 characters."
        assert summary.rows[3].message.startswith("Quantity must be less than")
        assert summary.rows[4].message == "Weight must be less than 1,000,000."
        assert summary.inserted == 1
        assert summary.skipped == 4
        assert store.codes_for("FP01") == {"A-0001"}

    def test_values_at_column_limits_are_committed(self, store_factory, activity_factory) -> None:
        store = store_factory()

        summary = ActivityCommitService().commit(
            store=store,
            activities=[activity_factory("C" * 64, activity_name="N" * 255, weight=999_999.999999)],
        )

        assert summary.rows[0].outcome == CommitOutcome.INSERTED

    def test_no_valid_rows(self, store_factory, activity_factory) -> None:
        with pytest.raises(NoValidActivitiesError) as exc_info:
            ActivityCommitService().commit(
                store=store_factory(),
                activities=[activity_factory("", status="error")],
            )

        assert exc_info.value.status_code == 400

    def test_empty_import(self, store_factory) -> None:
        with pytest.raises(NoValidActivitiesError):
            ActivityCommitService().commit(store=store_factory(), activities=[])

    def test_created_by_and_batch_size_reach_store(self, store_factory, activity_factory) -> None:
        store = store_factory()

        ActivityCommitService(batch_size=50).commit(
            store=store,
            activities=[activity_factory()],
            created_by="planner@example.com",
        )

        assert store.insert_calls[0]["created_by"] == "planner@example.com"
        assert store.insert_calls[0]["batch_size"] == 50


# ---------------------------------------------------------------------------
# Project resolution
# ---------------------------------------------------------------------------


class TestProjectResolution:
    def test_explicit_project_overrides_rows(self, store_factory, activity_factory) -> None:
        store = store_factory(projects=["FP01", "FP02"])

        summary = ActivityCommitService().commit(
            store=store,
            activities=[activity_factory(project_code="P6_IMPORT")],
            project_code=" FP02 ",
        )

        assert summary.project_code == "FP02"
        assert store.codes_for("FP02") == {"A-0001"}

    def test_rows_with_several_projects_are_ambiguous(self, store_factory, activity_factory) -> None:
        with pytest.raises(AmbiguousProjectError):
            ActivityCommitService().commit(
                store=store_factory(projects=["FP01", "FP02"]),
                activities=[activity_factory("A-1", project_code="FP01"), activity_factory("A-2", project_code="FP02")],
            )

    def test_rows_without_project(self, store_factory, activity_factory) -> None:
        with pytest.raises(AmbiguousProjectError):
            ActivityCommitService().commit(
                store=store_factory(),
                activities=[activity_factory(project_code="")],
            )

    def test_unknown_project(self, store_factory, activity_factory) -> None:
        with pytest.raises(ProjectNotFoundError) as exc_info:
            ActivityCommitService().commit(
                store=store_factory(),
                activities=[activity_factory(project_code="NOPE")],
            )

        assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# Failures and configuration
# ---------------------------------------------------------------------------


class TestFailures:
    def test_database_error_rolls_back(self, store_factory, activity_factory) -> None:
        store = store_factory(fail_on_insert=OperationalError("INSERT", {}, Exception("connection lost")))

        with pytest.raises(CommitPersistenceError) as exc_info:
            ActivityCommitService(duplicate_policy=POLICY_SKIP).commit(
                store=store,
                activities=[activity_factory()],
            )

        assert exc_info.value.status_code == 500
        assert store.rollback_count == 1
        assert store.commit_count == 0

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            ActivityCommitService(duplicate_policy="merge")
