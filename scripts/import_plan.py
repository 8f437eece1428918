"""
Parse a plan file from CLI and optionally commit its valid rows.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from app.config import get_plan_import_settings
from app.errors import PlanImportError
from app.services.activity_commit_service import get_activity_commit_service
from app.services.plan_import_service import PlanImportService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse a CSV, XER or Project XML plan file.")
    parser.add_argument("path", type=Path, help="Plan file to parse.")
    parser.add_argument(
        "--commit",
        action="store_true",
        help="Persist valid rows after parsing.",
    )
    parser.add_argument(
        "--project-code",
        dest="project_code",
        default=None,
        help="Target project; inferred from the rows when omitted.",
    )
    parser.add_argument("--created-by", dest="created_by", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    service = PlanImportService(settings=get_plan_import_settings())
    try:
        result = service.parse_upload(file_name=args.path.name, content=args.path.read_bytes())
        payload: dict = {"import": asdict(result)}

        if args.commit:
            from app.repositories.activity_repository import ActivityRepository
            from db.session import SessionLocal

            with SessionLocal() as db:
                summary = get_activity_commit_service().commit(
                    store=ActivityRepository(db),
                    activities=result.activities,
                    project_code=args.project_code,
                    created_by=args.created_by,
                )
            payload["commit"] = asdict(summary)
    except PlanImportError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
