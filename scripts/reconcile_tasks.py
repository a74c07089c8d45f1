"""Repair tasks left `upcoming` after their dependencies were satisfied.

Runs the same sweep as POST /api/v1/tasks/refresh-statuses for one or more
companies, outside the HTTP service (e.g. from a scheduler).

Usage:
    python -m scripts.reconcile_tasks COMPANY_ID [COMPANY_ID ...] [--renewal-type TYPE]
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from aigency.application.use_cases.tasks import TaskStatusResolver
from aigency.core.config import get_settings
from aigency.core.container import build_container
from aigency.domain.exceptions import ScopeLockTimeoutException
from aigency.shared.telemetry.logging import setup_logging


def _parse_args(argv: list[str]) -> tuple[list[str], str | None]:
    renewal_type = None
    companies = []
    it = iter(argv)
    for arg in it:
        if arg == "--renewal-type":
            renewal_type = next(it, None)
        else:
            companies.append(arg)
    return companies, renewal_type


async def main() -> None:
    """Reconcile each company; exits 1 if any company could not be locked."""
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)
    companies, renewal_type = _parse_args(sys.argv[1:])
    if not companies:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    setup_logging()
    container = build_container(get_settings())
    resolver = TaskStatusResolver(container.task_repo, container.trigger, container.scope_lock)
    failed = 0
    try:
        for company_id in companies:
            try:
                outcome = await resolver.reconcile(company_id, renewal_type)
            except ScopeLockTimeoutException as e:
                print(f"{company_id}: skipped ({e.message})", file=sys.stderr)
                failed += 1
                continue
            print(
                f"{company_id}: {len(outcome.transitioned_ids)} updated, "
                f"{len(outcome.triggered_ids)} triggered, "
                f"{len(outcome.write_failed_ids)} write failure(s)"
            )
    finally:
        await container.aclose()
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
