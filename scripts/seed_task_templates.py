"""Load task templates from a JSON file into the Firestore `tasks` collection.

The file is a list of template objects in the stored (camelCase) shape:
{"id", "taskName", "tag", "dependencies", "description", "phase",
"policyType", "sortOrder"}. Existing templates with the same id are
updated in place; fields not in the file are kept.

Usage:
    python -m scripts.seed_task_templates path/to/templates.json [--dry-run]

Requires: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from aigency.core.config import get_settings
from aigency.domain.entities.task import TaskTemplate
from aigency.infrastructure.firebase import create_firestore_client
from aigency.infrastructure.firebase.repositories import FirestoreTaskTemplateRepository
from aigency.infrastructure.firebase.repositories.task_template_repo_firestore import (
    template_from_fields,
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def load_templates(path: Path) -> list[TaskTemplate]:
    """Parse the templates file; every entry needs an id and a taskName."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of templates")
    templates = []
    for i, entry in enumerate(raw):
        if not entry.get("id") or not entry.get("taskName"):
            raise ValueError(f"{path}: entry {i} needs 'id' and 'taskName'")
        templates.append(template_from_fields(str(entry["id"]), entry))
    ids = {t.id for t in templates}
    for t in templates:
        missing = [ref for ref in t.dependencies if str(ref) not in ids]
        if missing:
            print(f"warning: template {t.id} depends on unknown templates {missing}", file=sys.stderr)
    return templates


async def run(path: Path, dry_run: bool) -> None:
    templates = load_templates(path)
    print(f"Found {len(templates)} template(s) in {path}")
    if dry_run:
        for t in templates:
            print(f"  {t.id}: {t.name} ({t.kind.value}, deps={list(t.dependencies)})")
        return
    settings = get_settings()
    if settings.database_backend != "firestore":
        print("DATABASE_BACKEND must be 'firestore' to seed templates", file=sys.stderr)
        sys.exit(1)
    client = create_firestore_client(settings)
    try:
        repo = FirestoreTaskTemplateRepository(client)
        for t in templates:
            await repo.upsert(t)
            print(f"  upserted {t.id}: {t.name}")
    finally:
        await client.aclose()
    print(f"Done. {len(templates)} template(s) written.")


def main() -> None:
    load_dotenv(_project_root() / ".env", override=True)
    args = [a for a in sys.argv[1:] if a != "--dry-run"]
    if len(args) != 1:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    asyncio.run(run(Path(args[0]), dry_run="--dry-run" in sys.argv[1:]))


if __name__ == "__main__":
    main()
