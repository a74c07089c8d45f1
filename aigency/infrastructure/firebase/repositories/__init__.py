"""Firestore-backed repositories (DATABASE_BACKEND=firestore)."""

from aigency.infrastructure.firebase.repositories.task_repo_firestore import (
    FirestoreTaskRepository,
)
from aigency.infrastructure.firebase.repositories.task_template_repo_firestore import (
    FirestoreTaskTemplateRepository,
)

__all__ = ["FirestoreTaskRepository", "FirestoreTaskTemplateRepository"]
