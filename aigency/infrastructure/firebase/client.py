"""Firestore client bootstrap (REST-based, no firebase-admin).

Credentials come from FIREBASE_SERVICE_ACCOUNT_KEY (JSON string) or
FIREBASE_SERVICE_ACCOUNT_PATH (file). Unlike optional integrations, the
task store cannot run without Firestore when DATABASE_BACKEND=firestore,
so a bad configuration raises instead of degrading.
"""

import json
from pathlib import Path

from aigency.core.config import Settings
from aigency.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _load_key_dict(settings: Settings) -> dict:
    """Return the service account dict from the env key or the key file."""
    secret = settings.firebase_service_account_key
    key_json = secret.get_secret_value() if secret else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = Path(settings.firebase_service_account_path or "").expanduser()
    if not path.is_file():
        raise ValueError(f"FIREBASE_SERVICE_ACCOUNT_PATH does not point to a file: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def create_firestore_client(settings: Settings) -> FirestoreRESTClient:
    """Build the Firestore REST client from service account settings.

    Raises:
        ValueError: If the credentials are missing, malformed, or lack project_id.
    """
    key_dict = _load_key_dict(settings)
    project_id = key_dict.get("project_id")
    if not project_id:
        raise ValueError("Firebase service account JSON missing 'project_id'")
    client = FirestoreRESTClient(project_id, _get_credentials(key_dict))
    logger.info("Firestore client initialized for project %s", project_id)
    return client
