"""Firestore integration over the REST API."""

from aigency.infrastructure.firebase.client import create_firestore_client

__all__ = ["create_firestore_client"]
