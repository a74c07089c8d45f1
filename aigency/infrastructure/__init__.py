"""Infrastructure: Firestore and in-memory stores, scope locks, external services."""
