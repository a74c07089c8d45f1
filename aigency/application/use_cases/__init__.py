"""Application use cases (one module per operation group)."""
