"""Domain layer: task entities, enums, and exceptions (no infrastructure imports)."""
