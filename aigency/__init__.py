"""aigency: renewal task service for insurance agencies."""
