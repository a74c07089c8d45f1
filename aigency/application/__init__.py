"""Application layer: use cases, ports, and dependency evaluation."""
