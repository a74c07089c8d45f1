"""Core: configuration, composition root, lifespan, exception handlers, rate limits."""
