"""Scope lock implementations."""

from aigency.infrastructure.locking.scope_lock import InProcessScopeLock, RedisScopeLock

__all__ = ["InProcessScopeLock", "RedisScopeLock"]
