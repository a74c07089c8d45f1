"""Rate limiter instance for SlowAPI.

Shared by main (app.state.limiter) and the route modules. Limit strings
live here so every write endpoint uses the same budget.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"
# Sweeps load a whole company; keep them rarer than single-task writes.
REFRESH_LIMIT = "30/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_refresh = limiter.limit(REFRESH_LIMIT)
