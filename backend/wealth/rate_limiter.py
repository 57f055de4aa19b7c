"""Rate limiter for the CSV import endpoint.

Imports parse, simulate and possibly commit thousands of rows under the
ledger write lock, so they are limited per client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from wealth.config import settings

# Shared across modules; routers decorate with @limiter.limit(...)
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
