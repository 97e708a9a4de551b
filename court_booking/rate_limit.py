"""
Rate limiting configuration using slowapi.

Two tiers:
  • checkout – 10/min (reservation inserts – limits slot hoarding)
  • default  – 60/min (everything else)

The limiter keys on client IP by default.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Named rate strings for use in @limiter.limit() decorators
CHECKOUT = "10/minute"   # booking submission
DEFAULT = "60/minute"    # general API

limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT])
