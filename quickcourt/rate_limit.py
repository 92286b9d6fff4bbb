"""
Rate limiting configuration using slowapi.

Three tiers:
  • strict  – OTP request endpoints (prevents email spam)
  • auth    – OTP verify endpoints (prevents brute-force)
  • default – everything else, applied by SlowAPIMiddleware

The limiter keys on client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from quickcourt.config import RATE_LIMIT_DEFAULT, RATE_LIMIT_OTP_REQUEST, RATE_LIMIT_OTP_VERIFY

limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT_DEFAULT])

# Named rate strings for use in @limiter.limit() decorators
STRICT = RATE_LIMIT_OTP_REQUEST
AUTH = RATE_LIMIT_OTP_VERIFY
DEFAULT = RATE_LIMIT_DEFAULT
