"""
Middleware for the BidChemz Logistics server.

- LogfireMiddleware: request timing and tracing
- RateLimitMiddleware: per client and path fixed-window limits
- SecurityHeadersMiddleware: hardening headers on every response
"""

from .logfire_middleware import LogfireMiddleware
from .rate_limit_middleware import RateLimitMiddleware
from .security_headers import SecurityHeadersMiddleware

__all__ = ["LogfireMiddleware", "RateLimitMiddleware", "SecurityHeadersMiddleware"]
