"""
BidChemz Logistics Server Package.

This package contains the web server implementation of the freight marketplace.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Mapping of domain and unhandled errors to responses.
    middleware: Request timing, rate limiting and security headers.
"""
