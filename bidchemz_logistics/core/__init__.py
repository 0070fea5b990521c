"""
Core utilities for BidChemz Logistics.

This package provides shared functionality including logging configuration,
monitoring, database setup, domain errors and API models.
"""

from bidchemz_logistics.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
