"""Utility functions for the ChatOps bot."""

from src.utils.logging import (
    configure_logging,
    get_request_id,
    set_request_id,
)
from src.utils.observability import instrument_app, setup_logfire

__all__ = [
    "setup_logfire",
    "instrument_app",
    "set_request_id",
    "get_request_id",
    "configure_logging",
]
