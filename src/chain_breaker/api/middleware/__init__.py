"""Middleware for the chain breaker API."""

from .error_handler import register_error_handlers

__all__ = ["register_error_handlers"]
