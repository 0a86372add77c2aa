"""HTTP client for the hosted checklist store."""

from .client import APIClient

__all__ = ["APIClient"]
