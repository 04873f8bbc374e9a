"""
HTTP surface for Notel's backend glue.

This package provides a single FastAPI application that exposes:
- The SMTP email endpoint
- The share-email function with its provider waterfall
- The database webhook endpoint feeding the change feed
"""

from api.main import app

__all__ = ["app"]
