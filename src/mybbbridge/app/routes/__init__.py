"""
FastAPI Routes.

API 라우트만 (/api 아래)
"""

from . import sync

__all__ = ["sync"]
