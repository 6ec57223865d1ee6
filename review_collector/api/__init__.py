"""
API routers package.
"""
from review_collector.api import reviews

__all__ = [
    "reviews",
]
