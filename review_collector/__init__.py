"""
App Review Collector.

Collects Google Play and App Store reviews across regions, stores them and
exports them as CSV or JSON.
"""

__version__ = "0.1.0"
