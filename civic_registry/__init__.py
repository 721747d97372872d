"""Civic registry backend: audited person records and JWT authentication."""

__version__ = "1.0.0"
