"""Canonical API version constant.

Kept in its own module so the middleware can read it without importing
the application factory.
"""

API_VERSION = "1.0.0"
