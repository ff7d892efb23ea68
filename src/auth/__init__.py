"""
Module: auth
Description: Package initialization for broker authentication.

- basic: HTTP basic auth dependency for the /v2 broker routes
"""

__all__ = []
