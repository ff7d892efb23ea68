"""
Module: handlers
Description: Package initialization for API endpoint handlers.

This package contains FastAPI route handlers for the SQS broker:
- broker: Open Service Broker API v2 endpoints

All handlers use dependency injection for the provider, catalog and
metrics client.
"""

__all__ = []
