"""
Module: config
Description: Package initialization for broker configuration.

- settings: Environment-driven settings (pydantic-settings)
- catalog: Service and plan metadata advertised to the platform
"""

__all__ = []
