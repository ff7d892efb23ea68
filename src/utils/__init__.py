"""
Module: utils
Description: Package initialization for utility functions.

Current utilities:
- logger: Structured logging configuration and helpers
- metrics: Best-effort CloudWatch metrics
"""

__all__ = []
