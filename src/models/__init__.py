"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models used by the broker:
- QueueParameters: User-supplied queue parameters
- Operation results: Return values of the lifecycle operations
- Request/response models: Broker API bodies
"""

from .queue import QueueParameters
from .operation import LastOperationState, OperationToken

__all__ = [
    "QueueParameters",
    "LastOperationState",
    "OperationToken",
]
