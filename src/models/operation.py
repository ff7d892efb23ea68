"""
Module: operation.py
Description: Lifecycle operation tokens, states and results.

Key Components:
- OperationToken: Which asynchronous operation a poll refers to
- LastOperationState: Tri-state outcome of a status poll
- ProvisionResult, DeprovisionResult, LastOperationResult,
  BindingResult, UnbindResult: Return values of SQSProvider

Dependencies: pydantic, enum, typing
Author: SQS Broker Team
"""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class OperationToken(str, Enum):
    """Opaque token returned for asynchronous operations."""

    PROVISION = "provision"
    DEPROVISION = "deprovision"


class LastOperationState(str, Enum):
    """State values as they appear on the broker API wire."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IN_PROGRESS = "in progress"


class ProvisionResult(BaseModel):
    """Outcome of an accepted provision request."""

    dashboard_url: str = Field(default="")
    operation: OperationToken = Field(default=OperationToken.PROVISION)
    is_async: bool = Field(default=True)


class DeprovisionResult(BaseModel):
    """Outcome of an accepted deprovision request."""

    operation: OperationToken = Field(default=OperationToken.DEPROVISION)
    is_async: bool = Field(default=True)


class LastOperationResult(BaseModel):
    """Classified status of the stack backing an instance."""

    state: LastOperationState
    description: str


class BindingResult(BaseModel):
    """Outcome of a bind request; credentials are currently always empty."""

    credentials: Dict[str, Any] = Field(default_factory=dict)
    is_async: bool = Field(default=False)


class UnbindResult(BaseModel):
    """Outcome of an unbind request."""

    is_async: bool = Field(default=False)
