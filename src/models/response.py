"""
Module: response.py
Description: Broker API response models.

Response bodies returned to the platform marketplace (Open Service
Broker API v2).

Dependencies: pydantic, typing
Author: SQS Broker Team
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models.operation import LastOperationState


class ProvisionResponse(BaseModel):
    """Body of a 202 provision response."""

    dashboard_url: Optional[str] = Field(default=None)
    operation: str = Field(..., description="Operation token to poll with")


class DeprovisionResponse(BaseModel):
    """Body of a 202 deprovision response."""

    operation: str = Field(..., description="Operation token to poll with")


class LastOperationResponse(BaseModel):
    """Body of a last_operation response."""

    state: LastOperationState
    description: str


class BindingResponse(BaseModel):
    """Body of a bind response."""

    credentials: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """
    Broker error body.

    Attributes:
        error: Machine-readable OSB error code, when one applies
        description: Human-readable explanation
    """

    error: Optional[str] = Field(default=None)
    description: str
