"""
Module: request.py
Description: Broker API request models.

Request bodies sent by the platform marketplace (Open Service Broker
API v2). Parameters are kept as raw JSON here and parsed into
QueueParameters by the provider, so malformed parameters surface as a
400 with a readable description rather than a schema error.

Key Components:
- ProvisionRequest: PUT /v2/service_instances/{instance_id}
- UpdateRequest: PATCH /v2/service_instances/{instance_id}
- BindRequest: PUT .../service_bindings/{binding_id}

Dependencies: pydantic, typing
Author: SQS Broker Team
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProvisionRequest(BaseModel):
    """
    Request model for provisioning a service instance.

    Attributes:
        service_id: Catalog service ID
        plan_id: Catalog plan ID
        organization_guid: Owning organization
        space_guid: Owning space
        parameters: Raw user parameters (validated by the provider)
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore"
    )

    service_id: str = Field(..., min_length=1, description="Catalog service ID")
    plan_id: str = Field(..., min_length=1, description="Catalog plan ID")
    organization_guid: str = Field(..., min_length=1, description="Owning organization GUID")
    space_guid: str = Field(..., min_length=1, description="Owning space GUID")
    parameters: Optional[Any] = Field(default=None, description="User-supplied queue parameters")
    context: Optional[Dict[str, Any]] = Field(default=None, description="Platform context")


class UpdateRequest(BaseModel):
    """Request model for updating a service instance."""

    model_config = ConfigDict(extra="ignore")

    service_id: str = Field(..., min_length=1, description="Catalog service ID")
    plan_id: Optional[str] = Field(default=None, description="New catalog plan ID")
    parameters: Optional[Any] = Field(default=None, description="User-supplied queue parameters")


class BindRequest(BaseModel):
    """Request model for creating a service binding."""

    model_config = ConfigDict(extra="ignore")

    service_id: str = Field(..., min_length=1, description="Catalog service ID")
    plan_id: str = Field(..., min_length=1, description="Catalog plan ID")
    bind_resource: Optional[Dict[str, Any]] = Field(default=None)
    parameters: Optional[Any] = Field(default=None)
