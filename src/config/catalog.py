"""
Module: catalog.py
Description: Service catalog advertised to the platform marketplace.

The broker offers one service (SQS) with two plans: a standard queue
pair and a FIFO queue pair. Catalog IDs come from settings so each
deployment can register its own GUIDs.

Key Components:
- ServicePlan / ServiceOffering / Catalog: OSB v2 catalog models
- build_catalog(): Catalog for the configured IDs
- Catalog.find_plan(): Resolve a plan_id from a request to its plan

Dependencies: pydantic, typing
Author: SQS Broker Team
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from config.settings import Settings

STANDARD_PLAN_NAME = "standard"
FIFO_PLAN_NAME = "fifo"


class ServicePlan(BaseModel):
    """A single plan of the SQS service offering."""

    id: str = Field(..., description="Plan GUID")
    name: str = Field(..., description="Plan name used by the platform CLI")
    description: str = Field(..., description="Human-readable plan description")
    free: bool = Field(default=False, description="Whether the plan is free")
    bindable: bool = Field(default=True, description="Whether instances are bindable")


class ServiceOffering(BaseModel):
    """The SQS service offering."""

    id: str = Field(..., description="Service GUID")
    name: str = Field(..., description="Service name")
    description: str = Field(..., description="Human-readable service description")
    bindable: bool = Field(default=True)
    plan_updateable: bool = Field(default=False)
    instances_retrievable: bool = Field(default=False)
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)
    plans: List[ServicePlan] = Field(default_factory=list)


class Catalog(BaseModel):
    """Top-level catalog document returned by GET /v2/catalog."""

    services: List[ServiceOffering] = Field(default_factory=list)

    def find_plan(self, service_id: str, plan_id: str) -> Optional[ServicePlan]:
        """
        Resolve a plan by its service and plan IDs.

        Returns:
            The matching plan, or None if either ID is unknown
        """
        for service in self.services:
            if service.id != service_id:
                continue
            for plan in service.plans:
                if plan.id == plan_id:
                    return plan
        return None


def build_catalog(settings: Settings) -> Catalog:
    """Build the catalog for the IDs configured in settings."""
    return Catalog(
        services=[
            ServiceOffering(
                id=settings.service_id,
                name="sqs",
                description="AWS SQS queues with a paired dead-letter queue",
                tags=["sqs", "queue"],
                metadata={"displayName": "Amazon SQS"},
                plans=[
                    ServicePlan(
                        id=settings.standard_plan_id,
                        name=STANDARD_PLAN_NAME,
                        description="Standard queue with optional dead-letter queue",
                    ),
                    ServicePlan(
                        id=settings.fifo_plan_id,
                        name=FIFO_PLAN_NAME,
                        description="FIFO queue with optional dead-letter queue",
                    ),
                ],
            )
        ]
    )
