"""
Module: provider.py
Description: Service-lifecycle orchestration for SQS queue instances.

SQSProvider implements the contract the broker API consumes:
provision, deprovision, update, last_operation, bind and unbind.
It keeps no state of its own. Each instance's lifecycle is read back
from CloudFormation on every call:

    Unprovisioned -> Provisioning -> Provisioned | ProvisionFailed
    Provisioned -> Deprovisioning -> Gone | DeprovisionFailed

Key Components:
- SQSProvider: Lifecycle operations over an injected StackClient
- classify_stack_status(): Raw stack status -> LastOperationState
- derived_tags(): Tags every queue carries

Dependencies: typing, models, stacks, broker.errors
Author: SQS Broker Team
"""

from typing import Any, Dict, Optional, Tuple, Union

from broker.errors import (
    InstanceDoesNotExistError,
    StackNotFoundError,
    UpdateNotSupportedError,
)
from config.catalog import FIFO_PLAN_NAME
from models.operation import (
    BindingResult,
    DeprovisionResult,
    LastOperationResult,
    LastOperationState,
    OperationToken,
    ProvisionResult,
    UnbindResult,
)
from models.queue import QueueParameters
from stacks.base import StackClient
from utils.logger import get_logger

logger = get_logger(__name__)

RawParameters = Union[bytes, str, Dict[str, Any], None]

FAILED_STATUSES = frozenset({
    "DELETE_FAILED",
    "CREATE_FAILED",
    "ROLLBACK_FAILED",
    "UPDATE_ROLLBACK_FAILED",
    "ROLLBACK_COMPLETE",
    "UPDATE_ROLLBACK_COMPLETE",
})

SUCCEEDED_STATUSES = frozenset({
    "CREATE_COMPLETE",
    "UPDATE_COMPLETE",
    "DELETE_COMPLETE",
})


def classify_stack_status(status: str) -> Tuple[LastOperationState, str]:
    """
    Map a raw CloudFormation stack status to an operation state.

    Any status not known to be terminal is reported as in progress,
    including statuses CloudFormation may add in future, so polling
    never stops early.

    Returns:
        (state, description) tuple
    """
    if status in FAILED_STATUSES:
        return LastOperationState.FAILED, f"failed: {status}"
    if status in SUCCEEDED_STATUSES:
        return LastOperationState.SUCCEEDED, "ready"
    return LastOperationState.IN_PROGRESS, "pending"


def derived_tags(instance_id: str, organization_id: str, environment: str) -> Dict[str, str]:
    """Tags the broker applies to every queue it provisions."""
    return {
        "Name": instance_id,
        "Service": "sqs",
        "Customer": organization_id,
        "Environment": environment,
    }


class SQSProvider:
    """
    Lifecycle operations for SQS service instances.

    Attributes:
        client: StackClient used for all control-plane access
        environment: Value of the Environment tag on every queue
    """

    def __init__(self, client: StackClient, environment: str):
        self.client = client
        self.environment = environment

    async def provision(
        self,
        instance_id: str,
        organization_id: str,
        plan_name: str,
        raw_parameters: RawParameters = None
    ) -> ProvisionResult:
        """
        Start provisioning the queue pair for an instance.

        Always asynchronous: returns as soon as CloudFormation accepts
        the create request.

        Args:
            instance_id: Service instance ID
            organization_id: Owning organization ID
            plan_name: Catalog plan name; the fifo plan forces FIFO queues
            raw_parameters: User-supplied JSON parameters

        Returns:
            ProvisionResult with operation "provision"

        Raises:
            InvalidParametersError: If raw_parameters is malformed
            TemplateBuildError: If the template cannot be built
            ClientError: If CloudFormation rejects the request
        """
        params = QueueParameters.from_raw(raw_parameters)

        # Derived tags take precedence over user tags with the same key
        tags = dict(params.tags)
        tags.update(derived_tags(instance_id, organization_id, self.environment))

        updates: Dict[str, Any] = {"tags": tags}
        if plan_name == FIFO_PLAN_NAME:
            updates["fifo_queue"] = True
        params = params.model_copy(update=updates)

        await self.client.create_stack(instance_id, organization_id, params)

        logger.info(
            "Provision accepted",
            instance_id=instance_id,
            organization_id=organization_id,
            plan_name=plan_name
        )
        return ProvisionResult(operation=OperationToken.PROVISION, is_async=True)

    async def deprovision(self, instance_id: str) -> DeprovisionResult:
        """
        Start deleting the queue pair for an instance.

        Raises:
            InstanceDoesNotExistError: If the stack is already gone or
                never existed; nothing was deleted and is_async is False
            ClientError: If CloudFormation rejects the request
        """
        try:
            await self.client.delete_stack(instance_id)
        except StackNotFoundError as e:
            logger.info(
                "Deprovision of missing instance",
                instance_id=instance_id,
                stack_name=e.stack_name
            )
            raise InstanceDoesNotExistError(instance_id) from e

        logger.info("Deprovision accepted", instance_id=instance_id)
        return DeprovisionResult(operation=OperationToken.DEPROVISION, is_async=True)

    async def update(self, instance_id: str, raw_parameters: RawParameters = None) -> None:
        """
        Reject an update request.

        Raises:
            UpdateNotSupportedError: Always
        """
        logger.warning("Update requested but not supported", instance_id=instance_id)
        raise UpdateNotSupportedError()

    async def last_operation(
        self,
        instance_id: str,
        operation: Optional[str] = None
    ) -> LastOperationResult:
        """
        Report the state of the last operation on an instance.

        Provision and deprovision share one status table, so the
        operation token is only logged.

        Raises:
            StackNotFoundError: If the stack does not exist
            BackendAnomalyError: If CloudFormation's response is malformed
            ClientError: If the describe call fails
        """
        status = await self.client.get_stack_status(instance_id)
        state, description = classify_stack_status(status)

        logger.info(
            "Last operation polled",
            instance_id=instance_id,
            operation=operation,
            stack_status=status,
            state=state.value
        )
        return LastOperationResult(state=state, description=description)

    async def bind(self, instance_id: str, binding_id: str) -> BindingResult:
        """Create a binding. No credentials are issued."""
        return BindingResult(credentials={}, is_async=False)

    async def unbind(self, instance_id: str, binding_id: str) -> UnbindResult:
        """Delete a binding. Always succeeds."""
        return UnbindResult(is_async=False)
