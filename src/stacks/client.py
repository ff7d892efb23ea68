"""
Module: client.py
Description: CloudFormation client for queue stack lifecycle operations.

Creates, deletes and describes the CloudFormation stack that backs a
service instance. Creation and deletion are asynchronous on the
control plane: these methods return once the request is accepted, and
callers observe completion by polling get_stack_status().

Key Components:
- StackLifecycleClient: CloudFormation-backed StackClient
- is_not_found_error(): Recognise the control plane's not-found shapes
- create_cloudformation_client(): boto3 client with broker timeouts

Dependencies: boto3, botocore, asyncio, typing
Author: SQS Broker Team
"""

import asyncio
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from broker.errors import BackendAnomalyError, StackNotFoundError
from models.queue import QueueParameters
from stacks.base import StackClient
from stacks.template import QueueTemplateBuilder
from utils.logger import get_logger

logger = get_logger(__name__)

CAPABILITY_NAMED_IAM = "CAPABILITY_NAMED_IAM"

NOT_FOUND_ERROR_CODE = "ResourceNotFoundException"
VALIDATION_ERROR_CODE = "ValidationError"
NO_EXIST_ERR_MATCH = "does not exist"


def is_not_found_error(error: Exception) -> bool:
    """
    Check whether a control-plane error means the stack does not exist.

    CloudFormation reports a missing stack either with an explicit
    not-found code or as a generic ValidationError whose message says
    the stack "does not exist".
    """
    if not isinstance(error, ClientError):
        return False

    details = error.response.get('Error', {})
    code = details.get('Code')
    if code == NOT_FOUND_ERROR_CODE:
        return True
    return code == VALIDATION_ERROR_CODE and NO_EXIST_ERR_MATCH in details.get('Message', '')


def create_cloudformation_client(region: str, timeout: int):
    """
    Create a boto3 CloudFormation client.

    SDK retries are disabled: retrying is the caller's decision, and
    the broker's only retry loop is the platform's last_operation poll.

    Args:
        region: AWS region
        timeout: Connect and read timeout in seconds
    """
    return boto3.client(
        'cloudformation',
        region_name=region,
        config=Config(
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={'max_attempts': 1, 'mode': 'standard'}
        )
    )


class StackLifecycleClient(StackClient):
    """
    CloudFormation-backed stack lifecycle client.

    Attributes:
        resource_prefix: Prefix prepended to instance IDs to name stacks
        cloudformation: boto3 CloudFormation client

    Example:
        >>> client = StackLifecycleClient("paas-sqs-broker-", create_cloudformation_client("eu-west-2", 30))
        >>> await client.create_stack("abc", "org1", QueueParameters())
        >>> await client.get_stack_status("abc")
        'CREATE_IN_PROGRESS'
    """

    def __init__(self, resource_prefix: str, cloudformation: Any):
        if not resource_prefix or not isinstance(resource_prefix, str):
            raise ValueError("resource_prefix must be a non-empty string")

        self.resource_prefix = resource_prefix
        self.cloudformation = cloudformation

        logger.info(
            "Stack lifecycle client initialized",
            resource_prefix=resource_prefix
        )

    def get_stack_name(self, instance_id: str) -> str:
        """Stack identity of an instance; stable across versions."""
        return f"{self.resource_prefix}{instance_id}"

    async def create_stack(
        self,
        instance_id: str,
        organization_id: str,
        params: QueueParameters
    ) -> None:
        """
        Submit a create request for the instance's stack.

        Args:
            instance_id: Service instance ID
            organization_id: Owning organization ID
            params: Queue parameters with tags already merged

        Raises:
            TemplateBuildError: If the template cannot be built
            ClientError: If the control plane rejects the request
        """
        stack_name = self.get_stack_name(instance_id)
        template_body = QueueTemplateBuilder(stack_name, params, params.tags).build()

        try:
            response = await asyncio.to_thread(
                self.cloudformation.create_stack,
                StackName=stack_name,
                TemplateBody=template_body,
                Capabilities=[CAPABILITY_NAMED_IAM],
                Parameters=[]
            )
        except ClientError as e:
            logger.error(
                "Failed to create stack",
                stack_name=stack_name,
                instance_id=instance_id,
                organization_id=organization_id,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        logger.info(
            "Stack creation accepted",
            stack_name=stack_name,
            stack_id=response.get('StackId'),
            instance_id=instance_id,
            organization_id=organization_id,
            fifo_queue=params.fifo_queue
        )

    async def delete_stack(self, instance_id: str) -> None:
        """
        Submit a delete request for the instance's stack.

        The stack is described first: deleting a stack that does not
        exist looks exactly like a successful delete to CloudFormation,
        and callers need to know the instance is already gone.

        Raises:
            StackNotFoundError: If the stack does not exist
            BackendAnomalyError: If the describe response is malformed
            ClientError: If the control plane rejects the request
        """
        stack_name = self.get_stack_name(instance_id)
        await self._describe_stack(stack_name)

        try:
            await asyncio.to_thread(
                self.cloudformation.delete_stack,
                StackName=stack_name
            )
        except ClientError as e:
            logger.error(
                "Failed to delete stack",
                stack_name=stack_name,
                instance_id=instance_id,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        logger.info(
            "Stack deletion accepted",
            stack_name=stack_name,
            instance_id=instance_id
        )

    async def get_stack_status(self, instance_id: str) -> str:
        """
        Return the raw status of the instance's stack.

        Raises:
            StackNotFoundError: If the stack does not exist
            BackendAnomalyError: If zero or several stacks match, or the
                stack has no status
            ClientError: If the describe call fails
        """
        stack_name = self.get_stack_name(instance_id)
        stack = await self._describe_stack(stack_name)
        status = stack['StackStatus']

        logger.debug(
            "Stack status retrieved",
            stack_name=stack_name,
            stack_status=status
        )
        return status

    async def _describe_stack(self, stack_name: str) -> Dict[str, Any]:
        try:
            response: Optional[Dict[str, Any]] = await asyncio.to_thread(
                self.cloudformation.describe_stacks,
                StackName=stack_name
            )
        except ClientError as e:
            if is_not_found_error(e):
                logger.info("Stack not found", stack_name=stack_name)
                raise StackNotFoundError(stack_name) from e
            logger.error(
                "Failed to describe stack",
                stack_name=stack_name,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        if response is None:
            raise self._anomaly(stack_name, "describe response was empty")

        stacks = response.get('Stacks') or []
        if len(stacks) == 0:
            raise self._anomaly(stack_name, "describe response contained no stacks")
        if len(stacks) > 1:
            raise self._anomaly(
                stack_name,
                f"describe response contained {len(stacks)} stacks for a single stack name"
            )

        stack = stacks[0]
        if not stack.get('StackStatus'):
            raise self._anomaly(stack_name, "describe response contained a stack without a status")
        return stack

    def _anomaly(self, stack_name: str, message: str) -> BackendAnomalyError:
        logger.error(
            "Unexpected describe response from CloudFormation",
            stack_name=stack_name,
            anomaly=message
        )
        return BackendAnomalyError(f"{message} ({stack_name})")
