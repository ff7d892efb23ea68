"""
Module: base.py
Description: The stack-lifecycle capability used by the orchestrator.

SQSProvider only ever needs three control-plane operations, so this
is all it is given. The CloudFormation-backed implementation lives in
stacks.client; tests substitute fakes.
"""

from abc import ABC, abstractmethod

from models.queue import QueueParameters


class StackClient(ABC):
    """Create, delete and inspect the stack backing a service instance."""

    @abstractmethod
    async def create_stack(
        self,
        instance_id: str,
        organization_id: str,
        params: QueueParameters
    ) -> None:
        """
        Submit a create request for the instance's stack.

        Returns once the control plane has accepted the request.
        """

    @abstractmethod
    async def delete_stack(self, instance_id: str) -> None:
        """
        Submit a delete request for the instance's stack.

        Raises:
            StackNotFoundError: If the stack does not exist
        """

    @abstractmethod
    async def get_stack_status(self, instance_id: str) -> str:
        """
        Return the raw control-plane status of the instance's stack.

        Raises:
            StackNotFoundError: If the stack does not exist
            BackendAnomalyError: If the response is malformed
        """
