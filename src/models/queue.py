"""
Module: queue.py
Description: Queue parameter model for provision requests.

Defines the parameters a platform user can pass when creating a
queue, e.g.:

    cf create-service sqs standard my-queue -c '{"redriveMaxReceiveCount": 5}'

Numeric ranges are documented here but deliberately not validated:
they are declared as constraints on the CloudFormation template
parameters and enforced by the control plane.

Key Components:
- QueueParameters: Parsed, strictly-typed provision parameters
- QueueParameters.from_raw(): Parse raw JSON bytes/str/dict

Dependencies: pydantic, json, typing
Author: SQS Broker Team
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from broker.errors import InvalidParametersError


class QueueParameters(BaseModel):
    """
    Provision parameters for an SQS queue pair.

    JSON keys are camelCase (e.g. ``delaySeconds``); snake_case field
    names are also accepted. Unknown keys are rejected.

    Attributes:
        delay_seconds: Delivery delay for all messages, 0 to 900
        maximum_message_size: Message size limit in bytes, 1024 to 262144
        message_retention_period: Retention in seconds, 60 to 1209600
        receive_message_wait_time_seconds: Long-poll wait, 0 to 20
        redrive_max_receive_count: Receives before a message moves to the
            dead-letter queue; 0 disables the redrive policy
        visibility_timeout: Visibility timeout in seconds, 0 to 43200
        fifo_queue: Create FIFO queues (forced on by the fifo plan)
        content_based_deduplication: Deduplicate by message body hash
        tags: Extra tags applied to both queues
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True
    )

    delay_seconds: Optional[int] = Field(default=None)
    maximum_message_size: Optional[int] = Field(default=None)
    message_retention_period: Optional[int] = Field(default=None)
    receive_message_wait_time_seconds: Optional[int] = Field(default=None)
    redrive_max_receive_count: Optional[int] = Field(default=None)
    visibility_timeout: Optional[int] = Field(default=None)
    fifo_queue: bool = Field(default=False)
    content_based_deduplication: bool = Field(default=False)
    tags: Dict[str, str] = Field(default_factory=dict)

    @property
    def redrive_enabled(self) -> bool:
        """True when messages should be moved to the dead-letter queue."""
        return bool(self.redrive_max_receive_count and self.redrive_max_receive_count > 0)

    @classmethod
    def from_raw(cls, raw: Union[bytes, str, Dict[str, Any], None]) -> "QueueParameters":
        """
        Parse raw provision parameters.

        Args:
            raw: JSON bytes or text, an already-decoded dict, or None/empty

        Returns:
            Parsed QueueParameters

        Raises:
            InvalidParametersError: If the JSON is malformed, is not an
                object, or contains unknown or wrongly-typed fields
        """
        if raw is None or raw in (b"", ""):
            return cls()

        data = raw
        if isinstance(raw, (bytes, str)):
            try:
                data = json.loads(raw)
            except ValueError as e:
                raise InvalidParametersError(f"parameters are not valid JSON: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidParametersError("parameters must be a JSON object")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidParametersError(f"invalid parameters: {errors}") from e
