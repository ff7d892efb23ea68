"""
Module: template.py
Description: CloudFormation template synthesis for an SQS queue pair.

Builds the YAML template for one service instance: a primary queue and
its secondary (dead-letter) queue, plus exported outputs for both
queues' URL and ARN. The template's structure depends on the request:
the redrive policy only exists when a max receive count is set, and
FIFO queues get the reserved ``.fifo`` name suffix.

Output is deterministic: the same inputs always produce byte-identical
YAML, so resubmitting a template is idempotent and easy to assert on.

Key Components:
- QueueTemplateBuilder: Derives queue names and renders the template
- PARAMETER_SPECS: Template parameters with SQS defaults and limits

Dependencies: PyYAML, typing
Author: SQS Broker Team
"""

from typing import Any, Dict, List, NamedTuple, Optional

import yaml

from broker.errors import TemplateBuildError
from models.queue import QueueParameters
from utils.logger import get_logger

logger = get_logger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"

PARAM_DELAY_SECONDS = "DelaySeconds"
PARAM_MAXIMUM_MESSAGE_SIZE = "MaximumMessageSize"
PARAM_MESSAGE_RETENTION_PERIOD = "MessageRetentionPeriod"
PARAM_RECEIVE_MESSAGE_WAIT_TIME_SECONDS = "ReceiveMessageWaitTimeSeconds"
PARAM_REDRIVE_MAX_RECEIVE_COUNT = "RedriveMaxReceiveCount"
PARAM_VISIBILITY_TIMEOUT = "VisibilityTimeout"

CONDITION_REDRIVE_ENABLED = "RedriveEnabled"

RESOURCE_PRIMARY_QUEUE = "PrimaryQueue"
RESOURCE_SECONDARY_QUEUE = "SecondaryQueue"

OUTPUT_PRIMARY_QUEUE_URL = "PrimaryQueueURL"
OUTPUT_PRIMARY_QUEUE_ARN = "PrimaryQueueARN"
OUTPUT_SECONDARY_QUEUE_URL = "SecondaryQueueURL"
OUTPUT_SECONDARY_QUEUE_ARN = "SecondaryQueueARN"

QUEUE_TYPE_TAG = "QueueType"

EXT_FIFO = ".fifo"
EXT_STANDARD = ""


class ParameterSpec(NamedTuple):
    """A numeric template parameter backed by a QueueParameters field."""

    name: str
    field: str
    default: int
    min_value: Optional[int]
    max_value: Optional[int]
    description: str


# Defaults and limits are the SQS service's own
PARAMETER_SPECS: List[ParameterSpec] = [
    ParameterSpec(
        PARAM_DELAY_SECONDS, "delay_seconds", 0, 0, 900,
        "Seconds for which delivery of all messages in the queue is delayed."
    ),
    ParameterSpec(
        PARAM_MAXIMUM_MESSAGE_SIZE, "maximum_message_size", 262144, 1024, 262144,
        "Bytes a message can contain before SQS rejects it."
    ),
    ParameterSpec(
        PARAM_MESSAGE_RETENTION_PERIOD, "message_retention_period", 345600, 60, 1209600,
        "Seconds that SQS retains a message."
    ),
    ParameterSpec(
        PARAM_RECEIVE_MESSAGE_WAIT_TIME_SECONDS, "receive_message_wait_time_seconds", 0, 0, 20,
        "Seconds a ReceiveMessage call waits for a message to arrive."
    ),
    ParameterSpec(
        PARAM_REDRIVE_MAX_RECEIVE_COUNT, "redrive_max_receive_count", 0, 0, None,
        "Receives before a message moves to the dead-letter queue. 0 disables it."
    ),
    ParameterSpec(
        PARAM_VISIBILITY_TIMEOUT, "visibility_timeout", 30, 0, 43200,
        "Seconds a received message stays hidden from other consumers."
    ),
]


def _ref(name: str) -> Dict[str, str]:
    return {"Ref": name}


def _arn_of(resource: str) -> Dict[str, List[str]]:
    return {"Fn::GetAtt": [resource, "Arn"]}


class QueueTemplateBuilder:
    """
    Builds the CloudFormation template for one SQS queue pair.

    Attributes:
        stack_name: Stack identity; queue and export names derive from it
        params: Parsed queue parameters
        tags: Tags applied to both queues (already merged by the caller)

    Example:
        >>> builder = QueueTemplateBuilder("paas-sqs-broker-abc", QueueParameters())
        >>> builder.primary_queue_name()
        'paas-sqs-broker-abc-pri'
        >>> body = builder.build()
    """

    def __init__(
        self,
        stack_name: str,
        params: QueueParameters,
        tags: Optional[Dict[str, str]] = None
    ):
        if not stack_name or not isinstance(stack_name, str):
            raise ValueError("stack_name must be a non-empty string")

        self.stack_name = stack_name
        self.params = params
        self.tags = dict(tags or {})

    def primary_queue_name(self) -> str:
        """Name of the primary queue."""
        return f"{self.stack_name}-pri{self._ext()}"

    def secondary_queue_name(self) -> str:
        """Name of the secondary (dead-letter) queue."""
        return f"{self.stack_name}-sec{self._ext()}"

    def _ext(self) -> str:
        # FIFO queues must carry the reserved suffix
        return EXT_FIFO if self.params.fifo_queue else EXT_STANDARD

    def build(self) -> str:
        """
        Render the template as YAML.

        Returns:
            Template body suitable for CreateStack's TemplateBody

        Raises:
            TemplateBuildError: If the template cannot be constructed
        """
        try:
            body = yaml.safe_dump(
                self.to_dict(),
                sort_keys=False,
                default_flow_style=False
            )
        except yaml.YAMLError as e:
            logger.error(
                "Failed to render stack template",
                stack_name=self.stack_name,
                error=str(e)
            )
            raise TemplateBuildError(f"failed to render template for {self.stack_name}: {e}") from e

        logger.debug(
            "Stack template rendered",
            stack_name=self.stack_name,
            fifo_queue=self.params.fifo_queue,
            redrive_enabled=self.params.redrive_enabled,
            template_bytes=len(body)
        )
        return body

    def to_dict(self) -> Dict[str, Any]:
        """Build the template document as plain data."""
        self._check_queue_names()

        return {
            "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
            "Parameters": self._parameters(),
            "Conditions": {
                CONDITION_REDRIVE_ENABLED: {
                    "Fn::Not": [
                        {"Fn::Equals": [_ref(PARAM_REDRIVE_MAX_RECEIVE_COUNT), 0]}
                    ]
                }
            },
            "Resources": {
                RESOURCE_PRIMARY_QUEUE: {
                    "Type": "AWS::SQS::Queue",
                    "Properties": self._primary_properties(),
                },
                RESOURCE_SECONDARY_QUEUE: {
                    "Type": "AWS::SQS::Queue",
                    "Properties": self._secondary_properties(),
                },
            },
            "Outputs": self._outputs(),
        }

    def _check_queue_names(self) -> None:
        if not self.params.fifo_queue:
            return
        for name in (self.primary_queue_name(), self.secondary_queue_name()):
            if not name.endswith(EXT_FIFO):
                raise TemplateBuildError(
                    f"FIFO queue name {name!r} must end with {EXT_FIFO!r}"
                )

    def _parameters(self) -> Dict[str, Any]:
        parameters = {}
        for spec in PARAMETER_SPECS:
            value = getattr(self.params, spec.field)
            parameter: Dict[str, Any] = {
                "Type": "Number",
                "Default": spec.default if value is None else value,
                "Description": spec.description,
            }
            if spec.min_value is not None:
                parameter["MinValue"] = spec.min_value
            if spec.max_value is not None:
                parameter["MaxValue"] = spec.max_value
            parameters[spec.name] = parameter
        return parameters

    def _queue_tags(self, queue_type: str) -> List[Dict[str, str]]:
        tags = dict(self.tags)
        tags[QUEUE_TYPE_TAG] = queue_type
        return [{"Key": key, "Value": tags[key]} for key in sorted(tags)]

    def _common_properties(self, queue_name: str) -> Dict[str, Any]:
        properties: Dict[str, Any] = {"QueueName": queue_name}
        if self.params.fifo_queue:
            properties["FifoQueue"] = True
        if self.params.content_based_deduplication:
            properties["ContentBasedDeduplication"] = True
        return properties

    def _primary_properties(self) -> Dict[str, Any]:
        properties = self._common_properties(self.primary_queue_name())
        properties.update({
            "DelaySeconds": _ref(PARAM_DELAY_SECONDS),
            "MaximumMessageSize": _ref(PARAM_MAXIMUM_MESSAGE_SIZE),
            "MessageRetentionPeriod": _ref(PARAM_MESSAGE_RETENTION_PERIOD),
            "ReceiveMessageWaitTimeSeconds": _ref(PARAM_RECEIVE_MESSAGE_WAIT_TIME_SECONDS),
            "VisibilityTimeout": _ref(PARAM_VISIBILITY_TIMEOUT),
        })
        # The attribute is omitted entirely, not nulled, when redrive is off
        if self.params.redrive_enabled:
            properties["RedrivePolicy"] = {
                "Fn::If": [
                    CONDITION_REDRIVE_ENABLED,
                    {
                        "deadLetterTargetArn": _arn_of(RESOURCE_SECONDARY_QUEUE),
                        "maxReceiveCount": _ref(PARAM_REDRIVE_MAX_RECEIVE_COUNT),
                    },
                    _ref("AWS::NoValue"),
                ]
            }
        properties["Tags"] = self._queue_tags("Primary")
        return properties

    def _secondary_properties(self) -> Dict[str, Any]:
        properties = self._common_properties(self.secondary_queue_name())
        properties.update({
            "MessageRetentionPeriod": _ref(PARAM_MESSAGE_RETENTION_PERIOD),
            "VisibilityTimeout": _ref(PARAM_VISIBILITY_TIMEOUT),
        })
        properties["Tags"] = self._queue_tags("Secondary")
        return properties

    def _outputs(self) -> Dict[str, Any]:
        outputs = {
            OUTPUT_PRIMARY_QUEUE_URL: ("Primary queue URL", _ref(RESOURCE_PRIMARY_QUEUE)),
            OUTPUT_PRIMARY_QUEUE_ARN: ("Primary queue ARN", _arn_of(RESOURCE_PRIMARY_QUEUE)),
            OUTPUT_SECONDARY_QUEUE_URL: ("Secondary queue URL", _ref(RESOURCE_SECONDARY_QUEUE)),
            OUTPUT_SECONDARY_QUEUE_ARN: ("Secondary queue ARN", _arn_of(RESOURCE_SECONDARY_QUEUE)),
        }
        return {
            name: {
                "Description": description,
                "Export": {"Name": f"{self.stack_name}-{name}"},
                "Value": value,
            }
            for name, (description, value) in outputs.items()
        }
