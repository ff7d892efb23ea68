"""
Module: test_template.py
Description: Unit tests for CloudFormation template synthesis.

Covers determinism, queue naming, FIFO suffixing, the conditional
redrive policy, tag injection and outputs. Templates are parsed back
with PyYAML for structural assertions.
"""

import pytest
import yaml

from broker.errors import TemplateBuildError
from models.queue import QueueParameters
from stacks.template import (
    CONDITION_REDRIVE_ENABLED,
    RESOURCE_PRIMARY_QUEUE,
    RESOURCE_SECONDARY_QUEUE,
    QueueTemplateBuilder,
)

STACK_NAME = "paas-sqs-broker-a5da1b66"


def render(params=None, tags=None, stack_name=STACK_NAME):
    builder = QueueTemplateBuilder(stack_name, params or QueueParameters(), tags)
    return yaml.safe_load(builder.build())


def primary(template):
    return template["Resources"][RESOURCE_PRIMARY_QUEUE]["Properties"]


def secondary(template):
    return template["Resources"][RESOURCE_SECONDARY_QUEUE]["Properties"]


def tags_of(properties):
    return {tag["Key"]: tag["Value"] for tag in properties["Tags"]}


class TestQueueTemplateBuilder:
    """Test cases for QueueTemplateBuilder."""

    def test_build_is_deterministic(self):
        """Identical inputs render byte-identical templates."""
        params = QueueParameters(
            redrive_max_receive_count=5,
            visibility_timeout=60,
            fifo_queue=True,
            tags={"team": "payments", "cost-centre": "42"}
        )
        tags = {"Name": "abc", "Service": "sqs", "Customer": "org1", "Environment": "test"}

        first = QueueTemplateBuilder(STACK_NAME, params, tags).build()
        second = QueueTemplateBuilder(STACK_NAME, params, tags).build()

        assert first == second

    def test_tag_insertion_order_does_not_change_output(self):
        """Tags are rendered sorted, so dict order is irrelevant."""
        params = QueueParameters()
        forwards = QueueTemplateBuilder(STACK_NAME, params, {"a": "1", "b": "2"}).build()
        backwards = QueueTemplateBuilder(STACK_NAME, params, {"b": "2", "a": "1"}).build()

        assert forwards == backwards

    def test_standard_queue_names(self):
        """Standard queues get -pri/-sec suffixes and no .fifo."""
        template = render()

        assert primary(template)["QueueName"] == f"{STACK_NAME}-pri"
        assert secondary(template)["QueueName"] == f"{STACK_NAME}-sec"
        assert not primary(template)["QueueName"].endswith(".fifo")
        assert not secondary(template)["QueueName"].endswith(".fifo")
        assert "FifoQueue" not in primary(template)
        assert "FifoQueue" not in secondary(template)

    def test_fifo_queue_names(self):
        """FIFO queues carry the .fifo suffix and the FifoQueue property."""
        template = render(QueueParameters(fifo_queue=True))

        assert primary(template)["QueueName"] == f"{STACK_NAME}-pri.fifo"
        assert secondary(template)["QueueName"] == f"{STACK_NAME}-sec.fifo"
        assert primary(template)["FifoQueue"] is True
        assert secondary(template)["FifoQueue"] is True

    def test_fifo_name_without_suffix_is_rejected(self):
        """A FIFO name missing the suffix is an error, not silently fixed."""

        class BrokenBuilder(QueueTemplateBuilder):
            def primary_queue_name(self):
                return f"{self.stack_name}-pri"

        builder = BrokenBuilder(STACK_NAME, QueueParameters(fifo_queue=True))

        with pytest.raises(TemplateBuildError, match="must end with"):
            builder.build()

    def test_no_redrive_policy_when_count_is_zero(self):
        """The attribute is absent, not empty, when redrive is disabled."""
        assert "RedrivePolicy" not in primary(render(QueueParameters(redrive_max_receive_count=0)))
        assert "RedrivePolicy" not in primary(render(QueueParameters()))

    def test_redrive_policy_when_count_is_positive(self):
        """A positive count wires the primary queue to the secondary's ARN."""
        template = render(QueueParameters(redrive_max_receive_count=7))

        policy = primary(template)["RedrivePolicy"]
        condition, enabled, disabled = policy["Fn::If"]

        assert condition == CONDITION_REDRIVE_ENABLED
        assert enabled["deadLetterTargetArn"] == {"Fn::GetAtt": [RESOURCE_SECONDARY_QUEUE, "Arn"]}
        assert enabled["maxReceiveCount"] == {"Ref": "RedriveMaxReceiveCount"}
        assert disabled == {"Ref": "AWS::NoValue"}
        assert template["Parameters"]["RedriveMaxReceiveCount"]["Default"] == 7
        assert CONDITION_REDRIVE_ENABLED in template["Conditions"]

    def test_secondary_queue_never_has_redrive_policy(self):
        template = render(QueueParameters(redrive_max_receive_count=3))
        assert "RedrivePolicy" not in secondary(template)

    def test_parameters_use_supplied_values_or_sqs_defaults(self):
        """Supplied values become parameter defaults; others keep SQS defaults."""
        template = render(QueueParameters(delay_seconds=15, visibility_timeout=120))
        parameters = template["Parameters"]

        assert parameters["DelaySeconds"]["Default"] == 15
        assert parameters["VisibilityTimeout"]["Default"] == 120
        assert parameters["MaximumMessageSize"]["Default"] == 262144
        assert parameters["MessageRetentionPeriod"]["Default"] == 345600
        assert parameters["ReceiveMessageWaitTimeSeconds"]["Default"] == 0
        assert parameters["RedriveMaxReceiveCount"]["Default"] == 0

    def test_parameters_declare_sqs_limits(self):
        """Range checks are left to CloudFormation via Min/MaxValue."""
        parameters = render()["Parameters"]

        assert parameters["DelaySeconds"]["MaxValue"] == 900
        assert parameters["MaximumMessageSize"]["MinValue"] == 1024
        assert parameters["MaximumMessageSize"]["MaxValue"] == 262144
        assert parameters["MessageRetentionPeriod"]["MinValue"] == 60
        assert parameters["MessageRetentionPeriod"]["MaxValue"] == 1209600
        assert parameters["ReceiveMessageWaitTimeSeconds"]["MaxValue"] == 20
        assert parameters["VisibilityTimeout"]["MaxValue"] == 43200
        assert "MaxValue" not in parameters["RedriveMaxReceiveCount"]

    def test_out_of_range_values_are_rendered_unchanged(self):
        """The builder shapes the template; it does not validate ranges."""
        template = render(QueueParameters(delay_seconds=5000))
        assert template["Parameters"]["DelaySeconds"]["Default"] == 5000

    def test_queue_properties_reference_parameters(self):
        properties = primary(render())

        assert properties["DelaySeconds"] == {"Ref": "DelaySeconds"}
        assert properties["MaximumMessageSize"] == {"Ref": "MaximumMessageSize"}
        assert properties["MessageRetentionPeriod"] == {"Ref": "MessageRetentionPeriod"}
        assert properties["ReceiveMessageWaitTimeSeconds"] == {"Ref": "ReceiveMessageWaitTimeSeconds"}
        assert properties["VisibilityTimeout"] == {"Ref": "VisibilityTimeout"}

    def test_queue_type_tag_is_injected(self):
        """Each queue is tagged with its role alongside the caller's tags."""
        template = render(tags={"Service": "sqs", "DeployEnv": "autom8"})

        assert tags_of(primary(template)) == {
            "QueueType": "Primary",
            "Service": "sqs",
            "DeployEnv": "autom8",
        }
        assert tags_of(secondary(template)) == {
            "QueueType": "Secondary",
            "Service": "sqs",
            "DeployEnv": "autom8",
        }

    def test_queue_type_tag_overrides_caller_value(self):
        template = render(tags={"QueueType": "Spoofed"})
        assert tags_of(primary(template))["QueueType"] == "Primary"

    def test_content_based_deduplication(self):
        template = render(QueueParameters(content_based_deduplication=True))

        assert primary(template)["ContentBasedDeduplication"] is True
        assert secondary(template)["ContentBasedDeduplication"] is True
        assert "ContentBasedDeduplication" not in primary(render())

    def test_outputs_export_urls_and_arns(self):
        """Both queues' URL and ARN are exported under stack-derived names."""
        outputs = render()["Outputs"]

        assert set(outputs) == {
            "PrimaryQueueURL",
            "PrimaryQueueARN",
            "SecondaryQueueURL",
            "SecondaryQueueARN",
        }
        assert outputs["PrimaryQueueURL"]["Value"] == {"Ref": RESOURCE_PRIMARY_QUEUE}
        assert outputs["PrimaryQueueARN"]["Value"] == {"Fn::GetAtt": [RESOURCE_PRIMARY_QUEUE, "Arn"]}
        assert outputs["SecondaryQueueURL"]["Value"] == {"Ref": RESOURCE_SECONDARY_QUEUE}
        assert outputs["SecondaryQueueARN"]["Value"] == {"Fn::GetAtt": [RESOURCE_SECONDARY_QUEUE, "Arn"]}
        for name, output in outputs.items():
            assert output["Export"]["Name"] == f"{STACK_NAME}-{name}"

    def test_template_format_version(self):
        assert render()["AWSTemplateFormatVersion"] == "2010-09-09"

    def test_invalid_stack_name(self):
        with pytest.raises(ValueError, match="stack_name must be a non-empty string"):
            QueueTemplateBuilder("", QueueParameters())
