"""
Module: metrics.py
Description: CloudWatch custom metrics publishing.

Publishes broker request counts to CloudWatch so provisioning volume
and failed operations can be alarmed on. Publishing is best effort:
a CloudWatch failure is logged and never fails a broker request.

Key Components:
- MetricsClient: CloudWatch metrics client
- put_metric(): Publish individual metrics

Dependencies: boto3, botocore, typing, logger
Author: SQS Broker Team
"""

from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.logger import get_logger

logger = get_logger(__name__)


class MetricsClient:
    """CloudWatch metrics client."""

    def __init__(self, namespace: str = "SQSBroker", region: Optional[str] = None):
        """
        Initialize metrics client.

        Args:
            namespace: CloudWatch metrics namespace
            region: AWS region (defaults to the environment's region)
        """
        self.namespace = namespace
        self.cloudwatch = boto3.client('cloudwatch', region_name=region)

    def put_metric(
        self,
        metric_name: str,
        value: float = 1.0,
        unit: str = 'Count',
        dimensions: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Publish a metric to CloudWatch.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit (Count, Seconds, etc.)
            dimensions: Optional metric dimensions
        """
        metric_data = {
            'MetricName': metric_name,
            'Value': value,
            'Unit': unit
        }

        if dimensions:
            metric_data['Dimensions'] = [
                {'Name': k, 'Value': v}
                for k, v in sorted(dimensions.items())
            ]

        try:
            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=[metric_data]
            )
        except (ClientError, BotoCoreError) as e:
            # Don't fail request if metrics fail
            logger.warning(
                "Failed to publish metric",
                metric_name=metric_name,
                value=value,
                error=str(e),
                namespace=self.namespace
            )
            return

        logger.debug(
            "Metric published to CloudWatch",
            metric_name=metric_name,
            value=value,
            unit=unit,
            dimensions=dimensions,
            namespace=self.namespace
        )
