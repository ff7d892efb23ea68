"""
Module: errors.py
Description: Error taxonomy for the SQS broker.

Every error the broker raises belongs to one ErrorKind. The broker API
layer maps kinds to HTTP status codes; nothing in this module holds
mutable state.

Transport failures (network, credentials, throttling) are raised by
botocore and propagate unchanged; error_kind() classifies them as
TRANSPORT without wrapping.

Key Components:
- ErrorKind: Enumerated error categories
- BrokerError and subclasses: Concrete exceptions, one kind each
- error_kind(): Classify any exception raised through the broker

Dependencies: botocore, enum
Author: SQS Broker Team
"""

from enum import Enum

from botocore.exceptions import BotoCoreError, ClientError


class ErrorKind(str, Enum):
    """Categories of failure surfaced to the broker API layer."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BACKEND_ANOMALY = "backend_anomaly"
    TRANSPORT = "transport"
    UNSUPPORTED = "unsupported"


class BrokerError(Exception):
    """Base class for errors raised by the broker."""

    kind: ErrorKind = ErrorKind.BACKEND_ANOMALY


class InvalidParametersError(BrokerError):
    """Caller-supplied parameters are malformed."""

    kind = ErrorKind.VALIDATION


class StackNotFoundError(BrokerError):
    """The control plane reports the stack does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, stack_name: str):
        super().__init__(f"stack {stack_name} does not exist")
        self.stack_name = stack_name


class InstanceDoesNotExistError(BrokerError):
    """The service instance is already gone (or never existed)."""

    kind = ErrorKind.NOT_FOUND
    is_async = False

    def __init__(self, instance_id: str):
        super().__init__("instance does not exist")
        self.instance_id = instance_id


class BackendAnomalyError(BrokerError):
    """The control plane returned an unexpected response shape."""

    kind = ErrorKind.BACKEND_ANOMALY


class TemplateBuildError(BrokerError):
    """The stack template could not be constructed."""

    kind = ErrorKind.BACKEND_ANOMALY


class UpdateNotSupportedError(BrokerError):
    """Updating an existing queue is not supported."""

    kind = ErrorKind.UNSUPPORTED

    def __init__(self):
        super().__init__("Updating the SQS queue is currently not supported")


def error_kind(exc: BaseException) -> ErrorKind:
    """
    Classify an exception raised through the broker.

    Args:
        exc: Any exception raised by SQSProvider or StackClient

    Returns:
        The ErrorKind of a BrokerError, TRANSPORT for botocore
        failures, BACKEND_ANOMALY for anything else
    """
    if isinstance(exc, BrokerError):
        return exc.kind
    if isinstance(exc, (ClientError, BotoCoreError)):
        return ErrorKind.TRANSPORT
    return ErrorKind.BACKEND_ANOMALY
