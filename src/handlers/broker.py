"""
Module: broker.py
Description: Open Service Broker API v2 handlers.

Exposes the SQS provider to the platform marketplace:
- GET    /v2/catalog
- PUT    /v2/service_instances/{instance_id}
- PATCH  /v2/service_instances/{instance_id}
- DELETE /v2/service_instances/{instance_id}
- GET    /v2/service_instances/{instance_id}/last_operation
- PUT    /v2/service_instances/{instance_id}/service_bindings/{binding_id}
- DELETE /v2/service_instances/{instance_id}/service_bindings/{binding_id}

All routes require broker basic auth. Errors from the provider are
mapped to status codes by ErrorKind:

    VALIDATION -> 400, NOT_FOUND -> 410, UNSUPPORTED -> 422,
    BACKEND_ANOMALY -> 500, TRANSPORT -> 502 (409 for a duplicate stack)

Dependencies: FastAPI, botocore, functools, typing
Author: SQS Broker Team
"""

from functools import lru_cache
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends
from fastapi import status as status_codes
from fastapi.responses import JSONResponse

from auth.basic import verify_broker_credentials
from broker.errors import BrokerError, ErrorKind, error_kind
from broker.provider import SQSProvider
from config.catalog import Catalog, build_catalog
from config.settings import settings
from models.operation import LastOperationState
from models.request import BindRequest, ProvisionRequest, UpdateRequest
from models.response import (
    BindingResponse,
    DeprovisionResponse,
    ErrorResponse,
    LastOperationResponse,
    ProvisionResponse,
)
from stacks.client import StackLifecycleClient, create_cloudformation_client
from utils.logger import get_logger
from utils.metrics import MetricsClient

router = APIRouter(
    prefix="/v2",
    tags=["broker"],
    dependencies=[Depends(verify_broker_credentials)]
)
logger = get_logger(__name__)

BROKER_ERRORS = (BrokerError, ClientError, BotoCoreError)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status_codes.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status_codes.HTTP_410_GONE,
    ErrorKind.UNSUPPORTED: status_codes.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.BACKEND_ANOMALY: status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.TRANSPORT: status_codes.HTTP_502_BAD_GATEWAY,
}


@lru_cache(maxsize=1)
def get_provider() -> SQSProvider:
    """
    Dependency to get the SQS provider.

    The provider and its CloudFormation client are stateless, so one
    instance is shared by all requests.
    """
    cloudformation = create_cloudformation_client(
        settings.aws_region,
        settings.control_plane_timeout
    )
    return SQSProvider(
        StackLifecycleClient(settings.resource_prefix, cloudformation),
        settings.deploy_env
    )


def get_catalog() -> Catalog:
    """Dependency to get the service catalog."""
    return build_catalog(settings)


def get_metrics_client() -> MetricsClient:
    """Dependency to get CloudWatch metrics client."""
    return MetricsClient(region=settings.aws_region)


def _json_error(status_code: int, description: str, error: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, description=description)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _async_required() -> JSONResponse:
    return _json_error(
        status_codes.HTTP_422_UNPROCESSABLE_ENTITY,
        "This service plan requires client support for asynchronous service operations.",
        error="AsyncRequired"
    )


def _error_response(exc: Exception, instance_id: str, operation: str) -> JSONResponse:
    """Map a provider error to a broker API response."""
    kind = error_kind(exc)
    status_code = STATUS_BY_KIND[kind]

    if isinstance(exc, ClientError) and exc.response.get('Error', {}).get('Code') == 'AlreadyExistsException':
        status_code = status_codes.HTTP_409_CONFLICT

    logger.warning(
        "Broker operation failed",
        instance_id=instance_id,
        operation=operation,
        error_kind=kind.value,
        error_type=type(exc).__name__,
        status_code=status_code,
        error=str(exc)
    )

    if status_code == status_codes.HTTP_410_GONE:
        return JSONResponse(status_code=status_code, content={})
    return _json_error(status_code, str(exc))


@router.get("/catalog")
async def get_service_catalog(catalog: Catalog = Depends(get_catalog)) -> Catalog:
    """Return the service catalog."""
    return catalog


@router.put(
    "/service_instances/{instance_id}",
    status_code=status_codes.HTTP_202_ACCEPTED,
    response_model=ProvisionResponse,
    response_model_exclude_none=True
)
async def provision_instance(
    instance_id: str,
    request: ProvisionRequest,
    accepts_incomplete: bool = False,
    provider: SQSProvider = Depends(get_provider),
    catalog: Catalog = Depends(get_catalog),
    metrics_client: MetricsClient = Depends(get_metrics_client)
):
    """
    Provision a queue pair.

    Provisioning is always asynchronous, so the platform must send
    accepts_incomplete=true.

    Returns:
        202 with the operation token to poll last_operation with

    Example:
        PUT /v2/service_instances/abc?accepts_incomplete=true
        {"service_id": "uuid-1", "plan_id": "uuid-3", "organization_guid": "org1",
         "space_guid": "space1", "parameters": {"redriveMaxReceiveCount": 5}}

        Response (202):
        {"operation": "provision"}
    """
    if not accepts_incomplete:
        return _async_required()

    plan = catalog.find_plan(request.service_id, request.plan_id)
    if plan is None:
        return _json_error(
            status_codes.HTTP_400_BAD_REQUEST,
            f"unknown service_id/plan_id: {request.service_id}/{request.plan_id}"
        )

    try:
        result = await provider.provision(
            instance_id,
            request.organization_guid,
            plan.name,
            request.parameters
        )
    except BROKER_ERRORS as e:
        return _error_response(e, instance_id, "provision")

    metrics_client.put_metric("ProvisionRequested", dimensions={"Plan": plan.name})

    return ProvisionResponse(
        dashboard_url=result.dashboard_url or None,
        operation=result.operation.value
    )


@router.patch("/service_instances/{instance_id}")
async def update_instance(
    instance_id: str,
    request: UpdateRequest,
    accepts_incomplete: bool = False,
    provider: SQSProvider = Depends(get_provider)
):
    """Update a queue pair. Always rejected."""
    try:
        await provider.update(instance_id, request.parameters)
    except BROKER_ERRORS as e:
        return _error_response(e, instance_id, "update")

    return JSONResponse(status_code=status_codes.HTTP_200_OK, content={})


@router.delete(
    "/service_instances/{instance_id}",
    status_code=status_codes.HTTP_202_ACCEPTED,
    response_model=DeprovisionResponse
)
async def deprovision_instance(
    instance_id: str,
    service_id: Optional[str] = None,
    plan_id: Optional[str] = None,
    accepts_incomplete: bool = False,
    provider: SQSProvider = Depends(get_provider),
    metrics_client: MetricsClient = Depends(get_metrics_client)
):
    """
    Deprovision a queue pair.

    Returns:
        202 with the operation token, or 410 if the instance is
        already gone
    """
    if not accepts_incomplete:
        return _async_required()

    try:
        result = await provider.deprovision(instance_id)
    except BROKER_ERRORS as e:
        return _error_response(e, instance_id, "deprovision")

    metrics_client.put_metric("DeprovisionRequested")

    return DeprovisionResponse(operation=result.operation.value)


@router.get(
    "/service_instances/{instance_id}/last_operation",
    response_model=LastOperationResponse
)
async def get_last_operation(
    instance_id: str,
    operation: Optional[str] = None,
    service_id: Optional[str] = None,
    plan_id: Optional[str] = None,
    provider: SQSProvider = Depends(get_provider),
    metrics_client: MetricsClient = Depends(get_metrics_client)
):
    """
    Poll the state of the last operation on an instance.

    Returns:
        200 with state and description, or 410 once the stack is gone
    """
    try:
        result = await provider.last_operation(instance_id, operation)
    except BROKER_ERRORS as e:
        return _error_response(e, instance_id, "last_operation")

    if result.state == LastOperationState.FAILED:
        metrics_client.put_metric("LastOperationFailed", dimensions={"Operation": operation or "unknown"})

    return LastOperationResponse(state=result.state, description=result.description)


@router.put(
    "/service_instances/{instance_id}/service_bindings/{binding_id}",
    status_code=status_codes.HTTP_201_CREATED,
    response_model=BindingResponse
)
async def bind_instance(
    instance_id: str,
    binding_id: str,
    request: BindRequest,
    provider: SQSProvider = Depends(get_provider)
):
    """Create a binding. Credentials are currently empty."""
    result = await provider.bind(instance_id, binding_id)
    return BindingResponse(credentials=result.credentials)


@router.delete("/service_instances/{instance_id}/service_bindings/{binding_id}")
async def unbind_instance(
    instance_id: str,
    binding_id: str,
    service_id: Optional[str] = None,
    plan_id: Optional[str] = None,
    provider: SQSProvider = Depends(get_provider)
):
    """Delete a binding."""
    await provider.unbind(instance_id, binding_id)
    return {}
