"""
Cabinets Handler - Lambda function for storage cabinet management.

Registers cabinets (creating their area on first use) and deletes them,
removing an area once its last cabinet is gone.
"""

from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from chem_inventory.handlers.models.env_vars import get_handler_env_vars
from chem_inventory.handlers.utils.auth import authorize_request
from chem_inventory.handlers.utils.dependencies import get_dependencies
from chem_inventory.handlers.utils.errors import ErrorContext, ValidationError, create_error_context
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.handlers.utils.rest_api_resolver import (
    CABINETS_PATH,
    build_resolver,
    handle_service_errors,
    json_response,
    parse_json_body,
    unhandled_error_response,
)
from chem_inventory.models.input import RegisterCabinetRequest

app = build_resolver()


def _request_context(operation: str) -> ErrorContext:
    request_context = app.current_event.request_context
    request_id = request_context.request_id if request_context else "unknown"
    context = create_error_context(request_id=request_id, operation=operation)
    authorize_request(
        (app.current_event.headers or {}).get("Authorization"),
        get_handler_env_vars().API_BEARER_TOKEN,
        context=context,
    )
    return context


def parse_cabinet_id(raw_value: Any, context: Optional[ErrorContext] = None) -> int:
    """
    Parse the ``cabinet_id`` query parameter.

    Raises:
        ValidationError: If the value is missing or not an integer
    """
    if raw_value is None or not str(raw_value).strip():
        raise ValidationError(
            message="cabinet_id is required",
            field_errors=[{"field": "cabinet_id", "message": "Field required"}],
            context=context,
        )
    try:
        return int(str(raw_value).strip())
    except ValueError:
        raise ValidationError(
            message=f"cabinet_id must be an integer, got {raw_value!r}",
            field_errors=[{"field": "cabinet_id", "message": "Input should be a valid integer"}],
            context=context,
        )


@app.post(CABINETS_PATH)
@tracer.capture_method
@handle_service_errors
def post_cabinet() -> Response:
    """
    Register a cabinet.

    Returns:
        ``{"status", "cabinetId", "cabinetName"}``
    """
    logger.info("Register cabinet request received")
    context = _request_context("register_cabinet")

    request = RegisterCabinetRequest.model_validate(parse_json_body(app.current_event.body, context=context))
    tracer.put_annotation("area_name", request.area_name)

    output = get_dependencies().location_service.register_cabinet(request, context=context)

    logger.info("Cabinet registered", extra={
        "cabinet_id": output.cabinet_id,
        "area_name": request.area_name,
    })
    return json_response(200, output.model_dump(mode="json", by_alias=True))


@app.delete(CABINETS_PATH)
@tracer.capture_method
@handle_service_errors
def delete_cabinet() -> Response:
    """
    Delete a cabinet given as the ``cabinet_id`` query parameter.

    Returns:
        ``{"status", "cabinetId", "areaDeleted"}``
    """
    context = _request_context("delete_cabinet")

    cabinet_id = parse_cabinet_id(
        (app.current_event.query_string_parameters or {}).get("cabinet_id"),
        context=context,
    )
    context.resource_id = str(cabinet_id)
    tracer.put_annotation("cabinet_id", cabinet_id)

    output = get_dependencies().location_service.delete_cabinet(cabinet_id, context=context)
    return json_response(200, output.model_dump(mode="json", by_alias=True))


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler for the cabinets API.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        metrics.add_metric(name="RequestCount", unit=MetricUnit.Count, value=1)
        return app.resolve(event, context)

    except Exception as e:
        metrics.add_metric(name="RequestError", unit=MetricUnit.Count, value=1)
        logger.exception("Unhandled error in lambda handler", extra={"error": str(e)})
        return unhandled_error_response(e)
