"""
Inventory Handler - Lambda function for reagent registration.

Registers a bottle for a registry number, importing the substance from the
chemistry registry on first use, and serves the storage locations the
registration form offers.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from chem_inventory.handlers.models.env_vars import get_handler_env_vars
from chem_inventory.handlers.utils.auth import authorize_request
from chem_inventory.handlers.utils.dependencies import get_dependencies
from chem_inventory.handlers.utils.errors import ErrorContext, create_error_context
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.handlers.utils.rest_api_resolver import (
    INVENTORY_PATH,
    LOCATIONS_PATH,
    build_resolver,
    handle_service_errors,
    json_response,
    parse_json_body,
    unhandled_error_response,
)
from chem_inventory.logic.registration import register_inventory
from chem_inventory.models.input import RegisterInventoryRequest

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


@app.get(LOCATIONS_PATH)
@tracer.capture_method
@handle_service_errors
def get_locations() -> Response:
    """
    List every area and cabinet.

    Returns:
        ``{"areas": [...], "cabinets": [...]}``
    """
    context = _request_context("get_locations")
    output = get_dependencies().location_service.get_location_data(context=context)
    return json_response(200, output.model_dump(mode="json", by_alias=True))


@app.post(INVENTORY_PATH)
@tracer.capture_method
@handle_service_errors
def post_inventory() -> Response:
    """
    Register one bottle.

    Returns:
        ``[{"identifier", "status", "inventoryKey", "isNewSubstance"}]``
    """
    logger.info("Register inventory request received")
    context = _request_context("register_inventory")

    request = RegisterInventoryRequest.model_validate(parse_json_body(app.current_event.body, context=context))
    context.resource_id = request.cas_rn

    dependencies = get_dependencies()
    results = register_inventory(request, dependencies.resolver, dependencies.writer, context=context)

    return json_response(200, [result.model_dump(mode="json", by_alias=True) for result in results])


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler for the inventory API.

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
