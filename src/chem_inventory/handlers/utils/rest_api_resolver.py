"""
REST API resolver utilities shared by the inventory Lambda handlers.

Each handler module builds its own API Gateway REST resolver from
``build_resolver`` so CORS headers and preflight handling are identical, and
wraps its routes in ``handle_service_errors`` so every failure is turned into
the same JSON error body.
"""

import json
from functools import wraps
from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig, Response, content_types
from aws_lambda_powertools.metrics import MetricUnit
from pydantic import ValidationError

from chem_inventory.handlers.models.env_vars import get_handler_env_vars
from chem_inventory.handlers.utils.errors import (
    BaseServiceError,
    ErrorContext,
    ErrorCategory,
    ErrorSeverity,
    ValidationError as ServiceValidationError,
    format_error_response,
    get_http_status_code,
    log_error_metrics,
)
from chem_inventory.handlers.utils.observability import logger, metrics

# API path constants
INVENTORY_PATH = '/inventory'
LOCATIONS_PATH = '/locations'
CABINETS_PATH = '/cabinets'


def build_resolver() -> APIGatewayRestResolver:
    """Build an API Gateway REST resolver with the configured CORS policy."""
    env_vars = get_handler_env_vars()
    cors_config = CORSConfig(
        allow_origin=env_vars.CORS_ALLOW_ORIGIN,
        max_age=600,
        allow_headers=['content-type', 'authorization'],
    )
    return APIGatewayRestResolver(cors=cors_config)


def json_response(status_code: int, body: Any) -> Response:
    """Serialize a body into a JSON API response."""
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps(body),
    )


def unhandled_error_response(error: Exception) -> Dict[str, Any]:
    """Raw proxy response for failures raised outside the resolver's routes."""
    return {
        "statusCode": 500,
        "headers": {
            "Content-Type": content_types.APPLICATION_JSON,
            "Access-Control-Allow-Origin": get_handler_env_vars().CORS_ALLOW_ORIGIN,
        },
        "body": json.dumps({"error": str(error), "kind": "INTERNAL_SERVER_ERROR"}),
        "isBase64Encoded": False,
    }


def handle_service_errors(func):
    """Decorator to handle service errors and convert to HTTP responses."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BaseServiceError as e:
            log_error_metrics(e)
            return json_response(get_http_status_code(e), format_error_response(e))

        except ValidationError as e:
            # Pydantic request validation
            logger.error("Request validation failed", extra={
                "validation_errors": str(e),
                "error_count": e.error_count(),
            })
            metrics.add_metric(name="ValidationError", unit=MetricUnit.Count, value=1)

            field_errors = [
                {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                for error in e.errors()
            ]
            validation_error = ServiceValidationError(
                message="Request validation failed",
                field_errors=field_errors,
            )
            return json_response(get_http_status_code(validation_error), format_error_response(validation_error))

        except Exception as e:
            logger.exception("Unexpected error in handler", extra={
                "error": str(e),
                "function_name": func.__name__,
            })
            metrics.add_metric(name="UnexpectedError", unit=MetricUnit.Count, value=1)

            unexpected_error = BaseServiceError(
                message=str(e) or "An unexpected error occurred",
                error_code="INTERNAL_SERVER_ERROR",
                severity=ErrorSeverity.CRITICAL,
                category=ErrorCategory.INFRASTRUCTURE,
            )
            return json_response(500, format_error_response(unexpected_error))

    return wrapper


def parse_json_body(body: Optional[str], context: Optional[ErrorContext] = None) -> Any:
    """
    Decode a request body.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    try:
        return json.loads(body or "{}")
    except json.JSONDecodeError as e:
        raise ServiceValidationError(
            message=f"Invalid JSON in request body: {e.msg}",
            context=context,
        ) from e
