"""
Static bearer credential check for the inventory API.
"""

import hmac
from typing import Optional

from aws_lambda_powertools.metrics import MetricUnit

from chem_inventory.handlers.utils.errors import AuthenticationError, ErrorContext
from chem_inventory.handlers.utils.observability import logger, metrics

BEARER_PREFIX = 'Bearer '


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip() or None


def authorize_request(
    auth_header: Optional[str],
    expected_token: Optional[str],
    context: Optional[ErrorContext] = None,
) -> None:
    """
    Verify the request credential when a bearer token is configured.

    Args:
        auth_header: Value of the Authorization header, if any
        expected_token: Configured token; no check is made when empty
        context: Error context for tracing

    Raises:
        AuthenticationError: If the token is missing or does not match
    """
    if not expected_token:
        return

    token = extract_bearer_token(auth_header)
    if token is None or not hmac.compare_digest(token.encode(), expected_token.encode()):
        logger.warning("Request rejected - invalid bearer token", extra={"token_present": token is not None})
        metrics.add_metric(name="UnauthorizedRequest", unit=MetricUnit.Count, value=1)
        raise AuthenticationError(context=context)
