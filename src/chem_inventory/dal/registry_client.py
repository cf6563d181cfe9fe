"""
Client for the CAS Common Chemistry registry.

A single GET per call, no retry. Every failure mode (HTTP status, transport,
undecodable body, schema mismatch) surfaces as RegistryFetchError.
"""

from typing import Literal, Optional

import httpx
from aws_lambda_powertools.metrics import MetricUnit
from pydantic import ValidationError

from chem_inventory.handlers.utils.errors import RegistryFetchError
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.models.substance import RegistrySubstance

DEFAULT_REGISTRY_BASE_URL = 'https://commonchemistry.cas.org/api'
ERROR_BODY_EXCERPT_LENGTH = 100


class RegistryClient:
    """Fetches substance detail records by registry number."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_REGISTRY_BASE_URL,
        api_key_location: Literal['header', 'query'] = 'header',
        timeout_seconds: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the registry client.

        Args:
            api_key: Registry API key
            base_url: Registry API base URL
            api_key_location: Send the key as ``X-API-KEY`` header or ``apikey`` query parameter
            timeout_seconds: Timeout for a single request
            http_client: Preconfigured httpx client (for testing)
        """
        self.api_key = api_key
        self.api_key_location = api_key_location
        self.http = http_client or httpx.Client(base_url=base_url.rstrip('/'), timeout=timeout_seconds)

    @tracer.capture_method
    def fetch_substance(self, cas_rn: str) -> RegistrySubstance:
        """
        Fetch and validate the detail record for a registry number.

        Args:
            cas_rn: Registry identifier

        Returns:
            Validated registry payload

        Raises:
            RegistryFetchError: If the record cannot be fetched or does not match the schema
        """
        params = {'cas_rn': cas_rn}
        headers = {'Accept': 'application/json'}
        if self.api_key_location == 'query':
            params['apikey'] = self.api_key
        else:
            headers['X-API-KEY'] = self.api_key

        tracer.put_annotation("cas_rn", cas_rn)

        try:
            response = self.http.get('/detail', params=params, headers=headers)
        except httpx.HTTPError as e:
            metrics.add_metric(name="RegistryFetchFailure", unit=MetricUnit.Count, value=1)
            logger.error("Registry request failed", extra={"cas_rn": cas_rn, "error": str(e)})
            raise RegistryFetchError(message=f"Registry request failed: {e}") from e

        if not response.is_success:
            excerpt = response.text[:ERROR_BODY_EXCERPT_LENGTH]
            metrics.add_metric(name="RegistryFetchFailure", unit=MetricUnit.Count, value=1)
            logger.error("Registry returned an error status", extra={
                "cas_rn": cas_rn,
                "status_code": response.status_code,
                "body_excerpt": excerpt,
            })
            raise RegistryFetchError(
                message=f"Registry call failed ({response.status_code}): {excerpt}",
                status_code=response.status_code,
                body_excerpt=excerpt,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RegistryFetchError(
                message="Registry returned a body that is not JSON",
                status_code=response.status_code,
                body_excerpt=response.text[:ERROR_BODY_EXCERPT_LENGTH],
            ) from e

        if not isinstance(payload, dict):
            raise RegistryFetchError(
                message=f"Registry returned {type(payload).__name__} instead of an object",
                status_code=response.status_code,
            )

        try:
            substance = RegistrySubstance.model_validate(payload)
        except ValidationError as e:
            logger.error("Registry payload does not match schema", extra={
                "cas_rn": cas_rn,
                "validation_errors": e.errors(include_url=False),
            })
            raise RegistryFetchError(
                message=f"Registry payload for {cas_rn} is invalid: {e.error_count()} schema error(s)",
                status_code=response.status_code,
            ) from e

        logger.info("Registry record fetched", extra={"cas_rn": cas_rn, "substance_name": substance.name})
        return substance
