"""
Unit tests for the error taxonomy, error responses and the bearer check.
"""

import pytest

from chem_inventory.dal.dynamodb_handler import ConditionalCheckFailedError, DALError
from chem_inventory.handlers.utils.auth import authorize_request, extract_bearer_token
from chem_inventory.handlers.utils.errors import (
    AuthenticationError,
    DuplicateResourceError,
    PersistenceError,
    RegistryFetchError,
    ResourceNotFoundError,
    SubstanceLookupError,
    ValidationError,
    create_error_context,
    format_error_response,
    get_http_status_code,
)


class TestErrorResponses:
    """Test cases for error formatting and status mapping."""

    @pytest.mark.parametrize("error, status_code", [
        (ValidationError("bad input"), 500),
        (AuthenticationError(), 401),
        (ResourceNotFoundError("Cabinet", "9"), 500),
        (DuplicateResourceError("Cabinet", "Prep/Acid"), 409),
        (SubstanceLookupError("lookup failed"), 500),
        (RegistryFetchError("registry down", status_code=503), 500),
        (PersistenceError("insert failed"), 500),
        (DALError("boom", operation="PutItem", table_name="t"), 500),
        (ConditionalCheckFailedError(table_name="t", operation="PutItem", condition="exists"), 500),
    ])
    def test_status_codes(self, error, status_code):
        assert get_http_status_code(error) == status_code

    def test_error_body_shape(self):
        error = PersistenceError("Inventory insert failed: throttled")

        body = format_error_response(error)

        assert body == {
            "error": "Inventory insert failed: throttled",
            "kind": "PERSISTENCE_ERROR",
            "error_id": error.error_id,
        }

    def test_validation_error_carries_field_errors(self):
        error = ValidationError("Request validation failed", field_errors=[{"field": "casRns", "message": "empty"}])

        body = format_error_response(error)

        assert body["kind"] == "VALIDATION_ERROR"
        assert body["field_errors"] == [{"field": "casRns", "message": "empty"}]

    def test_error_ids_are_unique(self):
        assert PersistenceError("a").error_id != PersistenceError("a").error_id

    def test_context_in_log_dict(self):
        context = create_error_context(request_id="req-1", operation="register_inventory", resource_id="71-43-2")

        details = SubstanceLookupError("lookup failed", context=context).to_dict()

        assert details["context"]["request_id"] == "req-1"
        assert details["context"]["resource_id"] == "71-43-2"
        assert details["category"] == "INFRASTRUCTURE"


class TestBearerToken:
    """Test cases for the static bearer credential."""

    def test_extract(self):
        assert extract_bearer_token("Bearer abc") == "abc"
        assert extract_bearer_token("Basic abc") is None
        assert extract_bearer_token("Bearer ") is None
        assert extract_bearer_token(None) is None

    def test_not_configured_allows_everything(self):
        authorize_request(None, None)
        authorize_request("Bearer anything", "")

    def test_matching_token(self):
        authorize_request("Bearer s3cret", "s3cret")

    @pytest.mark.parametrize("header", [None, "Bearer wrong", "s3cret", "Bearer s3cret-and-more"])
    def test_rejected(self, header):
        with pytest.raises(AuthenticationError):
            authorize_request(header, "s3cret")
