"""
Pytest configuration and shared fixtures for the chemical inventory functions.

This module provides common test fixtures and configuration used across
unit and integration tests.
"""

import json
import os

# Handler configuration is parsed once and cached, so the environment has to be
# in place before any chem_inventory module is imported.
os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SECURITY_TOKEN": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "INVENTORY_TABLE_NAME": "test-inventory-table",
    "PHOTO_BUCKET_NAME": "test-photo-bucket",
    "REGISTRY_BASE_URL": "https://registry.test/api",
    "REGISTRY_API_KEY": "test-api-key",
    "POWERTOOLS_SERVICE_NAME": "test-chem-inventory",
    "POWERTOOLS_METRICS_NAMESPACE": "TestChemInventory",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    "LOG_LEVEL": "DEBUG",
})

from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import boto3
import httpx
import pytest
from moto import mock_aws

from chem_inventory.dal.blob_storage import BlobStorage
from chem_inventory.dal.dynamodb_handler import DynamoDBHandler
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.dal.registry_client import RegistryClient
from chem_inventory.handlers.models.env_vars import get_handler_env_vars
from chem_inventory.handlers.utils.dependencies import Dependencies, build_dependencies

TABLE_NAME = "test-inventory-table"
BUCKET_NAME = "test-photo-bucket"
REGISTRY_BASE_URL = "https://registry.test/api"
BENZENE_RN = "71-43-2"


# AWS fixtures
@pytest.fixture
def aws_mock():
    """Activate moto for DynamoDB and S3."""
    with mock_aws():
        yield


@pytest.fixture
def dynamodb_table(aws_mock):
    """Create a mock inventory table for testing."""
    dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

    table = dynamodb.create_table(
        TableName=TABLE_NAME,
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
            {"AttributeName": "gsi1pk", "AttributeType": "S"},
            {"AttributeName": "gsi1sk", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "GSI1",
                "KeySchema": [
                    {"AttributeName": "gsi1pk", "KeyType": "HASH"},
                    {"AttributeName": "gsi1sk", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )

    table.wait_until_exists()
    yield table


@pytest.fixture
def photo_bucket(aws_mock):
    """Create a mock photo bucket for testing."""
    s3 = boto3.client("s3", region_name="us-east-1")
    s3.create_bucket(Bucket=BUCKET_NAME)
    yield s3


@pytest.fixture
def store(dynamodb_table) -> InventoryStore:
    return InventoryStore(DynamoDBHandler(TABLE_NAME, region_name="us-east-1"))


@pytest.fixture
def blob_storage(photo_bucket) -> BlobStorage:
    return BlobStorage(BUCKET_NAME, region_name="us-east-1")


# Registry fixtures
@pytest.fixture
def benzene_payload() -> Dict[str, Any]:
    """Detail record for benzene as returned by the registry."""
    return {
        "uri": "substance/pt/71432",
        "rn": BENZENE_RN,
        "name": "Benzene",
        "images": ["<svg width=\"100\" height=\"100\"></svg>"],
        "inchi": "InChI=1S/C6H6/c1-2-4-6-5-3-1/h1-6H",
        "inchiKey": "InChIKey=UHOVQNZJYSORNB-UHFFFAOYSA-N",
        "smile": "c1ccccc1",
        "canonicalSmile": "C=1C=CC=CC1",
        "molecularFormula": "C<sub>6</sub>H<sub>6</sub>",
        "molecularMass": "78.11",
        "experimentalProperties": [
            {"name": "Boiling Point", "property": "80.0 °C", "sourceNumber": 1},
            {"name": "Melting Point", "property": "5.5 °C", "sourceNumber": 2},
        ],
        "predictedProperties": None,
        "propertyCitations": [
            {"docUri": "", "sourceNumber": 1, "source": "Haynes, CRC Handbook of Chemistry and Physics"},
            {"docUri": "", "sourceNumber": 2, "source": "PhysProp data"},
        ],
        "synonyms": ["Benzene", "Benzol", "Cyclohexatriene"],
        "replacedRns": [],
        "hasMolfile": True,
    }


@pytest.fixture
def registry_requests() -> List[httpx.Request]:
    """Requests received by the fake registry."""
    return []


@pytest.fixture
def registry_http_factory(registry_requests) -> Callable[..., httpx.Client]:
    """Build an httpx client whose transport answers with the given handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            registry_requests.append(request)
            return handler(request)

        return httpx.Client(base_url=REGISTRY_BASE_URL, transport=httpx.MockTransport(recording_handler))

    return factory


@pytest.fixture
def registry_http_client(registry_http_factory, benzene_payload) -> httpx.Client:
    """Fake registry that knows benzene only."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("cas_rn") == BENZENE_RN:
            return httpx.Response(200, json=benzene_payload)
        return httpx.Response(404, json={"message": "Detail not found"})

    return registry_http_factory(handler)


@pytest.fixture
def registry_client(registry_http_client) -> RegistryClient:
    return RegistryClient(api_key="test-api-key", http_client=registry_http_client)


@pytest.fixture
def dependencies(dynamodb_table, photo_bucket, registry_http_client) -> Dependencies:
    """Collaborators wired against moto and the fake registry."""
    return build_dependencies(get_handler_env_vars(), http_client=registry_http_client)


# Lambda fixtures
@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = "512"
    context.remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


@pytest.fixture
def api_gateway_event() -> Callable[..., Dict[str, Any]]:
    """Build API Gateway REST proxy events for testing."""

    def build(
        method: str,
        path: str,
        body: Any = None,
        query: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        event_headers = {
            "Content-Type": "application/json",
            "Origin": "https://inventory.example.com",
            "User-Agent": "test-agent/1.0",
        }
        event_headers.update(headers or {})
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)

        return {
            "resource": path,
            "httpMethod": method,
            "path": path,
            "headers": event_headers,
            "multiValueHeaders": None,
            "body": body,
            "requestContext": {
                "requestId": "test-request-id-123",
                "accountId": "123456789012",
                "stage": "test",
                "httpMethod": method,
                "path": path,
                "resourcePath": path,
                "protocol": "HTTP/1.1",
                "requestTime": "2024-01-01T12:00:00.000Z",
                "requestTimeEpoch": 1704110400000,
                "identity": {
                    "sourceIp": "127.0.0.1",
                    "userAgent": "test-agent/1.0",
                },
            },
            "pathParameters": None,
            "queryStringParameters": query,
            "multiValueQueryStringParameters": {k: [v] for k, v in query.items()} if query else None,
            "stageVariables": None,
            "isBase64Encoded": False,
        }

    return build


def response_headers(response: Dict[str, Any]) -> Dict[str, str]:
    """Flatten single and multi-value response headers, lower-casing names."""
    headers = {name.lower(): value for name, value in (response.get("headers") or {}).items()}
    for name, values in (response.get("multiValueHeaders") or {}).items():
        headers[name.lower()] = values[-1] if isinstance(values, list) else values
    return headers


@pytest.fixture
def get_response_headers():
    return response_headers


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
