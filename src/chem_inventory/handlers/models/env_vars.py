"""
Environment variable models for type-safe configuration.

The handlers read their configuration once per execution context through
aws-lambda-env-modeler, which validates the process environment against the
pydantic model below and caches the parsed result.
"""

from typing import Annotated, Literal, Optional

from aws_lambda_env_modeler import get_environment_variables
from pydantic import BaseModel, Field


class HandlerEnvVars(BaseModel):
    """Environment variables for the inventory Lambda handlers."""

    # Single DynamoDB table holding substances, inventory and locations
    INVENTORY_TABLE_NAME: Annotated[str, Field(
        min_length=1,
        description='DynamoDB table name for inventory storage',
    )]

    # S3 bucket for reagent photos
    PHOTO_BUCKET_NAME: Annotated[str, Field(
        min_length=1,
        description='S3 bucket receiving uploaded reagent photos',
    )]

    PHOTO_PUBLIC_BASE_URL: Annotated[Optional[str], Field(
        default=None,
        description='Public base URL for photos; defaults to the S3 virtual-hosted URL',
    )] = None

    AWS_REGION: Annotated[str, Field(
        default='us-east-1',
        description='AWS region for service deployment',
    )] = 'us-east-1'

    DYNAMODB_ENDPOINT: Annotated[Optional[str], Field(
        default=None,
        description='DynamoDB endpoint override for local testing',
    )] = None

    S3_ENDPOINT: Annotated[Optional[str], Field(
        default=None,
        description='S3 endpoint override for local testing',
    )] = None

    # CAS Common Chemistry registry
    REGISTRY_BASE_URL: Annotated[str, Field(
        default='https://commonchemistry.cas.org/api',
        description='Base URL of the chemistry registry API',
    )] = 'https://commonchemistry.cas.org/api'

    REGISTRY_API_KEY: Annotated[str, Field(
        default='',
        description='API key for the chemistry registry',
    )] = ''

    REGISTRY_API_KEY_LOCATION: Annotated[Literal['header', 'query'], Field(
        default='header',
        description='Send the registry API key as X-API-KEY header or apikey query parameter',
    )] = 'header'

    REGISTRY_TIMEOUT_SECONDS: Annotated[float, Field(
        default=10.0,
        gt=0,
        le=60,
        description='Timeout for a single registry request',
    )] = 10.0

    # API Gateway settings
    CORS_ALLOW_ORIGIN: Annotated[str, Field(
        default='*',
        description='CORS allowed origin for API responses',
    )] = '*'

    API_BEARER_TOKEN: Annotated[Optional[str], Field(
        default=None,
        description='Static bearer credential required on every request when set',
    )] = None

    MAX_CONCURRENCY: Annotated[int, Field(
        default=4,
        ge=1,
        le=16,
        description='Worker threads for auxiliary inserts and photo uploads',
    )] = 4

    # Log level for AWS Powertools Logger
    LOG_LEVEL: Annotated[str, Field(
        default='INFO',
        pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$',
        description='Log level for application logging',
    )] = 'INFO'


def get_handler_env_vars() -> HandlerEnvVars:
    """
    Get typed environment variables for the Lambda handlers.

    Returns:
        Validated environment variables model instance
    """
    return get_environment_variables(model=HandlerEnvVars)
