"""
Construction of the collaborators shared by the Lambda handlers.

Clients are built once per execution context and handed to the logic
components explicitly. Tests replace ``get_dependencies`` in a handler module
with their own ``Dependencies``.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import httpx

from chem_inventory.dal.blob_storage import BlobStorage
from chem_inventory.dal.dynamodb_handler import DynamoDBHandler
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.dal.registry_client import RegistryClient
from chem_inventory.handlers.models.env_vars import HandlerEnvVars, get_handler_env_vars
from chem_inventory.logic.inventory_writer import InventoryWriter
from chem_inventory.logic.location_service import LocationService
from chem_inventory.logic.substance_resolver import SubstanceResolver


@dataclass
class Dependencies:
    """Collaborators used by the handler routes."""

    store: InventoryStore
    blob_storage: BlobStorage
    registry_client: RegistryClient
    resolver: SubstanceResolver
    writer: InventoryWriter
    location_service: LocationService


def build_dependencies(env_vars: HandlerEnvVars, http_client: Optional[httpx.Client] = None) -> Dependencies:
    """
    Wire the store, blob storage and registry client into the logic components.

    Args:
        env_vars: Handler configuration
        http_client: Preconfigured httpx client for the registry (for testing)
    """
    store = InventoryStore(DynamoDBHandler(
        table_name=env_vars.INVENTORY_TABLE_NAME,
        region_name=env_vars.AWS_REGION,
        endpoint_url=env_vars.DYNAMODB_ENDPOINT,
    ))
    blob_storage = BlobStorage(
        bucket_name=env_vars.PHOTO_BUCKET_NAME,
        region_name=env_vars.AWS_REGION,
        endpoint_url=env_vars.S3_ENDPOINT,
        public_base_url=env_vars.PHOTO_PUBLIC_BASE_URL,
    )
    registry_client = RegistryClient(
        api_key=env_vars.REGISTRY_API_KEY,
        base_url=env_vars.REGISTRY_BASE_URL,
        api_key_location=env_vars.REGISTRY_API_KEY_LOCATION,
        timeout_seconds=env_vars.REGISTRY_TIMEOUT_SECONDS,
        http_client=http_client,
    )
    return Dependencies(
        store=store,
        blob_storage=blob_storage,
        registry_client=registry_client,
        resolver=SubstanceResolver(store, registry_client, max_workers=env_vars.MAX_CONCURRENCY),
        writer=InventoryWriter(store, blob_storage, max_workers=env_vars.MAX_CONCURRENCY),
        location_service=LocationService(store),
    )


@lru_cache(maxsize=1)
def get_dependencies() -> Dependencies:
    """Return the collaborators for this execution context, building them on first use."""
    return build_dependencies(get_handler_env_vars())
