"""
Data Access Layer (DAL) for the inventory functions.

This package holds every component that talks to something outside the
process: the DynamoDB inventory table, the S3 photo bucket and the chemistry
registry API.
"""

from chem_inventory.dal.blob_storage import BlobStorage, BlobUploadError
from chem_inventory.dal.dynamodb_handler import ConditionalCheckFailedError, DALError, DynamoDBHandler
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.dal.registry_client import RegistryClient

__all__ = [
    'BlobStorage',
    'BlobUploadError',
    'ConditionalCheckFailedError',
    'DALError',
    'DynamoDBHandler',
    'InventoryStore',
    'RegistryClient',
]
