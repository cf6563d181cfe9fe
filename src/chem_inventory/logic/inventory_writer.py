"""
Inventory writer: persists one bottle record and attaches its photos.

The inventory insert is the last fatal step of a registration. Photo uploads
and the URL back-fill that follow it only ever degrade the result.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from aws_lambda_powertools.metrics import MetricUnit

from chem_inventory.dal.blob_storage import BlobStorage
from chem_inventory.dal.dynamodb_handler import DALError
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.handlers.utils.errors import ErrorContext, PersistenceError
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.logic.batch import DEFAULT_MAX_WORKERS, BatchOutcome, run_batch
from chem_inventory.models.input import InventoryDetails
from chem_inventory.models.inventory import PHOTO_SIZES


@dataclass
class InventoryWriteResult:
    """Outcome of writing one inventory record."""

    inventory_id: int
    bottle_identifier: str
    photo_urls: Dict[str, Optional[str]] = field(default_factory=dict)
    upload_outcomes: List[BatchOutcome] = field(default_factory=list)
    photo_urls_persisted: bool = False


def generate_bottle_identifier(cas_rn: str) -> str:
    """Build a unique bottle token from the identifier and a random UUID."""
    return f"{cas_rn}-{uuid4()}"


def photo_object_key(inventory_id: int, cas_rn: str, size: int) -> str:
    return f"{inventory_id}_{cas_rn}_{size}.png"


def decode_photo(payload: str) -> bytes:
    """
    Decode a base64 photo, given either as a data URL or as bare base64.

    Raises:
        ValueError: If the payload is not valid base64 or is empty
    """
    encoded = payload.split(',', 1)[1] if payload.startswith('data:') else payload
    try:
        data = base64.b64decode(encoded.strip(), validate=True)
    except binascii.Error as e:
        raise ValueError(f"photo payload is not valid base64: {e}") from e
    if not data:
        raise ValueError("photo payload is empty")
    return data


class InventoryWriter:
    """Writes inventory records and their photos."""

    def __init__(
        self,
        store: InventoryStore,
        blob_storage: BlobStorage,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.store = store
        self.blob_storage = blob_storage
        self.max_workers = max_workers

    @tracer.capture_method
    def write(
        self,
        substance_id: int,
        cas_rn: str,
        details: InventoryDetails,
        context: Optional[ErrorContext] = None,
    ) -> InventoryWriteResult:
        """
        Insert the inventory record, then upload photos and back-fill their URLs.

        Args:
            substance_id: Key of the resolved substance
            cas_rn: Registry identifier, used for the bottle token and photo paths
            details: Bottle attributes and optional photos
            context: Error context for tracing

        Returns:
            Inventory key, photo URLs that were obtained and per-upload outcomes

        Raises:
            PersistenceError: If the inventory insert fails
        """
        bottle_identifier = generate_bottle_identifier(cas_rn)
        fields = {
            'substance_id': substance_id,
            'bottle_identifier': bottle_identifier,
            'initial_amount': details.purchase_volume,
            'current_amount': details.current_amount,
            'unit': details.unit,
            'location_area': details.location_area,
            'cabinet_id': details.cabinet_id,
            'door_vertical': details.door_vertical,
            'door_horizontal': details.door_horizontal,
            'internal_shelf_level': details.internal_shelf_level,
            'storage_column': details.storage_columns,
            'classification': details.classification,
            'state': details.state,
            'concentration_value': details.concentration_value,
            'concentration_unit': details.concentration_unit,
            'manufacturer': details.manufacturer,
            'purchase_date': details.purchase_date.isoformat() if details.purchase_date else None,
            **{f'photo_url_{size}': None for size in PHOTO_SIZES},
        }

        try:
            inventory_id = self.store.insert_inventory(fields)
        except DALError as e:
            logger.warning("Inventory insert failed; resolved substance is kept", extra={
                "substance_id": substance_id,
                "cas_rn": cas_rn,
            })
            raise PersistenceError(message=f"Inventory insert failed: {e.message}", context=context) from e

        metrics.add_metric(name="InventoryCreated", unit=MetricUnit.Count, value=1)
        result = InventoryWriteResult(inventory_id=inventory_id, bottle_identifier=bottle_identifier)

        photos = details.photo_payloads()
        if not photos:
            return result

        tasks: Dict[str, Callable[[], Any]] = {
            f'photo_url_{size}': self._upload_task(inventory_id, cas_rn, size, payload)
            for size, payload in photos.items()
        }
        result.upload_outcomes = run_batch(tasks, failure_metric="PhotoUploadFailure", max_workers=self.max_workers)

        result.photo_urls = {
            outcome.name: self.blob_storage.public_url(outcome.value)
            for outcome in result.upload_outcomes
            if outcome.succeeded
        }
        failed = [outcome.to_dict() for outcome in result.upload_outcomes if not outcome.succeeded]
        if failed:
            logger.error("Photo uploads partially failed", extra={"inventory_id": inventory_id, "failed": failed})

        if result.photo_urls:
            try:
                self.store.update_inventory_photos(inventory_id, result.photo_urls)
                result.photo_urls_persisted = True
            except DALError as e:
                metrics.add_metric(name="PhotoUrlUpdateFailure", unit=MetricUnit.Count, value=1)
                logger.error("Photo URL update failed", extra={"inventory_id": inventory_id, "error": e.message})

        return result

    def _upload_task(self, inventory_id: int, cas_rn: str, size: int, payload: str):
        def upload() -> str:
            data = decode_photo(payload)
            return self.blob_storage.upload(photo_object_key(inventory_id, cas_rn, size), data)
        return upload
