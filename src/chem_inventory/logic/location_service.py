"""
Storage location operations: lookup, cabinet registration and cabinet deletion.
"""

from typing import Optional

from aws_lambda_powertools.metrics import MetricUnit

from chem_inventory.dal.dynamodb_handler import DALError
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.handlers.utils.errors import (
    DuplicateResourceError,
    ErrorContext,
    PersistenceError,
    ResourceNotFoundError,
)
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.models.input import RegisterCabinetRequest
from chem_inventory.models.output import CabinetDeletionOutput, CabinetRegistrationOutput, LocationDataOutput


class LocationService:
    """Business logic for areas and cabinets."""

    def __init__(self, store: InventoryStore):
        self.store = store

    @tracer.capture_method
    def get_location_data(self, context: Optional[ErrorContext] = None) -> LocationDataOutput:
        """Return every area and every cabinet."""
        try:
            areas = self.store.list_areas()
            cabinets = self.store.list_cabinets()
        except DALError as e:
            raise PersistenceError(message=f"Location lookup failed: {e.message}", context=context) from e

        logger.info("Locations retrieved", extra={"area_count": len(areas), "cabinet_count": len(cabinets)})
        return LocationDataOutput(areas=areas, cabinets=cabinets)

    @tracer.capture_method
    def register_cabinet(
        self,
        request: RegisterCabinetRequest,
        context: Optional[ErrorContext] = None,
    ) -> CabinetRegistrationOutput:
        """
        Register a cabinet, creating its area on first use.

        Raises:
            DuplicateResourceError: If the area already has a cabinet with this name
            PersistenceError: If a write fails
        """
        try:
            area = self.store.find_area_by_name(request.area_name)
            if area is None:
                area = self.store.insert_area(request.area_name)
                metrics.add_metric(name="AreaCreated", unit=MetricUnit.Count, value=1)

            if self.store.find_cabinet_in_area(area.id, request.cabinet_name) is not None:
                raise DuplicateResourceError(
                    resource_type="Cabinet",
                    name=f"{request.area_name}/{request.cabinet_name}",
                    context=context,
                )

            cabinet = self.store.insert_cabinet({
                'area_id': area.id,
                'name': request.cabinet_name,
                'door_vertical_count': request.door_vertical_count,
                'door_horizontal_count': request.door_horizontal_count,
                'shelf_height': request.shelf_height,
                'storage_columns': request.storage_columns,
            })
        except DALError as e:
            raise PersistenceError(message=f"Cabinet registration failed: {e.message}", context=context) from e

        metrics.add_metric(name="CabinetCreated", unit=MetricUnit.Count, value=1)
        return CabinetRegistrationOutput(cabinet_id=cabinet.id, cabinet_name=cabinet.name)

    @tracer.capture_method
    def delete_cabinet(self, cabinet_id: int, context: Optional[ErrorContext] = None) -> CabinetDeletionOutput:
        """
        Delete a cabinet and, when it was the last one, its area.

        Raises:
            ResourceNotFoundError: If the cabinet does not exist
            PersistenceError: If a delete fails
        """
        try:
            cabinet = self.store.get_cabinet(cabinet_id)
            if cabinet is None:
                raise ResourceNotFoundError(resource_type="Cabinet", resource_id=str(cabinet_id), context=context)

            self.store.delete_cabinet(cabinet_id)

            # The index may still list the deleted cabinet for a moment
            remaining = [c for c in self.store.list_cabinets_in_area(cabinet.area_id) if c.id != cabinet_id]
            area_deleted = False
            if not remaining:
                area_deleted = self.store.delete_area(cabinet.area_id)
        except DALError as e:
            raise PersistenceError(message=f"Cabinet deletion failed: {e.message}", context=context) from e

        metrics.add_metric(name="CabinetDeleted", unit=MetricUnit.Count, value=1)
        logger.info("Cabinet deleted", extra={
            "cabinet_id": cabinet_id,
            "area_id": cabinet.area_id,
            "area_deleted": area_deleted,
        })
        return CabinetDeletionOutput(cabinet_id=cabinet_id, area_deleted=area_deleted)
