"""
Business Logic Layer Module.

This package implements the middle layer of the handler / logic / DAL
architecture: substance resolution, inventory writing, the registration
workflow that chains them, and the storage location operations.
"""

from chem_inventory.logic.batch import BatchOutcome, run_batch
from chem_inventory.logic.inventory_writer import InventoryWriter, InventoryWriteResult
from chem_inventory.logic.location_service import LocationService
from chem_inventory.logic.registration import register_inventory
from chem_inventory.logic.substance_resolver import ResolvedSubstance, SubstanceResolver

__all__ = [
    "BatchOutcome",
    "run_batch",
    "InventoryWriter",
    "InventoryWriteResult",
    "LocationService",
    "register_inventory",
    "ResolvedSubstance",
    "SubstanceResolver",
]
