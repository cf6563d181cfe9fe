"""
Service Models Package

This package contains all Pydantic models used throughout the service,
including input validation models, output response models, domain models and
the chemistry registry payload schema.
"""

from .input import InventoryDetails, RegisterCabinetRequest, RegisterInventoryRequest
from .inventory import PHOTO_SIZES, InventoryItem
from .location import Area, Cabinet
from .output import (
    CabinetDeletionOutput,
    CabinetRegistrationOutput,
    LocationDataOutput,
    RegistrationResult,
)
from .substance import (
    AuxiliaryKind,
    RegistryCitation,
    RegistryProperty,
    RegistrySubstance,
    Substance,
)

__all__ = [
    # Input models
    "InventoryDetails",
    "RegisterCabinetRequest",
    "RegisterInventoryRequest",

    # Output models
    "CabinetDeletionOutput",
    "CabinetRegistrationOutput",
    "LocationDataOutput",
    "RegistrationResult",

    # Domain models
    "PHOTO_SIZES",
    "InventoryItem",
    "Area",
    "Cabinet",
    "AuxiliaryKind",
    "Substance",

    # Registry schema
    "RegistryCitation",
    "RegistryProperty",
    "RegistrySubstance",
]
