"""
Input models for request validation using Pydantic.

This module defines the request bodies accepted by the inventory and cabinet
handlers. Blank strings coming from the web form are treated as absent values.
"""

from datetime import date
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chem_inventory.models.inventory import PHOTO_SIZES
from chem_inventory.models.location import (
    DEFAULT_DOOR_HORIZONTAL_COUNT,
    DEFAULT_DOOR_VERTICAL_COUNT,
    DEFAULT_SHELF_HEIGHT,
    DEFAULT_STORAGE_COLUMNS,
)


class InventoryDetails(BaseModel):
    """Attributes of the bottle being registered."""

    model_config = ConfigDict(extra='ignore', allow_inf_nan=False)

    purchase_volume: Annotated[Optional[float], Field(
        default=None,
        ge=0,
        description='Initial amount in the bottle',
        examples=[500.0],
    )] = None

    current_amount: Annotated[Optional[float], Field(default=None, ge=0)] = None
    unit: Annotated[Optional[str], Field(default=None, max_length=20, examples=['mL', 'g'])] = None

    location_area: Optional[str] = None
    cabinet_id: Optional[int] = None
    door_vertical: Optional[Union[int, str]] = None
    door_horizontal: Optional[Union[int, str]] = None
    internal_shelf_level: Optional[Union[int, str]] = None
    storage_columns: Optional[Union[int, str]] = None

    classification: Optional[str] = None
    state: Annotated[Optional[str], Field(default=None, examples=['liquid', 'solid'])] = None
    concentration_value: Optional[float] = None
    concentration_unit: Optional[str] = None
    manufacturer: Optional[str] = None
    purchase_date: Optional[date] = None

    photo_320_base64: Annotated[Optional[str], Field(
        default=None,
        description='320px photo as a base64 data URL',
    )] = None

    photo_160_base64: Annotated[Optional[str], Field(
        default=None,
        description='160px photo as a base64 data URL',
    )] = None

    @field_validator('*', mode='before')
    @classmethod
    def blank_as_none(cls, v):
        """Treat empty form values as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def photo_payloads(self) -> dict[int, str]:
        """Return the supplied photo payloads keyed by resolution."""
        payloads = {}
        for size in PHOTO_SIZES:
            payload = getattr(self, f'photo_{size}_base64')
            if payload:
                payloads[size] = payload
        return payloads


class RegisterInventoryRequest(BaseModel):
    """Request model for importing a substance and registering a bottle."""

    model_config = ConfigDict(populate_by_name=True)

    cas_rns: Annotated[List[str], Field(
        alias='casRns',
        min_length=1,
        description='Registry identifiers; only the first one is used',
        examples=[['71-43-2']],
    )]

    inventory_details: Annotated[InventoryDetails, Field(
        alias='inventoryDetails',
        description='Bottle attributes',
    )]

    @field_validator('cas_rns')
    @classmethod
    def validate_cas_rns(cls, v: List[str]) -> List[str]:
        """Validate that the first identifier is usable."""
        cleaned = [rn.strip() for rn in v]
        if not cleaned[0]:
            raise ValueError('casRns[0] must be a non-empty identifier')
        return cleaned

    @property
    def cas_rn(self) -> str:
        return self.cas_rns[0]


class RegisterCabinetRequest(BaseModel):
    """Request model for registering a storage cabinet."""

    area_name: Annotated[str, Field(
        min_length=1,
        max_length=100,
        description='Name of the area; created on first use',
        examples=['Chemistry prep room'],
    )]

    cabinet_name: Annotated[str, Field(
        min_length=1,
        max_length=100,
        description='Name of the cabinet inside the area',
        examples=['Acid cabinet'],
    )]

    door_vertical_count: Annotated[int, Field(default=DEFAULT_DOOR_VERTICAL_COUNT, ge=1)] = DEFAULT_DOOR_VERTICAL_COUNT
    door_horizontal_count: Annotated[int, Field(default=DEFAULT_DOOR_HORIZONTAL_COUNT, ge=1)] = DEFAULT_DOOR_HORIZONTAL_COUNT
    shelf_height: Annotated[int, Field(default=DEFAULT_SHELF_HEIGHT, ge=1)] = DEFAULT_SHELF_HEIGHT
    storage_columns: Annotated[int, Field(default=DEFAULT_STORAGE_COLUMNS, ge=1)] = DEFAULT_STORAGE_COLUMNS

    @field_validator('area_name', 'cabinet_name', mode='before')
    @classmethod
    def strip_name(cls, v):
        """Names must be strings; surrounding whitespace is dropped."""
        if not isinstance(v, str):
            raise ValueError('must be a string')
        return v.strip()

    @field_validator(
        'door_vertical_count', 'door_horizontal_count', 'shelf_height', 'storage_columns',
        mode='before',
    )
    @classmethod
    def missing_count_as_default(cls, v, info):
        """Zero or null counts fall back to the layout defaults."""
        if v in (None, 0, ''):
            return cls.model_fields[info.field_name].default
        return v
