"""
Output models for API responses using Pydantic.

Field names on the wire follow the web client's camelCase convention where the
client already expects it; serialize with ``model_dump(by_alias=True)``.
"""

from typing import Annotated, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from chem_inventory.models.location import Area, Cabinet


class RegistrationResult(BaseModel):
    """Result of registering one bottle."""

    model_config = ConfigDict(populate_by_name=True)

    identifier: Annotated[str, Field(description='Registry identifier used', examples=['71-43-2'])]

    status: Annotated[Literal['success'], Field(description='Registration status')] = 'success'

    inventory_key: Annotated[int, Field(
        alias='inventoryKey',
        description='Key of the created inventory record',
        examples=[42],
    )]

    is_new_substance: Annotated[bool, Field(
        alias='isNewSubstance',
        description='Whether the substance was imported by this request',
    )]


class LocationDataOutput(BaseModel):
    """Response model for the location lookup."""

    areas: List[Area]
    cabinets: List[Cabinet]


class CabinetRegistrationOutput(BaseModel):
    """Response model for successful cabinet registration."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal['success'] = 'success'
    cabinet_id: Annotated[int, Field(alias='cabinetId')]
    cabinet_name: Annotated[str, Field(alias='cabinetName')]


class CabinetDeletionOutput(BaseModel):
    """Response model for successful cabinet deletion."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal['success'] = 'success'
    cabinet_id: Annotated[int, Field(alias='cabinetId')]
    area_deleted: Annotated[bool, Field(
        alias='areaDeleted',
        description='True when the owning area became empty and was removed',
    )]

