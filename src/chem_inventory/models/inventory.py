"""
InventoryItem domain model.

One InventoryItem is a physical bottle or sample referencing exactly one
Substance. Photo URLs are filled in after creation, once uploads succeed.
"""

from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field

# Photo resolutions, in pixels, accepted on registration
PHOTO_SIZES = (320, 160)


class InventoryItem(BaseModel):
    """Physical bottle record."""

    id: Annotated[int, Field(description='Internal inventory key')]
    substance_id: Annotated[int, Field(description='Key of the referenced substance')]
    bottle_identifier: Annotated[str, Field(
        description='Unique human-traceable bottle token',
        examples=['71-43-2-3f2a6c1e-8d4b-4a7e-9a51-0c7f2b9d1e44'],
    )]

    initial_amount: Optional[float] = None
    current_amount: Optional[float] = None
    unit: Optional[str] = None

    location_area: Optional[str] = None
    cabinet_id: Optional[int] = None
    door_vertical: Optional[Union[int, str]] = None
    door_horizontal: Optional[Union[int, str]] = None
    internal_shelf_level: Optional[Union[int, str]] = None
    storage_column: Optional[Union[int, str]] = None

    classification: Optional[str] = None
    state: Optional[str] = None
    concentration_value: Optional[float] = None
    concentration_unit: Optional[str] = None
    manufacturer: Optional[str] = None
    purchase_date: Optional[str] = None

    photo_url_320: Optional[str] = None
    photo_url_160: Optional[str] = None
