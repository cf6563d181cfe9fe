"""
Storage location models: areas (rooms) and the cabinets inside them.
"""

from typing import Annotated

from pydantic import BaseModel, Field

DEFAULT_DOOR_VERTICAL_COUNT = 1
DEFAULT_DOOR_HORIZONTAL_COUNT = 1
DEFAULT_SHELF_HEIGHT = 3
DEFAULT_STORAGE_COLUMNS = 6


class Area(BaseModel):
    """Storage area, such as a chemical storage room."""

    id: Annotated[int, Field(description='Internal area key')]
    name: Annotated[str, Field(min_length=1, examples=['Chemistry prep room'])]


class Cabinet(BaseModel):
    """Storage cabinet inside an area."""

    id: Annotated[int, Field(description='Internal cabinet key')]
    area_id: Annotated[int, Field(description='Key of the owning area')]
    name: Annotated[str, Field(min_length=1, examples=['Acid cabinet'])]
    shelf_height: int = DEFAULT_SHELF_HEIGHT
    door_vertical_count: int = DEFAULT_DOOR_VERTICAL_COUNT
    door_horizontal_count: int = DEFAULT_DOOR_HORIZONTAL_COUNT
    storage_columns: int = DEFAULT_STORAGE_COLUMNS
