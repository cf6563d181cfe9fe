"""
Inventory store: entity-level access to the single inventory table.

Item layout (pk / sk / GSI1):

- Substance:   ``CAS#<cas_rn>``          / ``SUBSTANCE``
- Auxiliary:   ``SUBSTANCE#<id>``        / ``<KIND>#<nnnn>``
- Inventory:   ``INVENTORY#<id>``        / ``INVENTORY``, gsi1pk ``SUBSTANCE#<id>``
- Area:        ``AREA#<id>``             / ``AREA``, gsi1pk ``AREA_NAME#<name>``
- Cabinet:     ``CABINET#<id>``          / ``CABINET``, gsi1pk ``AREA#<area_id>``
- Counters:    ``COUNTER#<entity>``      / ``COUNTER``

Integer keys are allocated from the counters, so every entity exposes a
numeric ``id`` like a relational primary key.
"""

from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from chem_inventory.dal.dynamodb_handler import DynamoDBHandler
from chem_inventory.handlers.utils.observability import logger, tracer
from chem_inventory.models.inventory import InventoryItem
from chem_inventory.models.location import Area, Cabinet
from chem_inventory.models.substance import AuxiliaryKind, Substance

GSI1_NAME = 'GSI1'

_ENTITY_FIELDS = ('pk', 'sk', 'gsi1pk', 'gsi1sk', 'entity_type', 'created_at', 'updated_at')


def _strip_keys(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if k not in _ENTITY_FIELDS}


class InventoryStore:
    """Repository for substances, inventory items and storage locations."""

    def __init__(self, db: DynamoDBHandler):
        self.db = db

    # Substances

    @tracer.capture_method
    def find_substance_id(self, cas_rn: str) -> Optional[int]:
        """Return the key of the substance with this identifier, or None when absent."""
        item = self.db.get_item(
            key={'pk': f'CAS#{cas_rn}', 'sk': 'SUBSTANCE'},
            consistent_read=True,
        )
        return int(item['id']) if item else None

    @tracer.capture_method
    def get_substance(self, cas_rn: str) -> Optional[Substance]:
        item = self.db.get_item(key={'pk': f'CAS#{cas_rn}', 'sk': 'SUBSTANCE'}, consistent_read=True)
        return Substance.model_validate(_strip_keys(item)) if item else None

    @tracer.capture_method
    def insert_substance(self, substance: Substance) -> int:
        """
        Insert a substance under a newly allocated key.

        The put is conditional on the identifier item not existing yet, so the
        store itself rejects a second row for the same identifier.

        Raises:
            ConditionalCheckFailedError: If the identifier already exists
            DALError: If the write fails
        """
        substance_id = self.db.increment_counter('substance')
        item = substance.model_dump(exclude={'id'})
        item.update({
            'pk': f'CAS#{substance.cas_rn}',
            'sk': 'SUBSTANCE',
            'entity_type': 'substance',
            'id': substance_id,
        })
        self.db.put_item(item=item, condition_expression='attribute_not_exists(pk)')

        logger.info("Substance inserted", extra={"substance_id": substance_id, "cas_rn": substance.cas_rn})
        return substance_id

    @tracer.capture_method
    def insert_auxiliary_rows(self, substance_id: int, kind: AuxiliaryKind, rows: List[Dict[str, Any]]) -> int:
        """Bulk insert one auxiliary collection for a substance."""
        items = [
            {
                **row,
                'pk': f'SUBSTANCE#{substance_id}',
                'sk': f'{kind.value}#{index:04d}',
                'entity_type': kind.value.lower(),
                'substance_id': substance_id,
            }
            for index, row in enumerate(rows)
        ]
        return self.db.batch_put_items(items)

    @tracer.capture_method
    def list_auxiliary_rows(self, substance_id: int, kind: AuxiliaryKind) -> List[Dict[str, Any]]:
        items = self.db.query_items(
            key_condition=Key('pk').eq(f'SUBSTANCE#{substance_id}') & Key('sk').begins_with(f'{kind.value}#'),
        )
        return [_strip_keys(item) for item in items]

    # Inventory

    @tracer.capture_method
    def insert_inventory(self, fields: Dict[str, Any]) -> int:
        """Insert an inventory record under a newly allocated key and return the key."""
        inventory_id = self.db.increment_counter('inventory')
        item = {
            **fields,
            'id': inventory_id,
            'pk': f'INVENTORY#{inventory_id}',
            'sk': 'INVENTORY',
            'gsi1pk': f"SUBSTANCE#{fields['substance_id']}",
            'gsi1sk': f'INVENTORY#{inventory_id:010d}',
            'entity_type': 'inventory',
        }
        self.db.put_item(item=item, condition_expression='attribute_not_exists(pk)')

        logger.info("Inventory item inserted", extra={
            "inventory_id": inventory_id,
            "substance_id": fields['substance_id'],
        })
        return inventory_id

    @tracer.capture_method
    def update_inventory_photos(self, inventory_id: int, photo_urls: Dict[str, Optional[str]]) -> None:
        """Set the photo URL fields on an existing inventory record."""
        self.db.update_item(
            key={'pk': f'INVENTORY#{inventory_id}', 'sk': 'INVENTORY'},
            set_values=photo_urls,
        )

    @tracer.capture_method
    def get_inventory(self, inventory_id: int) -> Optional[InventoryItem]:
        item = self.db.get_item(key={'pk': f'INVENTORY#{inventory_id}', 'sk': 'INVENTORY'}, consistent_read=True)
        return InventoryItem.model_validate(_strip_keys(item)) if item else None

    @tracer.capture_method
    def list_inventory_for_substance(self, substance_id: int) -> List[InventoryItem]:
        items = self.db.query_items(
            key_condition=Key('gsi1pk').eq(f'SUBSTANCE#{substance_id}'),
            index_name=GSI1_NAME,
        )
        return [InventoryItem.model_validate(_strip_keys(item)) for item in items]

    # Locations

    @tracer.capture_method
    def list_areas(self) -> List[Area]:
        items = self.db.scan_items(filter_expression=Attr('entity_type').eq('area'))
        return sorted((Area.model_validate(_strip_keys(item)) for item in items), key=lambda a: a.id)

    @tracer.capture_method
    def list_cabinets(self) -> List[Cabinet]:
        items = self.db.scan_items(filter_expression=Attr('entity_type').eq('cabinet'))
        return sorted((Cabinet.model_validate(_strip_keys(item)) for item in items), key=lambda c: c.id)

    @tracer.capture_method
    def find_area_by_name(self, name: str) -> Optional[Area]:
        items = self.db.query_items(
            key_condition=Key('gsi1pk').eq(f'AREA_NAME#{name}'),
            index_name=GSI1_NAME,
        )
        return Area.model_validate(_strip_keys(items[0])) if items else None

    @tracer.capture_method
    def insert_area(self, name: str) -> Area:
        area_id = self.db.increment_counter('area')
        self.db.put_item(
            item={
                'pk': f'AREA#{area_id}',
                'sk': 'AREA',
                'gsi1pk': f'AREA_NAME#{name}',
                'gsi1sk': f'AREA#{area_id:010d}',
                'entity_type': 'area',
                'id': area_id,
                'name': name,
            },
            condition_expression='attribute_not_exists(pk)',
        )
        logger.info("Area inserted", extra={"area_id": area_id, "area_name": name})
        return Area(id=area_id, name=name)

    @tracer.capture_method
    def delete_area(self, area_id: int) -> bool:
        return self.db.delete_item(key={'pk': f'AREA#{area_id}', 'sk': 'AREA'})

    @tracer.capture_method
    def list_cabinets_in_area(self, area_id: int) -> List[Cabinet]:
        items = self.db.query_items(
            key_condition=Key('gsi1pk').eq(f'AREA#{area_id}'),
            index_name=GSI1_NAME,
        )
        return [Cabinet.model_validate(_strip_keys(item)) for item in items]

    @tracer.capture_method
    def find_cabinet_in_area(self, area_id: int, name: str) -> Optional[Cabinet]:
        items = self.db.query_items(
            key_condition=Key('gsi1pk').eq(f'AREA#{area_id}') & Key('gsi1sk').eq(f'CABINET#{name}'),
            index_name=GSI1_NAME,
        )
        return Cabinet.model_validate(_strip_keys(items[0])) if items else None

    @tracer.capture_method
    def insert_cabinet(self, cabinet_fields: Dict[str, Any]) -> Cabinet:
        cabinet_id = self.db.increment_counter('cabinet')
        cabinet = Cabinet(id=cabinet_id, **cabinet_fields)
        self.db.put_item(
            item={
                **cabinet.model_dump(),
                'pk': f'CABINET#{cabinet_id}',
                'sk': 'CABINET',
                'gsi1pk': f'AREA#{cabinet.area_id}',
                'gsi1sk': f'CABINET#{cabinet.name}',
                'entity_type': 'cabinet',
            },
            condition_expression='attribute_not_exists(pk)',
        )
        logger.info("Cabinet inserted", extra={"cabinet_id": cabinet_id, "area_id": cabinet.area_id})
        return cabinet

    @tracer.capture_method
    def get_cabinet(self, cabinet_id: int) -> Optional[Cabinet]:
        item = self.db.get_item(key={'pk': f'CABINET#{cabinet_id}', 'sk': 'CABINET'}, consistent_read=True)
        return Cabinet.model_validate(_strip_keys(item)) if item else None

    @tracer.capture_method
    def delete_cabinet(self, cabinet_id: int) -> bool:
        return self.db.delete_item(key={'pk': f'CABINET#{cabinet_id}', 'sk': 'CABINET'})
