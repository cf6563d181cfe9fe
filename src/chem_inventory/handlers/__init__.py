"""
Lambda handlers for the inventory API.

- ``inventory_handler``: ``GET /locations`` and ``POST /inventory``
- ``cabinets_handler``: ``POST /cabinets`` and ``DELETE /cabinets``
"""
