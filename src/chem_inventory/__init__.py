"""
Chemical Inventory Service Module.

This package implements the inventory Lambda functions following the
three-layer architecture pattern:

- handlers: API handlers and entry points
- logic: Substance resolution, inventory writing and location operations
- dal: DynamoDB, S3 and chemistry registry access
- models: Data models and schemas
"""

__version__ = "1.0.0"
__description__ = "Chemical inventory registration with CAS registry import"
