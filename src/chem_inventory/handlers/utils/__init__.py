"""Shared utilities for the inventory Lambda handlers."""
