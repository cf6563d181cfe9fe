"""Handler configuration models."""
