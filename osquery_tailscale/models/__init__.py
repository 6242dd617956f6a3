"""Pydantic domain models and table schema types."""
