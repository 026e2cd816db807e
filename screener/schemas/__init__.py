"""Pydantic schemas and enums shared across the screener."""
