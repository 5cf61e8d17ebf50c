"""Pydantic schemas for catalog items, tenants and locale settings."""
