"""Persistence: DuckDB schema, the Store handle and repository functions."""
