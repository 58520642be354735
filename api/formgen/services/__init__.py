"""Ingestion, generation and export services."""
