"""Presentation layer — Rich tables and JSON output for ServiceResult."""
